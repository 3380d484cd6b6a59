"""
Application constants.
Status codes, catalog discriminators and medal thresholds used across the app.
"""

# User roles
ROLE_ANALYST = "Analyst"
ROLE_ADMIN = "Admin"
USER_ROLES = (ROLE_ANALYST, ROLE_ADMIN)

# Logged action statuses
ACTION_STATUS_PENDING = "pending_validation"
ACTION_STATUS_VALIDATED = "validated"
ACTION_STATUS_REJECTED = "rejected"

# Redemption statuses
REDEMPTION_STATUS_PENDING = "pending_approval"
REDEMPTION_STATUS_APPROVED = "approved"
REDEMPTION_STATUS_REFUSED = "refused"

# Medals (highest first)
MEDAL_DIAMOND = "Diamond"
MEDAL_GOLD = "Gold"
MEDAL_SILVER = "Silver"
MEDAL_BRONZE = "Bronze"

# Inclusive lower bounds of monthly points for each medal, highest first
MEDAL_TIERS = [
    (MEDAL_DIAMOND, 1401),
    (MEDAL_GOLD, 901),
    (MEDAL_SILVER, 551),
    (MEDAL_BRONZE, 0),
]

# Mission cadences
MISSION_DAILY = "daily"
MISSION_WEEKLY = "weekly"
MISSION_MONTHLY = "monthly"
MISSION_TYPES = (MISSION_DAILY, MISSION_WEEKLY, MISSION_MONTHLY)

# Mission goal types
GOAL_LOG_ACTION_CATEGORY = "log_action_category"
GOAL_TYPES = (GOAL_LOG_ACTION_CATEGORY,)

# Mission progress statuses
MISSION_STATUS_IN_PROGRESS = "in_progress"
MISSION_STATUS_COMPLETED = "completed"
MISSION_STATUS_CLAIMED = "claimed"

# Special event types
EVENT_DOUBLE_POINTS_CATEGORY = "double_points_category"
EVENT_TYPES = (EVENT_DOUBLE_POINTS_CATEGORY,)

# Notification kinds
NOTIFICATION_ACTION_VALIDATED = "action_validated"
NOTIFICATION_MISSION_COMPLETED = "mission_completed"
NOTIFICATION_MEDAL_UPGRADED = "medal_upgraded"
NOTIFICATION_ADMIN_LOG = "admin_log"
NOTIFICATION_MESSAGE = "message"

# Logging
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/prisma-points"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"

# CORS
CORS_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]
