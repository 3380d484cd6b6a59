from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import List, Optional


# User schemas
class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    username: str = Field(..., min_length=1, max_length=100)
    role: str = Field(default="Analyst", pattern="^(Analyst|Admin)$")


class UserCreate(UserBase):
    pass


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    username: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[str] = Field(None, pattern="^(Analyst|Admin)$")


class UserResponse(UserBase):
    id: int
    points: int

    class Config:
        from_attributes = True


# Action catalog schemas
class ActionBase(BaseModel):
    category: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=500)
    points: int = Field(..., ge=0, le=100000)
    validator: Optional[str] = Field(None, max_length=100)


class ActionCreate(ActionBase):
    pass


class ActionUpdate(BaseModel):
    category: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    points: Optional[int] = Field(None, ge=0, le=100000)
    validator: Optional[str] = Field(None, max_length=100)


class ActionResponse(ActionBase):
    id: int

    class Config:
        from_attributes = True


# Prize catalog schemas
class PrizeBase(BaseModel):
    category: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=500)
    cost: int = Field(..., ge=1, le=1000000)
    benefit: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = None


class PrizeCreate(PrizeBase):
    pass


class PrizeUpdate(BaseModel):
    category: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    cost: Optional[int] = Field(None, ge=1, le=1000000)
    benefit: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = None


class PrizeResponse(PrizeBase):
    id: int

    class Config:
        from_attributes = True


# Mission catalog schemas
class MissionBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    mission_type: str = Field(..., pattern="^(daily|weekly|monthly)$")
    goal_type: str = Field(default="log_action_category", pattern="^(log_action_category)$")
    goal_category: Optional[str] = Field(None, max_length=200)
    goal_count: int = Field(default=1, ge=1, le=1000)
    reward_points: int = Field(default=0, ge=0, le=100000)
    is_global: bool = True


class MissionCreate(MissionBase):
    pass


class MissionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    mission_type: Optional[str] = Field(None, pattern="^(daily|weekly|monthly)$")
    goal_category: Optional[str] = Field(None, max_length=200)
    goal_count: Optional[int] = Field(None, ge=1, le=1000)
    reward_points: Optional[int] = Field(None, ge=0, le=100000)
    is_global: Optional[bool] = None


class MissionResponse(MissionBase):
    id: int

    class Config:
        from_attributes = True


# Special event schemas
class SpecialEventBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    event_type: str = Field(default="double_points_category", pattern="^(double_points_category)$")
    category: Optional[str] = Field(None, max_length=200)
    start_date: date
    end_date: date


class SpecialEventCreate(SpecialEventBase):
    pass


class SpecialEventUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=200)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class SpecialEventResponse(SpecialEventBase):
    id: int

    class Config:
        from_attributes = True


# Admin settings schemas
class SettingsUpdate(BaseModel):
    actions_locked_until: Optional[date] = None
    prizes_locked: Optional[bool] = None


class SettingsResponse(BaseModel):
    id: int
    actions_locked_until: Optional[date] = None
    prizes_locked: bool = False
    updated_at: datetime
    actions_locked: bool = False  # Derived for today

    class Config:
        from_attributes = True


# Logged action schemas
class LoggedActionCreate(BaseModel):
    action_id: int
    notes: str = Field(default="", max_length=1000)


class AdminLogCreate(LoggedActionCreate):
    user_id: int


class ValidationRequest(BaseModel):
    status: str = Field(..., pattern="^(validated|rejected)$")


class LoggedActionResponse(BaseModel):
    id: int
    user_id: int
    action_id: int
    month: str
    notes: str = ""
    status: str
    validation_date: Optional[date] = None
    validator_id: Optional[int] = None
    points_awarded: int = 0
    bonus_points: int = 0
    created_at: datetime

    class Config:
        from_attributes = True


# Redemption schemas
class RedemptionCreate(BaseModel):
    prize_id: int


class RedemptionResolve(BaseModel):
    status: str = Field(..., pattern="^(approved|refused)$")


class RedemptionResponse(BaseModel):
    id: int
    user_id: int
    prize_id: int
    request_date: date
    status: str
    approval_date: Optional[date] = None
    points_spent: int

    class Config:
        from_attributes = True


# Mission progress schemas
class MissionProgressResponse(BaseModel):
    user_id: int
    mission_id: int
    period: str
    progress: int = 0
    status: str
    completed_at: Optional[datetime] = None
    claimed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserMissionResponse(BaseModel):
    mission: MissionResponse
    period: str
    progress: int = 0
    status: str


class MissionClaim(BaseModel):
    period: Optional[str] = None  # Defaults to the mission's current period


# Notification schemas
class NotificationCreate(BaseModel):
    recipient_id: Optional[int] = None  # None = everyone
    message: str = Field(..., min_length=1, max_length=1000)


class NotificationResponse(BaseModel):
    id: int
    sender_id: Optional[int] = None
    recipient_id: Optional[int] = None
    kind: str
    message: str
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True


# Engine results
class MedalProgress(BaseModel):
    points: int
    medal: str
    next_medal: Optional[str] = None
    points_needed: int = 0
    progress: float = 100.0
    tier_start: int = 0


class ValidationResult(BaseModel):
    log: LoggedActionResponse
    points_awarded: int = 0
    bonus_points: int = 0
    medal_before: Optional[str] = None
    medal_after: Optional[str] = None
    medal_upgraded: bool = False
    completed_missions: List[int] = []


class BulkValidationResult(BaseModel):
    user_id: int
    status: str
    processed: int
    points_awarded: int = 0
    bonus_points: int = 0
    medal_before: str
    medal_after: str
    medal_upgraded: bool = False
    completed_missions: List[int] = []


# Report schemas
class LeaderboardEntry(BaseModel):
    rank: int
    user_id: int
    name: str
    monthly_points: int
    medal: str
    points: int


class HistoryEntry(BaseModel):
    month: str
    points_earned: int = 0
    points_redeemed: int = 0
    medal: str
