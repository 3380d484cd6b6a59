from fastapi import FastAPI, Depends, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from datetime import date
import logging
import os
from pathlib import Path

from prisma_points.database import engine, get_db, SessionLocal, Base
from prisma_points import models  # Import all models to register them with Base
from prisma_points.schemas import (
    UserCreate, UserUpdate, UserResponse,
    ActionCreate, ActionUpdate, ActionResponse,
    PrizeCreate, PrizeUpdate, PrizeResponse,
    MissionCreate, MissionUpdate, MissionResponse,
    SpecialEventCreate, SpecialEventUpdate, SpecialEventResponse,
    SettingsUpdate, SettingsResponse,
    LoggedActionCreate, AdminLogCreate, ValidationRequest, LoggedActionResponse,
    RedemptionCreate, RedemptionResolve, RedemptionResponse,
    MissionProgressResponse, UserMissionResponse, MissionClaim,
    NotificationCreate, NotificationResponse,
    MedalProgress, ValidationResult, BulkValidationResult,
    LeaderboardEntry, HistoryEntry,
)
from prisma_points.auth import verify_api_key
from prisma_points import crud
from prisma_points.seed import seed_defaults
from prisma_points.services.bonus_service import BonusService
from prisma_points.services.date_service import DateService
from prisma_points.services.ledger_service import LedgerService
from prisma_points.services.mission_service import MissionService
from prisma_points.services.notification_service import NotificationService
from prisma_points.services.redemption_service import RedemptionService
from prisma_points.services.report_service import ReportService
from prisma_points.services.validation_service import ValidationService
from prisma_points.exceptions import (
    PortalException,
    NotFoundException,
    PermissionDeniedException,
    LogAlreadyResolvedException,
    RedemptionAlreadyResolvedException,
    CatalogItemInUseException,
)
from prisma_points.constants import (
    DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV, CORS_ALLOWED_ORIGINS
)

LOG_DIR = os.getenv("PRISMA_POINTS_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("PRISMA_POINTS_LOG_FILE", "app.log")

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()  # Also log to console
    ]
)

logger = logging.getLogger("prisma_points")

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Prisma Points API",
    description="Points, medals, missions and prizes for the employee rewards portal",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

CONFLICT_EXCEPTIONS = (
    LogAlreadyResolvedException,
    RedemptionAlreadyResolvedException,
    CatalogItemInUseException,
)


@app.exception_handler(PortalException)
async def portal_exception_handler(request: Request, exc: PortalException):
    """Translate refused engine operations into HTTP errors"""
    if isinstance(exc, NotFoundException):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PermissionDeniedException):
        status_code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, CONFLICT_EXCEPTIONS):
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    logger.warning(f"{request.method} {request.url.path} refused: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# Startup event
@app.on_event("startup")
async def startup_event():
    logger.info(f"Prisma Points API started. Logging to: {log_path}")
    db = SessionLocal()
    try:
        seed_defaults(db)
    finally:
        db.close()


# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "Prisma Points API", "status": "active"}


# ===== USERS =====

@app.get("/api/users", response_model=List[UserResponse], dependencies=[Depends(verify_api_key)])
async def get_users(role: Optional[str] = None, db: Session = Depends(get_db)):
    """Get all users, optionally filtered by role"""
    return crud.get_users(db, role)

@app.get("/api/users/{user_id}", response_model=UserResponse, dependencies=[Depends(verify_api_key)])
async def get_user(user_id: int, db: Session = Depends(get_db)):
    """Get a specific user"""
    return crud.get_user(db, user_id)

@app.post("/api/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
async def create_user(user: UserCreate, db: Session = Depends(get_db)):
    """Create a user with a zero balance"""
    return crud.create_user(db, user)

@app.put("/api/users/{user_id}", response_model=UserResponse, dependencies=[Depends(verify_api_key)])
async def update_user(user_id: int, user_update: UserUpdate, db: Session = Depends(get_db)):
    """Update a user's profile"""
    return crud.update_user(db, user_id, user_update)

@app.delete("/api/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(verify_api_key)])
async def delete_user(user_id: int, db: Session = Depends(get_db)):
    """Delete a user without activity"""
    crud.delete_user(db, user_id)

@app.get("/api/users/{user_id}/balance", dependencies=[Depends(verify_api_key)])
async def get_balance(user_id: int, db: Session = Depends(get_db)):
    """Get a user's spendable points"""
    return {"user_id": user_id, "points": LedgerService(db).get_balance(user_id)}


# ===== ACTION CATALOG =====

@app.get("/api/actions", response_model=List[ActionResponse], dependencies=[Depends(verify_api_key)])
async def get_actions(db: Session = Depends(get_db)):
    """Get the action catalog"""
    return crud.get_actions(db)

@app.get("/api/actions/by-category", response_model=Dict[str, List[ActionResponse]], dependencies=[Depends(verify_api_key)])
async def get_actions_by_category(db: Session = Depends(get_db)):
    """Get the action catalog grouped by category"""
    return ReportService(db).get_actions_by_category()

@app.get("/api/actions/{action_id}", response_model=ActionResponse, dependencies=[Depends(verify_api_key)])
async def get_action(action_id: int, db: Session = Depends(get_db)):
    """Get a specific action"""
    return crud.get_action(db, action_id)

@app.post("/api/actions", response_model=ActionResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
async def create_action(action: ActionCreate, db: Session = Depends(get_db)):
    """Add an action to the catalog"""
    return crud.create_action(db, action)

@app.put("/api/actions/{action_id}", response_model=ActionResponse, dependencies=[Depends(verify_api_key)])
async def update_action(action_id: int, action_update: ActionUpdate, db: Session = Depends(get_db)):
    """Update a catalog action"""
    return crud.update_action(db, action_id, action_update)

@app.delete("/api/actions/{action_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(verify_api_key)])
async def delete_action(action_id: int, db: Session = Depends(get_db)):
    """Delete a catalog action that was never logged"""
    crud.delete_action(db, action_id)


# ===== PRIZE CATALOG =====

@app.get("/api/prizes", response_model=List[PrizeResponse], dependencies=[Depends(verify_api_key)])
async def get_prizes(db: Session = Depends(get_db)):
    """Get the prize catalog"""
    return crud.get_prizes(db)

@app.get("/api/prizes/by-category", response_model=Dict[str, List[PrizeResponse]], dependencies=[Depends(verify_api_key)])
async def get_prizes_by_category(db: Session = Depends(get_db)):
    """Get the prize catalog grouped by category"""
    return ReportService(db).get_prizes_by_category()

@app.get("/api/prizes/{prize_id}", response_model=PrizeResponse, dependencies=[Depends(verify_api_key)])
async def get_prize(prize_id: int, db: Session = Depends(get_db)):
    """Get a specific prize"""
    return crud.get_prize(db, prize_id)

@app.post("/api/prizes", response_model=PrizeResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
async def create_prize(prize: PrizeCreate, db: Session = Depends(get_db)):
    """Add a prize to the catalog"""
    return crud.create_prize(db, prize)

@app.put("/api/prizes/{prize_id}", response_model=PrizeResponse, dependencies=[Depends(verify_api_key)])
async def update_prize(prize_id: int, prize_update: PrizeUpdate, db: Session = Depends(get_db)):
    """Update a catalog prize"""
    return crud.update_prize(db, prize_id, prize_update)

@app.delete("/api/prizes/{prize_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(verify_api_key)])
async def delete_prize(prize_id: int, db: Session = Depends(get_db)):
    """Delete a catalog prize that was never redeemed"""
    crud.delete_prize(db, prize_id)


# ===== MISSION CATALOG =====

@app.get("/api/missions", response_model=List[MissionResponse], dependencies=[Depends(verify_api_key)])
async def get_missions(db: Session = Depends(get_db)):
    """Get every mission"""
    return crud.get_missions(db)

@app.post("/api/missions", response_model=MissionResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
async def create_mission(mission: MissionCreate, db: Session = Depends(get_db)):
    """Create a mission"""
    return crud.create_mission(db, mission)

@app.put("/api/missions/{mission_id}", response_model=MissionResponse, dependencies=[Depends(verify_api_key)])
async def update_mission(mission_id: int, mission_update: MissionUpdate, db: Session = Depends(get_db)):
    """Update a mission"""
    return crud.update_mission(db, mission_id, mission_update)

@app.delete("/api/missions/{mission_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(verify_api_key)])
async def delete_mission(mission_id: int, db: Session = Depends(get_db)):
    """Delete a mission without recorded progress"""
    crud.delete_mission(db, mission_id)


# ===== SPECIAL EVENTS =====

@app.get("/api/events", response_model=List[SpecialEventResponse], dependencies=[Depends(verify_api_key)])
async def get_events(db: Session = Depends(get_db)):
    """Get every special event"""
    return crud.get_events(db)

@app.get("/api/events/active", response_model=Optional[SpecialEventResponse], dependencies=[Depends(verify_api_key)])
async def get_active_event(target_date: Optional[date] = None, db: Session = Depends(get_db)):
    """Get the special event in force today (or on target_date)"""
    return BonusService(db).get_active_event(target_date)

@app.post("/api/events", response_model=SpecialEventResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
async def create_event(event: SpecialEventCreate, db: Session = Depends(get_db)):
    """Schedule a special event"""
    return crud.create_event(db, event)

@app.put("/api/events/{event_id}", response_model=SpecialEventResponse, dependencies=[Depends(verify_api_key)])
async def update_event(event_id: int, event_update: SpecialEventUpdate, db: Session = Depends(get_db)):
    """Update a special event"""
    return crud.update_event(db, event_id, event_update)

@app.delete("/api/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(verify_api_key)])
async def delete_event(event_id: int, db: Session = Depends(get_db)):
    """Delete a special event"""
    crud.delete_event(db, event_id)


# ===== SETTINGS =====

def _settings_response(settings: models.AdminSettings) -> SettingsResponse:
    response = SettingsResponse.model_validate(settings)
    response.actions_locked = DateService.is_actions_locked(settings)
    return response

@app.get("/api/settings", response_model=SettingsResponse, dependencies=[Depends(verify_api_key)])
async def get_settings(db: Session = Depends(get_db)):
    """Get admin settings"""
    return _settings_response(crud.get_settings(db))

@app.put("/api/settings", response_model=SettingsResponse, dependencies=[Depends(verify_api_key)])
async def update_settings(settings_update: SettingsUpdate, db: Session = Depends(get_db)):
    """Lock or unlock action logging and the prize store"""
    return _settings_response(crud.update_settings(db, settings_update))


# ===== LOGGED ACTIONS =====

@app.post("/api/users/{user_id}/logs", response_model=LoggedActionResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
async def submit_action(user_id: int, log: LoggedActionCreate, db: Session = Depends(get_db)):
    """Log an action for validation"""
    return ValidationService(db).submit(user_id, log.action_id, log.notes)

@app.get("/api/users/{user_id}/logs", response_model=List[LoggedActionResponse], dependencies=[Depends(verify_api_key)])
async def get_user_logs(user_id: int, db: Session = Depends(get_db)):
    """Get every log of a user"""
    return ValidationService(db).get_user_logs(user_id)

@app.get("/api/logs/pending", response_model=List[LoggedActionResponse], dependencies=[Depends(verify_api_key)])
async def get_pending_logs(user_id: Optional[int] = None, db: Session = Depends(get_db)):
    """Get the validation queue, optionally for one user"""
    return ValidationService(db).get_pending(user_id)

@app.get("/api/logs/pending/by-user", response_model=Dict[int, List[LoggedActionResponse]], dependencies=[Depends(verify_api_key)])
async def get_pending_logs_by_user(db: Session = Depends(get_db)):
    """Get the validation queue grouped by user"""
    return ReportService(db).get_pending_by_user()

@app.post("/api/logs/{log_id}/resolve", response_model=ValidationResult, dependencies=[Depends(verify_api_key)])
async def resolve_log(
    log_id: int,
    request: ValidationRequest,
    validator_id: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """Validate or reject a pending log"""
    return ValidationService(db).resolve(log_id, request.status, validator_id)

@app.post("/api/users/{user_id}/logs/resolve-all", response_model=BulkValidationResult, dependencies=[Depends(verify_api_key)])
async def resolve_all_logs(
    user_id: int,
    request: ValidationRequest,
    validator_id: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """Validate or reject every pending log of a user"""
    return ValidationService(db).resolve_all_pending(user_id, request.status, validator_id)

@app.post("/api/admin/logs", response_model=ValidationResult, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
async def admin_log_action(log: AdminLogCreate, actor_id: int, db: Session = Depends(get_db)):
    """Log an already validated action on behalf of a user"""
    return ValidationService(db).admin_log(actor_id, log.user_id, log.action_id, log.notes)


# ===== REDEMPTIONS =====

@app.post("/api/users/{user_id}/redemptions", response_model=RedemptionResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
async def request_redemption(user_id: int, redemption: RedemptionCreate, db: Session = Depends(get_db)):
    """Request a prize, debiting its cost"""
    return RedemptionService(db).request(user_id, redemption.prize_id)

@app.get("/api/users/{user_id}/redemptions", response_model=List[RedemptionResponse], dependencies=[Depends(verify_api_key)])
async def get_user_redemptions(user_id: int, db: Session = Depends(get_db)):
    """Get every redemption of a user"""
    return RedemptionService(db).get_user_redemptions(user_id)

@app.get("/api/redemptions/pending", response_model=List[RedemptionResponse], dependencies=[Depends(verify_api_key)])
async def get_pending_redemptions(db: Session = Depends(get_db)):
    """Get redemptions waiting for approval"""
    return RedemptionService(db).get_pending()

@app.post("/api/redemptions/{redemption_id}/resolve", response_model=RedemptionResponse, dependencies=[Depends(verify_api_key)])
async def resolve_redemption(redemption_id: int, request: RedemptionResolve, db: Session = Depends(get_db)):
    """Approve or refuse a redemption (refusal refunds the points)"""
    return RedemptionService(db).resolve(redemption_id, request.status)


# ===== MISSIONS =====

@app.get("/api/users/{user_id}/missions", response_model=List[UserMissionResponse], dependencies=[Depends(verify_api_key)])
async def get_user_missions(user_id: int, db: Session = Depends(get_db)):
    """Get global missions with the user's current progress"""
    return MissionService(db).get_user_missions(user_id)

@app.post("/api/users/{user_id}/missions/{mission_id}/claim", response_model=MissionProgressResponse, dependencies=[Depends(verify_api_key)])
async def claim_mission(
    user_id: int,
    mission_id: int,
    claim: Optional[MissionClaim] = None,
    db: Session = Depends(get_db)
):
    """Claim the reward of a completed mission"""
    period = claim.period if claim else None
    return MissionService(db).claim_reward(user_id, mission_id, period)


# ===== NOTIFICATIONS =====

@app.get("/api/users/{user_id}/notifications", response_model=List[NotificationResponse], dependencies=[Depends(verify_api_key)])
async def get_notifications(user_id: int, limit: int = 50, db: Session = Depends(get_db)):
    """Get direct and broadcast notifications of a user"""
    return NotificationService(db).get_for_user(user_id, limit)

@app.get("/api/users/{user_id}/notifications/unread-count", dependencies=[Depends(verify_api_key)])
async def get_unread_count(user_id: int, db: Session = Depends(get_db)):
    """Count unread notifications of a user"""
    return {"user_id": user_id, "unread": NotificationService(db).count_unread(user_id)}

@app.post("/api/users/{user_id}/notifications/read", dependencies=[Depends(verify_api_key)])
async def mark_notifications_read(user_id: int, db: Session = Depends(get_db)):
    """Mark every notification of a user as read"""
    return {"user_id": user_id, "marked": NotificationService(db).mark_all_read(user_id)}

@app.post("/api/notifications", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
async def send_notification(notification: NotificationCreate, actor_id: int, db: Session = Depends(get_db)):
    """Admin message to one user, or to everyone when recipient_id is empty"""
    return NotificationService(db).send_message(actor_id, notification.recipient_id, notification.message)


# ===== REPORTS =====

@app.get("/api/reports/leaderboard", response_model=List[LeaderboardEntry], dependencies=[Depends(verify_api_key)])
async def get_leaderboard(db: Session = Depends(get_db)):
    """Analysts ranked by this month's validated points"""
    return ReportService(db).get_leaderboard()

@app.get("/api/users/{user_id}/medal", response_model=MedalProgress, dependencies=[Depends(verify_api_key)])
async def get_medal_progress(user_id: int, db: Session = Depends(get_db)):
    """Current medal and progress towards the next one"""
    return ReportService(db).get_medal_progress(user_id)

@app.get("/api/users/{user_id}/history", response_model=List[HistoryEntry], dependencies=[Depends(verify_api_key)])
async def get_user_history(user_id: int, db: Session = Depends(get_db)):
    """Month-by-month earned and redeemed points"""
    return ReportService(db).get_user_history(user_id)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("prisma_points.main:app", host="0.0.0.0", port=8000, reload=False)
