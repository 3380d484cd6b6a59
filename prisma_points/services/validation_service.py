"""
Action validation service.
Moves logged actions through pending -> validated/rejected and applies the
point, mission and medal side effects of a validation.
"""
import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from prisma_points.models import Action, LoggedAction, User
from prisma_points.repositories.activity_repository import LoggedActionRepository
from prisma_points.repositories.catalog_repository import ActionRepository
from prisma_points.repositories.settings_repository import SettingsRepository
from prisma_points.repositories.user_repository import UserRepository
from prisma_points.services.bonus_service import BonusService
from prisma_points.services.date_service import DateService
from prisma_points.services.ledger_service import LedgerService
from prisma_points.services.medal_service import MedalService
from prisma_points.services.mission_service import MissionService
from prisma_points.services.notification_service import NotificationService
from prisma_points.schemas import (
    BulkValidationResult, LoggedActionResponse, ValidationResult
)
from prisma_points.constants import (
    ACTION_STATUS_PENDING,
    ACTION_STATUS_VALIDATED,
    ACTION_STATUS_REJECTED,
    NOTIFICATION_ACTION_VALIDATED,
    NOTIFICATION_ADMIN_LOG,
    NOTIFICATION_MEDAL_UPGRADED,
    ROLE_ADMIN,
)
from prisma_points.exceptions import (
    ActionLoggingLockedException,
    LogAlreadyResolvedException,
    NoPendingActionsException,
    NotFoundException,
    PermissionDeniedException,
    ValidationException,
)

logger = logging.getLogger("prisma_points.validation")

TERMINAL_STATUSES = (ACTION_STATUS_VALIDATED, ACTION_STATUS_REJECTED)


class ValidationService:
    """Service for logging and validating actions"""

    def __init__(self, db: Session):
        self.db = db
        self.log_repo = LoggedActionRepository()
        self.action_repo = ActionRepository()
        self.user_repo = UserRepository()
        self.settings_repo = SettingsRepository()
        self.bonus_service = BonusService(db)
        self.ledger = LedgerService(db)
        self.mission_service = MissionService(db)
        self.notifications = NotificationService(db)

    def submit(
        self,
        user_id: int,
        action_id: int,
        notes: str = "",
        target_date: Optional[date] = None
    ) -> LoggedAction:
        """
        Log an action for the current month, pending validation.

        Raises:
            NotFoundException: unknown user or action
            ActionLoggingLockedException: logging closed by the admin settings
        """
        target_date = target_date or DateService.today()
        self._get_user(user_id)
        self._get_action(action_id)

        settings = self.settings_repo.get(self.db)
        if DateService.is_actions_locked(settings, target_date):
            logger.warning(f"Refused action log by user {user_id}: logging locked")
            raise ActionLoggingLockedException(settings.actions_locked_until)

        log = LoggedAction(
            user_id=user_id,
            action_id=action_id,
            month=DateService.month_key(target_date),
            notes=notes or "",
            status=ACTION_STATUS_PENDING
        )
        self.log_repo.add(self.db, log)
        self.db.commit()
        self.db.refresh(log)
        logger.info(f"User {user_id} logged action {action_id} (log {log.id}) for {log.month}")
        return log

    def resolve(
        self,
        log_id: int,
        status: str,
        validator_id: Optional[int] = None,
        target_date: Optional[date] = None
    ) -> ValidationResult:
        """
        Validate or reject a single pending log.

        Validation credits base + bonus, advances missions and compares the
        monthly medal before and after. The medal comparison uses base
        points only, even though the ledger also receives the bonus.

        Raises:
            NotFoundException: unknown log or validator, or the log's action/user vanished
            LogAlreadyResolvedException: the log is already terminal
            ValidationException: status is not validated/rejected
        """
        self._check_status(status)
        target_date = target_date or DateService.today()
        if validator_id is not None:
            self._get_user(validator_id)

        log = self.log_repo.get_by_id(self.db, log_id)
        if not log:
            raise NotFoundException("LoggedAction", log_id)
        if log.status in TERMINAL_STATUSES:
            logger.warning(f"Refused {status} of log {log_id}: already {log.status}")
            raise LogAlreadyResolvedException(log_id, log.status)

        action = self._get_action(log.action_id)
        self._get_user(log.user_id)

        try:
            if status == ACTION_STATUS_REJECTED:
                self._stamp(log, ACTION_STATUS_REJECTED, validator_id, target_date)
                self.db.commit()
                logger.info(f"Log {log_id} rejected by {validator_id}")
                self.db.refresh(log)
                return ValidationResult(log=LoggedActionResponse.model_validate(log))

            old_points = self.log_repo.get_monthly_base_points(self.db, log.user_id, log.month)
            old_medal = MedalService.get_medal(old_points)

            self._stamp(log, ACTION_STATUS_VALIDATED, validator_id, target_date)
            bonus, completed = self._apply_validation(log, action, target_date)

            new_medal = MedalService.get_medal(old_points + action.points)
            upgraded = MedalService.is_upgrade(old_medal, new_medal)

            self._notify_validated(log, action, bonus, validator_id)
            if upgraded:
                self._notify_medal(log.user_id, new_medal)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(log)
        logger.info(f"Log {log_id} validated by {validator_id}: +{log.points_awarded} (bonus {bonus})")
        return ValidationResult(
            log=LoggedActionResponse.model_validate(log),
            points_awarded=log.points_awarded,
            bonus_points=bonus,
            medal_before=old_medal,
            medal_after=new_medal,
            medal_upgraded=upgraded,
            completed_missions=completed
        )

    def resolve_all_pending(
        self,
        user_id: int,
        status: str,
        validator_id: Optional[int] = None,
        target_date: Optional[date] = None
    ) -> BulkValidationResult:
        """
        Validate or reject every pending log of one user in a single commit.

        Points and missions are applied per log; the current-month medal is
        compared once, before vs. after the whole batch.

        Raises:
            NotFoundException: unknown user or validator, or a log's action vanished
            NoPendingActionsException: nothing is pending for the user
        """
        self._check_status(status)
        target_date = target_date or DateService.today()
        self._get_user(user_id)
        if validator_id is not None:
            self._get_user(validator_id)

        pending = self.log_repo.get_pending(self.db, user_id)
        if not pending:
            raise NoPendingActionsException(user_id)

        # Resolve every action first so a missing one refuses the whole batch
        actions = {log.id: self._get_action(log.action_id) for log in pending}

        month = DateService.month_key(target_date)
        old_medal = MedalService.get_medal(
            self.log_repo.get_monthly_base_points(self.db, user_id, month)
        )

        total_awarded = 0
        total_bonus = 0
        completed: List[int] = []

        try:
            for log in pending:
                self._stamp(log, status, validator_id, target_date)
                if status == ACTION_STATUS_VALIDATED:
                    bonus, done = self._apply_validation(log, actions[log.id], target_date)
                    self._notify_validated(log, actions[log.id], bonus, validator_id)
                    total_awarded += log.points_awarded
                    total_bonus += bonus
                    completed.extend(done)

            self.db.flush()
            new_medal = MedalService.get_medal(
                self.log_repo.get_monthly_base_points(self.db, user_id, month)
            )
            upgraded = MedalService.is_upgrade(old_medal, new_medal)
            if upgraded:
                self._notify_medal(user_id, new_medal)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Bulk {status} of {len(pending)} logs for user {user_id} by {validator_id}: "
            f"+{total_awarded} points"
        )
        return BulkValidationResult(
            user_id=user_id,
            status=status,
            processed=len(pending),
            points_awarded=total_awarded,
            bonus_points=total_bonus,
            medal_before=old_medal,
            medal_after=new_medal,
            medal_upgraded=upgraded,
            completed_missions=completed
        )

    def admin_log(
        self,
        admin_id: int,
        user_id: int,
        action_id: int,
        notes: str = "",
        target_date: Optional[date] = None
    ) -> ValidationResult:
        """
        Log an already validated action on behalf of a user.

        Skips the pending stage and the logging lock, but credits points and
        advances missions exactly like a validation.

        Raises:
            PermissionDeniedException: actor is not an admin
            NotFoundException: unknown admin, user or action
        """
        target_date = target_date or DateService.today()
        admin = self._get_user(admin_id)
        if admin.role != ROLE_ADMIN:
            raise PermissionDeniedException(admin_id, ROLE_ADMIN)
        self._get_user(user_id)
        action = self._get_action(action_id)

        log = LoggedAction(
            user_id=user_id,
            action_id=action_id,
            month=DateService.month_key(target_date),
            notes=notes or ""
        )

        try:
            self.log_repo.add(self.db, log)
            self._stamp(log, ACTION_STATUS_VALIDATED, admin_id, target_date)
            bonus, completed = self._apply_validation(log, action, target_date)

            bonus_text = f" (+{bonus} event bonus!)" if bonus > 0 else ""
            self.notifications.push(
                user_id,
                f'Administrator {admin.name} logged the action "{action.description}" for you, '
                f'adding {log.points_awarded} points{bonus_text}.',
                kind=NOTIFICATION_ADMIN_LOG,
                sender_id=admin_id
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(log)
        logger.info(f"Admin {admin_id} logged action {action_id} for user {user_id}: +{log.points_awarded}")
        return ValidationResult(
            log=LoggedActionResponse.model_validate(log),
            points_awarded=log.points_awarded,
            bonus_points=bonus,
            completed_missions=completed
        )

    def get_pending(self, user_id: Optional[int] = None) -> List[LoggedAction]:
        """Logs awaiting validation"""
        return self.log_repo.get_pending(self.db, user_id)

    def get_user_logs(self, user_id: int) -> List[LoggedAction]:
        """Every log of a user, newest first"""
        self._get_user(user_id)
        return self.log_repo.get_for_user(self.db, user_id)

    def _apply_validation(self, log: LoggedAction, action: Action, target_date: date) -> tuple[int, List[int]]:
        """Credit base + bonus and advance missions. Returns (bonus, completed mission IDs)."""
        bonus = self.bonus_service.get_bonus_points(action, target_date)
        log.bonus_points = bonus
        log.points_awarded = action.points + bonus
        self.ledger.credit(log.user_id, log.points_awarded, f"log {log.id} validated")
        completed = self.mission_service.record_validated_action(log.user_id, action, target_date)
        return bonus, completed

    def _notify_validated(self, log: LoggedAction, action: Action, bonus: int, validator_id: Optional[int]) -> None:
        bonus_text = f" (+{bonus} event bonus!)" if bonus > 0 else ""
        self.notifications.push(
            log.user_id,
            f'Action "{action.description}" validated! +{log.points_awarded} points{bonus_text} credited.',
            kind=NOTIFICATION_ACTION_VALIDATED,
            sender_id=validator_id
        )

    def _notify_medal(self, user_id: int, medal: str) -> None:
        self.notifications.push(
            user_id,
            f"Congratulations! You reached the {medal} medal this month!",
            kind=NOTIFICATION_MEDAL_UPGRADED
        )

    @staticmethod
    def _stamp(log: LoggedAction, status: str, validator_id: Optional[int], target_date: date) -> None:
        log.status = status
        log.validation_date = target_date
        log.validator_id = validator_id

    @staticmethod
    def _check_status(status: str) -> None:
        if status not in TERMINAL_STATUSES:
            raise ValidationException("status", f"must be one of {', '.join(TERMINAL_STATUSES)}")

    def _get_user(self, user_id: int) -> User:
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise NotFoundException("User", user_id)
        return user

    def _get_action(self, action_id: int) -> Action:
        action = self.action_repo.get_by_id(self.db, action_id)
        if not action:
            raise NotFoundException("Action", action_id)
        return action
