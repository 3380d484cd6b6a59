"""
Redemption service.
Exchanges points for prizes: debit on request, refund on refusal.
"""
import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from prisma_points.models import Redemption
from prisma_points.repositories.activity_repository import RedemptionRepository
from prisma_points.repositories.catalog_repository import PrizeRepository
from prisma_points.repositories.settings_repository import SettingsRepository
from prisma_points.repositories.user_repository import UserRepository
from prisma_points.services.date_service import DateService
from prisma_points.services.ledger_service import LedgerService
from prisma_points.constants import (
    REDEMPTION_STATUS_PENDING,
    REDEMPTION_STATUS_APPROVED,
    REDEMPTION_STATUS_REFUSED,
)
from prisma_points.exceptions import (
    InsufficientPointsException,
    NotFoundException,
    PrizesLockedException,
    RedemptionAlreadyResolvedException,
    ValidationException,
)

logger = logging.getLogger("prisma_points.redemptions")


class RedemptionService:
    """Service for prize redemptions"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RedemptionRepository()
        self.prize_repo = PrizeRepository()
        self.user_repo = UserRepository()
        self.settings_repo = SettingsRepository()
        self.ledger = LedgerService(db)

    def request(self, user_id: int, prize_id: int, target_date: Optional[date] = None) -> Redemption:
        """
        Request a prize, debiting its cost right away.

        The redemption waits for approval; a refusal gives the points back.

        Raises:
            NotFoundException: unknown user or prize
            PrizesLockedException: the store is locked
            InsufficientPointsException: balance below the prize cost
        """
        if not self.user_repo.get_by_id(self.db, user_id):
            raise NotFoundException("User", user_id)
        prize = self.prize_repo.get_by_id(self.db, prize_id)
        if not prize:
            raise NotFoundException("Prize", prize_id)

        settings = self.settings_repo.get(self.db)
        if settings.prizes_locked:
            logger.warning(f"Refused redemption of prize {prize_id} by user {user_id}: store locked")
            raise PrizesLockedException()

        # Locked read so the balance checked is the one debited
        user = self.user_repo.get_for_update(self.db, user_id)
        balance = user.points
        if balance < prize.cost:
            logger.warning(f"Refused redemption of prize {prize_id} by user {user_id}: {balance} < {prize.cost}")
            self.db.rollback()
            raise InsufficientPointsException(user_id, balance, prize.cost)

        redemption = Redemption(
            user_id=user_id,
            prize_id=prize_id,
            request_date=target_date or DateService.today(),
            status=REDEMPTION_STATUS_PENDING,
            points_spent=prize.cost
        )

        try:
            self.repo.add(self.db, redemption)
            self.ledger.debit(user_id, prize.cost, f"redemption {redemption.id} of prize {prize_id}")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(redemption)
        logger.info(f"User {user_id} requested prize {prize_id} (redemption {redemption.id})")
        return redemption

    def resolve(self, redemption_id: int, status: str, target_date: Optional[date] = None) -> Redemption:
        """
        Approve or refuse a pending redemption.

        Approval keeps the debit; refusal credits points_spent back.

        Raises:
            NotFoundException: unknown redemption
            RedemptionAlreadyResolvedException: already approved or refused
            ValidationException: status is not approved/refused
        """
        if status not in (REDEMPTION_STATUS_APPROVED, REDEMPTION_STATUS_REFUSED):
            raise ValidationException("status", f"must be {REDEMPTION_STATUS_APPROVED} or {REDEMPTION_STATUS_REFUSED}")

        redemption = self.repo.get_by_id(self.db, redemption_id)
        if not redemption:
            raise NotFoundException("Redemption", redemption_id)
        if redemption.status != REDEMPTION_STATUS_PENDING:
            logger.warning(f"Refused {status} of redemption {redemption_id}: already {redemption.status}")
            raise RedemptionAlreadyResolvedException(redemption_id, redemption.status)

        try:
            redemption.status = status
            redemption.approval_date = target_date or DateService.today()
            if status == REDEMPTION_STATUS_REFUSED:
                self.ledger.credit(
                    redemption.user_id,
                    redemption.points_spent,
                    f"redemption {redemption_id} refused"
                )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(redemption)
        logger.info(f"Redemption {redemption_id} {status}")
        return redemption

    def get_pending(self) -> List[Redemption]:
        """Redemptions waiting for an admin decision"""
        return self.repo.get_pending(self.db)

    def get_user_redemptions(self, user_id: int) -> List[Redemption]:
        """Every redemption of a user, newest first"""
        if not self.user_repo.get_by_id(self.db, user_id):
            raise NotFoundException("User", user_id)
        return self.repo.get_for_user(self.db, user_id)
