"""
Point ledger service.
The only place where a user's point balance changes.
"""
import logging
from sqlalchemy.orm import Session

from prisma_points.models import User
from prisma_points.repositories.user_repository import UserRepository
from prisma_points.exceptions import NotFoundException, ValidationException

logger = logging.getLogger("prisma_points.ledger")


class LedgerService:
    """Service for crediting and debiting user balances.

    Changes are staged on the session; the calling engine operation commits.
    """

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository()

    def get_balance(self, user_id: int) -> int:
        """Current balance of a user"""
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise NotFoundException("User", user_id)
        return user.points

    def credit(self, user_id: int, amount: int, reason: str) -> User:
        """Add amount to a user's balance"""
        if amount < 0:
            raise ValidationException("amount", "credit amount must not be negative")
        user = self._lock_user(user_id)
        user.points = (user.points or 0) + amount
        logger.info(f"Credited {amount} points to user {user_id} ({reason}); balance={user.points}")
        return user

    def debit(self, user_id: int, amount: int, reason: str) -> User:
        """
        Subtract amount from a user's balance.

        Affordability is checked by the caller; the ledger does not clamp.
        """
        if amount < 0:
            raise ValidationException("amount", "debit amount must not be negative")
        user = self._lock_user(user_id)
        user.points = (user.points or 0) - amount
        logger.info(f"Debited {amount} points from user {user_id} ({reason}); balance={user.points}")
        return user

    def _lock_user(self, user_id: int) -> User:
        user = self.user_repo.get_for_update(self.db, user_id)
        if not user:
            raise NotFoundException("User", user_id)
        return user
