"""
Notification service.
Fire-and-forget sink for messages shown to users.
"""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from prisma_points.models import Notification, User
from prisma_points.repositories.activity_repository import NotificationRepository
from prisma_points.repositories.user_repository import UserRepository
from prisma_points.constants import NOTIFICATION_MESSAGE, ROLE_ADMIN
from prisma_points.exceptions import NotFoundException, PermissionDeniedException

logger = logging.getLogger("prisma_points.notifications")


class NotificationService:
    """Service for pushing and reading notifications"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository()
        self.user_repo = UserRepository()

    def push(
        self,
        recipient_id: Optional[int],
        message: str,
        kind: str = NOTIFICATION_MESSAGE,
        sender_id: Optional[int] = None
    ) -> Notification:
        """
        Stage a notification (recipient None = everyone).

        The engine never reads these back, it only pushes.
        """
        notification = Notification(
            sender_id=sender_id,
            recipient_id=recipient_id,
            kind=kind,
            message=message
        )
        self.repo.add(self.db, notification)
        logger.info(f"[{kind}] -> {recipient_id if recipient_id is not None else 'all'}: {message}")
        return notification

    def send_message(self, sender_id: int, recipient_id: Optional[int], message: str) -> Notification:
        """Admin message to one user or to everyone"""
        sender = self._get_user(sender_id)
        if sender.role != ROLE_ADMIN:
            raise PermissionDeniedException(sender_id, ROLE_ADMIN)
        if recipient_id is not None:
            self._get_user(recipient_id)

        notification = self.push(recipient_id, message, sender_id=sender_id)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def get_for_user(self, user_id: int, limit: int = 50) -> List[Notification]:
        """Direct and broadcast notifications of a user, newest first"""
        self._get_user(user_id)
        return self.repo.get_for_user(self.db, user_id, limit)

    def count_unread(self, user_id: int) -> int:
        """Unread notifications visible to a user"""
        return self.repo.count_unread(self.db, user_id)

    def mark_all_read(self, user_id: int) -> int:
        """Mark every visible notification as read. Returns how many changed."""
        changed = 0
        for notification in self.repo.get_for_user(self.db, user_id, limit=1000):
            if not notification.read:
                notification.read = True
                changed += 1
        self.db.commit()
        return changed

    def _get_user(self, user_id: int) -> User:
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise NotFoundException("User", user_id)
        return user
