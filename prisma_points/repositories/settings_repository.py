"""
Settings repository - Data access layer for the AdminSettings row.
There is a single row; it is created with everything unlocked on first read.
"""
from typing import Any, Dict
from sqlalchemy.orm import Session

from prisma_points.models import AdminSettings

# Switches that cannot be cleared with None
_NON_NULLABLE = ("prizes_locked",)


class SettingsRepository:
    """Repository for AdminSettings data access"""

    @staticmethod
    def get(db: Session) -> AdminSettings:
        """Get the settings row, creating an unlocked one if missing"""
        settings = db.query(AdminSettings).order_by(AdminSettings.id).first()
        if settings is None:
            settings = AdminSettings(actions_locked_until=None, prizes_locked=False)
            db.add(settings)
            db.commit()
            db.refresh(settings)
        return settings

    @staticmethod
    def apply(db: Session, changes: Dict[str, Any]) -> AdminSettings:
        """
        Apply admin switch changes and commit.

        actions_locked_until=None reopens action logging; a None for
        prizes_locked is ignored.
        """
        settings = SettingsRepository.get(db)
        for key, value in changes.items():
            if value is None and key in _NON_NULLABLE:
                continue
            setattr(settings, key, value)
        db.commit()
        db.refresh(settings)
        return settings
