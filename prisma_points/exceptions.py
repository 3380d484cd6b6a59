"""
Custom exceptions for the rewards portal.
Every refused operation raises one of these before any state is changed.
"""
from datetime import date


class PortalException(Exception):
    """Base exception for the rewards portal"""
    pass


class NotFoundException(PortalException):
    """Raised when a referenced entity does not exist"""
    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


class PermissionDeniedException(PortalException):
    """Raised when the acting user lacks the required role"""
    def __init__(self, user_id: int, required_role: str):
        self.user_id = user_id
        self.required_role = required_role
        super().__init__(f"User {user_id} must have role {required_role}")


class ValidationException(PortalException):
    """Raised when input data is invalid"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error for {field}: {message}")


class PreconditionException(PortalException):
    """Base for operations refused because of the current state"""
    pass


class ActionLoggingLockedException(PreconditionException):
    """Raised when action logging is locked by the admin settings"""
    def __init__(self, locked_until: date):
        self.locked_until = locked_until
        super().__init__(f"Action logging is locked (closed after {locked_until.isoformat()})")


class PrizesLockedException(PreconditionException):
    """Raised when the prize store is locked by the admin settings"""
    def __init__(self):
        super().__init__("Prize redemption is currently locked")


class InsufficientPointsException(PreconditionException):
    """Raised when a user cannot afford a prize"""
    def __init__(self, user_id: int, balance: int, cost: int):
        self.user_id = user_id
        self.balance = balance
        self.cost = cost
        super().__init__(
            f"User {user_id} has {balance} points, {cost} required"
        )


class LogAlreadyResolvedException(PreconditionException):
    """Raised when validating or rejecting a log that is no longer pending"""
    def __init__(self, log_id: int, status: str):
        self.log_id = log_id
        self.status = status
        super().__init__(f"Logged action {log_id} is already {status}")


class RedemptionAlreadyResolvedException(PreconditionException):
    """Raised when resolving a redemption that is no longer pending"""
    def __init__(self, redemption_id: int, status: str):
        self.redemption_id = redemption_id
        self.status = status
        super().__init__(f"Redemption {redemption_id} is already {status}")


class MissionNotClaimableException(PreconditionException):
    """Raised when claiming a mission that is not completed for the period"""
    def __init__(self, mission_id: int, period: str, status: str):
        self.mission_id = mission_id
        self.period = period
        self.status = status
        super().__init__(
            f"Mission {mission_id} cannot be claimed for {period} (status: {status})"
        )


class NoPendingActionsException(PreconditionException):
    """Raised when a bulk transition finds nothing to process"""
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"No pending actions for user {user_id}")


class CatalogItemInUseException(PreconditionException):
    """Raised when deleting a catalog entry that is still referenced"""
    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} is referenced and cannot be deleted")
