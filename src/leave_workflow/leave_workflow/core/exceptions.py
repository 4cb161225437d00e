class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidDateRange(ValidationError):
    """Raised when a leave ends before it starts."""


class EmployeeNotFound(ValidationError):
    """Raised when a submission names an employee that does not exist."""


class InsufficientBalance(ValidationError):
    """Raised when more days are requested than remain in the category."""

    def __init__(self, available: int, requested: int):
        super().__init__(f"Insufficient leave balance. Available: {available}, Requested: {requested}")
        self.available = available
        self.requested = requested


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class Unauthorized(AuthorizationError):
    """Raised when the actor is not the resolved approver for the employee."""


class Forbidden(AuthorizationError):
    """Raised when a user acts on an application that is not theirs."""


class InvalidTransition(DomainError):
    """Raised when an action is not legal from the application's current status."""

    def __init__(self, current, action):
        current_value = getattr(current, "value", current)
        action_value = getattr(action, "value", action)
        super().__init__(f"Cannot {action_value} a leave application in status {current_value}")
        self.current = current
        self.action = action


class NotFound(DomainError):
    """Raised when a looked-up record does not exist."""


class PersistenceFailure(Exception):
    """Raised when the store cannot be reached or a write cannot be committed.

    The caller must not assume the write happened.
    """
