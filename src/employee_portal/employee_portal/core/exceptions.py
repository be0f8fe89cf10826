class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a command targets a record that does not exist."""


class DuplicateEmailError(ValidationError):
    pass


class DuplicateNameError(ValidationError):
    pass


class DuplicateIdError(ValidationError):
    pass


class InvalidLinkError(ValidationError):
    """An employee or request points at a missing (or forbidden) record."""


class DepartmentInUseError(ValidationError):
    pass


class InvalidTransitionError(ValidationError):
    """Request status may only move from pending to approved/rejected."""


class WeakPasswordError(ValidationError):
    pass


class SelfDeleteError(AuthorizationError):
    pass


class SelfLockoutError(AuthorizationError):
    """An admin tried to demote themselves or change their own login email."""


class InvalidCredentialsError(AuthenticationError):
    pass


class NoPendingVerificationError(DomainError):
    pass


class AccountNotFoundError(NotFoundError):
    pass


class VerificationInProgressError(DomainError):
    pass
