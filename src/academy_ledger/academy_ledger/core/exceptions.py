class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or no session exists."""


class AuthorizationError(DomainError):
    """Raised when a staff user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist or is not visible to the actor."""


class ConflictError(DomainError):
    """Raised when a write would violate a uniqueness rule."""
