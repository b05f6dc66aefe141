class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 400


class NotFoundError(DomainError):
    """Raised when the addressed record does not exist."""

    status_code = 404


class ConflictError(DomainError):
    """Raised when a unique business identifier is already taken."""

    status_code = 409
