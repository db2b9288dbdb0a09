"""
Typed errors raised by the service layer.

Route handlers translate these into HTTP responses using ``status_code``.
"""


class SparMatchError(Exception):
    """Base class for all service-layer errors."""

    status_code = 500


class ValidationError(SparMatchError):
    """Malformed input (bad enum value, empty content, invalid coordinates)."""

    status_code = 400


class InvalidFilterError(ValidationError):
    """A partner or gym search filter failed validation."""


class SelfConnectionError(ValidationError):
    """A user tried to connect with themselves."""


class NotFoundError(SparMatchError):
    """A referenced entity does not exist."""

    status_code = 404


class ForbiddenError(SparMatchError):
    """The acting user may not perform this operation."""

    status_code = 403


class ForbiddenTransitionError(ForbiddenError):
    """The requested connection status change is not allowed."""


class DuplicateConnectionError(SparMatchError):
    """A pending or accepted connection already exists between the two users."""

    status_code = 409
