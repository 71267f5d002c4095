"""Reason-coded failures raised by lifecycle operations.

Each error carries a stable ``reason_code`` that callers and HTTP clients
switch on, plus a human-readable message. Malformed input is reported with
``protean.exceptions.ValidationError`` and the ``VALIDATION_FAILED`` code.
"""

VALIDATION_FAILED = "VALIDATION_FAILED"


class LogisticsError(Exception):
    reason_code = "LOGISTICS_ERROR"

    def __init__(self, message: str, reason_code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if reason_code is not None:
            self.reason_code = reason_code

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.reason_code!r}, {self.message!r})"


class IllegalTransitionError(LogisticsError):
    """The requested status change is not permitted.

    ``reason_code`` is one of ``EDGE_NOT_ALLOWED``, ``TERMINAL_STATE``,
    ``ROLE_NOT_PERMITTED``, ``NOTES_REQUIRED``, ``UNKNOWN_STATUS`` or
    ``UNKNOWN_FAMILY``.
    """

    reason_code = "EDGE_NOT_ALLOWED"


class AuthorizationError(LogisticsError):
    reason_code = "FORBIDDEN"


class NotFoundError(LogisticsError):
    reason_code = "NOT_FOUND"


class ConflictError(LogisticsError):
    """A concurrent write won the race; refetch and retry."""

    reason_code = "CONFLICT"


class PersistenceError(LogisticsError):
    reason_code = "PERSISTENCE_FAILED"


class UnknownEventTypeError(LookupError):
    """An audit event kind outside the family's registry was used.

    This is a programming error and is never converted into a result.
    """


class AuditContractError(ValueError):
    """An audit event was written without its required metadata or notes."""
