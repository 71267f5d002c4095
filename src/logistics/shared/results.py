"""Structured outcomes returned at operation boundaries."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, TransactionError, ValidationError
from sqlalchemy.exc import IntegrityError

from logistics.shared.errors import (
    VALIDATION_FAILED,
    ConflictError,
    LogisticsError,
    NotFoundError,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OperationResult:
    ok: bool
    reason_code: str | None = None
    message: str | None = None
    data: Any = None
    details: dict = field(default_factory=dict)

    @classmethod
    def success(cls, data: Any = None) -> "OperationResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, reason_code: str, message: str, details: dict | None = None) -> "OperationResult":
        return cls(ok=False, reason_code=reason_code, message=message, details=details or {})


def format_validation_messages(messages: dict) -> str:
    parts = []
    for field_name, errors in (messages or {}).items():
        if isinstance(errors, (list, tuple)):
            errors = "; ".join(str(e) for e in errors)
        parts.append(f"{field_name}: {errors}")
    return ", ".join(parts) or "Invalid input"


def is_duplicate_key(exc: Exception, field_name: str) -> bool:
    """Whether ``exc`` reports a second row for the unique ``field_name``.

    Protean raises ``ValidationError`` when its pre-insert check finds the row.
    A concurrent insert that slips past that check fails in the database at
    commit, and protean wraps that ``IntegrityError`` in ``TransactionError``.
    """
    if isinstance(exc, ValidationError):
        return field_name in (exc.messages or {})
    if isinstance(exc, TransactionError):
        exc = exc.__cause__
    if isinstance(exc, IntegrityError):
        return field_name in str(exc.orig or exc)
    return False


def translate_persistence_error(exc: Exception) -> LogisticsError | None:
    """Map protean persistence exceptions onto the logistics taxonomy."""
    if isinstance(exc, ExpectedVersionError):
        return ConflictError(f"The record was modified concurrently: {exc}")
    if isinstance(exc, ObjectNotFoundError):
        return NotFoundError("Record not found")
    return None


def capture(operation: Callable[..., Any], *args, **kwargs) -> OperationResult:
    """Run ``operation`` and convert expected failures into an ``OperationResult``.

    Programming errors (unknown audit kinds, broken contracts) propagate.
    """
    try:
        data = operation(*args, **kwargs)
    except ValidationError as exc:
        logger.info("Operation rejected", reason_code=VALIDATION_FAILED, errors=exc.messages)
        return OperationResult.failure(
            VALIDATION_FAILED,
            format_validation_messages(exc.messages),
            details={"errors": exc.messages},
        )
    except LogisticsError as exc:
        logger.info("Operation rejected", reason_code=exc.reason_code, message=exc.message)
        return OperationResult.failure(exc.reason_code, exc.message)
    except (ExpectedVersionError, ObjectNotFoundError) as exc:
        translated = translate_persistence_error(exc)
        logger.info("Operation rejected", reason_code=translated.reason_code, message=translated.message)
        return OperationResult.failure(translated.reason_code, translated.message)
    return OperationResult.success(data)
