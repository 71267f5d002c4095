"""Audit log writer and reader.

``append_event`` is called by every command handler that changes an entity,
inside the handler's unit of work, so the status write and its log record
commit together. It never updates or deletes an existing record.
"""

import json
from datetime import UTC, datetime
from enum import Enum

import structlog
from protean.utils.globals import current_domain
from sqlalchemy.exc import OperationalError

from logistics.audit.event_types import family_of, shape_of
from logistics.audit.log_event import LogEvent
from logistics.domain import custom_setting
from logistics.shared.errors import AuditContractError, PersistenceError

logger = structlog.get_logger(__name__)

_RETRYABLE = (OperationalError, ConnectionError, TimeoutError)


def _status_value(status) -> str | None:
    if status is None:
        return None
    return status.value if isinstance(status, Enum) else str(status)


def _check_contract(event_type: Enum, new_status, metadata: dict, notes: str | None) -> None:
    shape = shape_of(event_type)
    missing = shape.missing_keys(metadata)
    if missing:
        raise AuditContractError(f"{event_type.value} requires metadata {missing}")
    unknown = shape.unknown_keys(metadata)
    if unknown:
        raise AuditContractError(f"{event_type.value} does not accept metadata {unknown}")
    if shape.notes_required and not (notes or "").strip():
        raise AuditContractError(f"{event_type.value} requires notes")
    if shape.status_change and new_status is None:
        raise AuditContractError(f"{event_type.value} records a status change and needs new_status")
    if not shape.status_change and new_status is not None:
        raise AuditContractError(f"{event_type.value} does not change status")


def append_event(
    entity,
    event_type: Enum,
    *,
    old_status=None,
    new_status=None,
    actor_id: str | None = None,
    metadata: dict | None = None,
    notes: str | None = None,
) -> LogEvent:
    """Append one record to ``entity``'s log and advance its sequence.

    ``entity`` must be saved by the caller in the same unit of work; its
    ``log_sequence`` is what keeps records totally ordered.
    """
    family = family_of(event_type)
    metadata = dict(metadata or {})
    _check_contract(event_type, new_status, metadata, notes)

    sequence = (entity.log_sequence or 0) + 1
    entity.log_sequence = sequence

    log_event = LogEvent(
        entity_family=family.value,
        entity_id=str(entity.id),
        sequence=sequence,
        event_type=event_type.value,
        old_status=_status_value(old_status),
        new_status=_status_value(new_status),
        actor_id=actor_id,
        event_metadata=json.dumps(metadata, default=str) if metadata else None,
        notes=notes,
        created_at=datetime.now(UTC),
    )
    return _write(log_event)


def _write(log_event: LogEvent) -> LogEvent:
    repo = current_domain.repository_for(LogEvent)
    attempts = int(custom_setting("AUDIT_WRITE_RETRIES", 3))
    last_error = None
    for attempt in range(1, attempts + 1):
        try:
            return repo.append(log_event)
        except _RETRYABLE as exc:
            last_error = exc
            logger.warning(
                "Audit write failed",
                entity_id=log_event.entity_id,
                sequence=log_event.sequence,
                event_type=log_event.event_type,
                attempt=attempt,
                error=str(exc),
            )
    logger.error(
        "Audit write abandoned after retries",
        entity_id=log_event.entity_id,
        sequence=log_event.sequence,
        attempts=attempts,
    )
    raise PersistenceError(f"Could not record {log_event.event_type} for {log_event.entity_id}") from last_error


def history(entity_id: str) -> list[LogEvent]:
    """Every record of an entity, ordered by sequence."""
    page_size = int(custom_setting("AUDIT_HISTORY_PAGE_SIZE", 500))
    return current_domain.repository_for(LogEvent).for_entity(str(entity_id), page_size)


def replay_status(events: list[LogEvent]) -> str | None:
    """Replay ``new_status`` values in order; the last one is the current status."""
    status = None
    for event in sorted(events, key=lambda e: e.sequence):
        if event.new_status is not None:
            if event.old_status != status:
                raise AuditContractError(
                    f"Log of {event.entity_id} breaks at sequence {event.sequence}: "
                    f"expected {status}, found {event.old_status}"
                )
            status = event.new_status
    return status
