"""Shared steps of every lifecycle command handler.

Handlers of all four families go through the same sequence: load the
entity, check the actor's scope, check the optimistic status guard, validate
the edge, apply it on the aggregate, and append the audit record. The caller
persists the aggregate; protean's unit of work commits it together with the
log record.
"""

from enum import Enum

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from logistics.access.resolver import can_create_for, require_mutate
from logistics.audit.event_types import EVENT_TYPE_ENUMS, shape_of
from logistics.audit.log_event import LogEvent
from logistics.audit.writer import append_event
from logistics.lifecycle.statuses import EntityFamily, parse_status
from logistics.lifecycle.validator import Rejected, validate_transition
from logistics.shared.actor import Actor
from logistics.shared.errors import AuthorizationError, ConflictError, IllegalTransitionError, NotFoundError

logger = structlog.get_logger(__name__)


def load(aggregate_cls, entity_id: str):
    try:
        return current_domain.repository_for(aggregate_cls).get(entity_id)
    except ObjectNotFoundError:
        raise NotFoundError(f"{aggregate_cls.__name__} not found") from None


def check_user_metadata(event_type: Enum, metadata: dict | None, notes: str | None = None) -> None:
    """Reject caller-supplied metadata that does not fit ``event_type``'s shape."""
    shape = shape_of(event_type)
    errors = {}
    missing = shape.missing_keys(metadata)
    if missing:
        errors["metadata"] = [f"Missing keys for {event_type.value}: {', '.join(missing)}"]
    unknown = shape.unknown_keys(metadata)
    if unknown:
        errors.setdefault("metadata", []).append(f"Unexpected keys for {event_type.value}: {', '.join(unknown)}")
    if shape.notes_required and not (notes or "").strip():
        errors["notes"] = [f"{event_type.value} requires notes"]
    if errors:
        raise ValidationError(errors)


def begin_lifecycle(entity, family: EntityFamily, actor: Actor, metadata: dict | None = None) -> LogEvent:
    """Validate creation (the edge into the initial status) and log it."""
    if not can_create_for(actor, entity.client_id):
        raise AuthorizationError(f"Not allowed to create a {family.value.lower()} for this client")
    decision = validate_transition(family, None, entity.status, actor.role)
    if isinstance(decision, Rejected):
        raise IllegalTransitionError(decision.message, decision.reason_code)
    check_user_metadata(decision.event_type, metadata)
    log_event = append_event(
        entity,
        decision.event_type,
        new_status=entity.status,
        actor_id=actor.user_id,
        metadata=metadata,
    )
    logger.info(
        "Lifecycle started",
        family=family.value,
        entity_id=str(entity.id),
        status=entity.status,
        actor_id=actor.user_id,
    )
    return log_event


def apply_transition(
    aggregate_cls,
    family: EntityFamily,
    entity_id: str,
    target_status: Enum | str,
    actor: Actor,
    notes: str | None = None,
    metadata: dict | None = None,
    expected_status: str | None = None,
):
    """Move one entity along its family's graph and record the move."""
    label = aggregate_cls.__name__
    entity = load(aggregate_cls, entity_id)
    require_mutate(actor, entity, label)

    if expected_status and entity.status != expected_status:
        raise ConflictError(f"{label} is {entity.status}, not {expected_status}; refetch and retry")

    decision = validate_transition(family, entity.status, target_status, actor.role, notes)
    if isinstance(decision, Rejected):
        logger.warning(
            "Transition rejected",
            family=family.value,
            entity_id=str(entity_id),
            current_status=entity.status,
            requested_status=target_status.value if isinstance(target_status, Enum) else target_status,
            role=actor.role.value,
            reason_code=decision.reason_code,
        )
        raise IllegalTransitionError(decision.message, decision.reason_code)

    check_user_metadata(decision.event_type, metadata, notes)

    target = parse_status(family, target_status)
    old_status = entity.status
    entity.change_status(target, actor_id=actor.user_id, notes=notes)
    append_event(
        entity,
        decision.event_type,
        old_status=old_status,
        new_status=target,
        actor_id=actor.user_id,
        metadata=metadata,
        notes=notes,
    )
    current_domain.repository_for(aggregate_cls).add(entity)

    logger.info(
        "Transition applied",
        family=family.value,
        entity_id=str(entity.id),
        old_status=old_status,
        new_status=target.value,
        event_type=decision.event_type.value,
        actor_id=actor.user_id,
    )
    return entity


def record_activity(
    entity,
    event_type: Enum,
    actor: Actor,
    metadata: dict | None = None,
    notes: str | None = None,
) -> LogEvent:
    """Log a non-status action (comment, document, payment, schedule change)."""
    require_mutate(actor, entity, type(entity).__name__)
    check_user_metadata(event_type, metadata, notes)
    return append_event(entity, event_type, actor_id=actor.user_id, metadata=metadata, notes=notes)


# Kinds a caller may log directly; the others are written by dedicated commands
FREE_ACTIVITY_KINDS = frozenset(
    {
        "DOCUMENT_UPLOADED",
        "COMMENT_ADDED",
        "SYSTEM_NOTE",
        "ADDRESS_UPDATED",
        "UPDATED",
        "TOKEN_REFRESHED",
        "PAYMENT_METHOD_SET",
    }
)


def log_free_activity(
    aggregate_cls,
    family: EntityFamily,
    entity_id: str,
    kind: str,
    actor: Actor,
    metadata: dict | None = None,
    notes: str | None = None,
):
    """Load an entity, log a free activity on it and save it."""
    enum_cls = EVENT_TYPE_ENUMS[family]
    if kind not in FREE_ACTIVITY_KINDS or kind not in enum_cls.__members__:
        raise ValidationError({"event_type": [f"{kind} cannot be recorded on a {family.value.lower()}"]})
    event_type = enum_cls[kind]

    entity = load(aggregate_cls, entity_id)
    record_activity(entity, event_type, actor, metadata=metadata, notes=notes)
    entity.touch(event_type.value)
    current_domain.repository_for(aggregate_cls).add(entity)
    logger.info(
        "Activity recorded",
        family=family.value,
        entity_id=str(entity.id),
        event_type=event_type.value,
        actor_id=actor.user_id,
    )
    return entity
