"""Audit event kinds per entity family and the metadata each kind carries.

The registry is closed: a kind that is not listed for a family cannot be
written to that family's log. Metadata keys are snake_case.
"""

from dataclasses import dataclass
from enum import Enum

from logistics.lifecycle.statuses import EntityFamily
from logistics.shared.errors import UnknownEventTypeError


class QuoteEventType(Enum):
    CREATED = "CREATED"
    STATUS_CHANGED = "STATUS_CHANGED"
    ATTACHED_TO_ACCOUNT = "ATTACHED_TO_ACCOUNT"
    TREATMENT_STARTED = "TREATMENT_STARTED"
    TREATMENT_VALIDATED = "TREATMENT_VALIDATED"
    PAYMENT_METHOD_SET = "PAYMENT_METHOD_SET"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    SENT_TO_CLIENT = "SENT_TO_CLIENT"
    ACCEPTED_BY_CLIENT = "ACCEPTED_BY_CLIENT"
    REJECTED_BY_CLIENT = "REJECTED_BY_CLIENT"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    COMMENT_ADDED = "COMMENT_ADDED"
    UPDATED = "UPDATED"
    ADDRESS_UPDATED = "ADDRESS_UPDATED"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    SYSTEM_NOTE = "SYSTEM_NOTE"


class ShipmentEventType(Enum):
    CREATED = "CREATED"
    STATUS_CHANGED = "STATUS_CHANGED"
    ATTACHED_TO_ACCOUNT = "ATTACHED_TO_ACCOUNT"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    PICKUP_ASSIGNED = "PICKUP_ASSIGNED"
    PICKUP_COMPLETED = "PICKUP_COMPLETED"
    TRACKING_EVENT_ADDED = "TRACKING_EVENT_ADDED"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    DELIVERED = "DELIVERED"
    DELIVERY_ATTEMPT_FAILED = "DELIVERY_ATTEMPT_FAILED"
    CANCELLED = "CANCELLED"
    PROBLEM_REPORTED = "PROBLEM_REPORTED"
    COMMENT_ADDED = "COMMENT_ADDED"
    ADDRESS_UPDATED = "ADDRESS_UPDATED"
    SYSTEM_NOTE = "SYSTEM_NOTE"


class PickupEventType(Enum):
    CREATED = "CREATED"
    STATUS_CHANGED = "STATUS_CHANGED"
    ATTACHED_TO_ACCOUNT = "ATTACHED_TO_ACCOUNT"
    DRIVER_ASSIGNED = "DRIVER_ASSIGNED"
    DRIVER_CHANGED = "DRIVER_CHANGED"
    SCHEDULED = "SCHEDULED"
    RESCHEDULED = "RESCHEDULED"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    SYSTEM_NOTE = "SYSTEM_NOTE"


class PurchaseEventType(Enum):
    CREATED = "CREATED"
    STATUS_CHANGED = "STATUS_CHANGED"
    ATTACHED_TO_ACCOUNT = "ATTACHED_TO_ACCOUNT"
    COSTS_UPDATED = "COSTS_UPDATED"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    SYSTEM_NOTE = "SYSTEM_NOTE"


EVENT_TYPE_ENUMS: dict[EntityFamily, type[Enum]] = {
    EntityFamily.QUOTE: QuoteEventType,
    EntityFamily.SHIPMENT: ShipmentEventType,
    EntityFamily.PICKUP: PickupEventType,
    EntityFamily.PURCHASE: PurchaseEventType,
}

_FAMILY_OF = {enum_cls: family for family, enum_cls in EVENT_TYPE_ENUMS.items()}


@dataclass(frozen=True)
class EventShape:
    """Documented metadata shape of one event kind."""

    required: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()
    status_change: bool = False
    notes_required: bool = False

    def missing_keys(self, metadata: dict | None) -> list[str]:
        metadata = metadata or {}
        return [key for key in self.required if metadata.get(key) in (None, "")]

    def unknown_keys(self, metadata: dict | None) -> list[str]:
        allowed = set(self.required) | set(self.optional)
        return sorted(key for key in (metadata or {}) if key not in allowed)


_STATUS = EventShape(status_change=True, optional=("reason",))
_NOTE = EventShape(notes_required=True)

# Kinds shared by every family
_COMMON_SHAPES = {
    "CREATED": EventShape(
        status_change=True,
        optional=("number", "source", "attached_to_account", "guest_quote_id"),
    ),
    "STATUS_CHANGED": _STATUS,
    "ATTACHED_TO_ACCOUNT": EventShape(
        required=("user_id", "matched_by"),
        optional=("client_id", "email", "phone", "guest_quote_id"),
    ),
    "DOCUMENT_UPLOADED": EventShape(required=("document_id", "file_name"), optional=("document_type",)),
    "TOKEN_REFRESHED": EventShape(optional=("expires_at",)),
    "SYSTEM_NOTE": _NOTE,
    "COMMENT_ADDED": _NOTE,
    "ADDRESS_UPDATED": EventShape(required=("field",), optional=("old_value", "new_value")),
    "PAYMENT_RECEIVED": EventShape(required=("amount", "currency"), optional=("reference", "payment_method")),
    "CANCELLED": EventShape(status_change=True, notes_required=True),
}

_FAMILY_SHAPES = {
    EntityFamily.QUOTE: {
        "TREATMENT_STARTED": _STATUS,
        "TREATMENT_VALIDATED": _STATUS,
        "SENT_TO_CLIENT": _STATUS,
        "ACCEPTED_BY_CLIENT": _STATUS,
        "REJECTED_BY_CLIENT": _STATUS,
        "EXPIRED": EventShape(status_change=True, optional=("valid_until",)),
        "PAYMENT_METHOD_SET": EventShape(required=("payment_method",)),
        "UPDATED": EventShape(required=("fields",)),
    },
    EntityFamily.SHIPMENT: {
        "PICKUP_ASSIGNED": EventShape(required=("pickup_id",)),
        "PICKUP_COMPLETED": _STATUS,
        "TRACKING_EVENT_ADDED": EventShape(
            required=("tracking_point_id", "location"),
            optional=("status", "latitude", "longitude"),
        ),
        "DELIVERED": _STATUS,
        "DELIVERY_ATTEMPT_FAILED": _STATUS,
        "PROBLEM_REPORTED": _STATUS,
    },
    EntityFamily.PICKUP: {
        "DRIVER_ASSIGNED": EventShape(required=("driver_id",), optional=("driver_name",)),
        "DRIVER_CHANGED": EventShape(required=("driver_id", "previous_driver_id"), optional=("driver_name",)),
        "SCHEDULED": EventShape(status_change=True, optional=("scheduled_date", "time_slot")),
        "RESCHEDULED": EventShape(required=("scheduled_date",), optional=("time_slot", "previous_date")),
    },
    EntityFamily.PURCHASE: {
        "COSTS_UPDATED": EventShape(
            required=("total_cost",),
            optional=("actual_product_cost", "delivery_cost", "service_fee"),
        ),
    },
}


def _build_registry() -> dict[Enum, EventShape]:
    registry = {}
    for family, enum_cls in EVENT_TYPE_ENUMS.items():
        shapes = {**_COMMON_SHAPES, **_FAMILY_SHAPES[family]}
        for kind in enum_cls:
            registry[kind] = shapes[kind.value]
    return registry


EVENT_SHAPES: dict[Enum, EventShape] = _build_registry()


def family_of(event_type: Enum) -> EntityFamily:
    try:
        return _FAMILY_OF[type(event_type)]
    except KeyError:
        raise UnknownEventTypeError(f"{event_type!r} is not an audit event kind") from None


def resolve_event_type(family: EntityFamily, value: Enum | str) -> Enum:
    """Return the family's event kind for ``value``.

    Raises ``UnknownEventTypeError`` when the family has no such kind.
    """
    enum_cls = EVENT_TYPE_ENUMS[family]
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, Enum):
        value = value.value
    try:
        return enum_cls(value)
    except ValueError:
        raise UnknownEventTypeError(f"{value!r} is not a {family.value} event kind") from None


def shape_of(event_type: Enum) -> EventShape:
    family_of(event_type)
    return EVENT_SHAPES[event_type]
