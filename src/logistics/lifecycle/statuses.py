"""Entity families and their closed status enumerations."""

from enum import Enum


class EntityFamily(Enum):
    QUOTE = "QUOTE"
    SHIPMENT = "SHIPMENT"
    PICKUP = "PICKUP"
    PURCHASE = "PURCHASE"


class QuoteStatus(Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"
    IN_TREATMENT = "IN_TREATMENT"
    VALIDATED = "VALIDATED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class ShipmentStatus(Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    PICKED_UP = "PICKED_UP"
    IN_TRANSIT = "IN_TRANSIT"
    AT_CUSTOMS = "AT_CUSTOMS"
    CUSTOMS_CLEARED = "CUSTOMS_CLEARED"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    READY_FOR_PICKUP = "READY_FOR_PICKUP"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    ON_HOLD = "ON_HOLD"
    EXCEPTION = "EXCEPTION"


class PickupStatus(Enum):
    REQUESTED = "REQUESTED"
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


class PurchaseStatus(Enum):
    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


STATUS_ENUMS: dict[EntityFamily, type[Enum]] = {
    EntityFamily.QUOTE: QuoteStatus,
    EntityFamily.SHIPMENT: ShipmentStatus,
    EntityFamily.PICKUP: PickupStatus,
    EntityFamily.PURCHASE: PurchaseStatus,
}


def parse_status(family: EntityFamily, value: Enum | str | None) -> Enum | None:
    """Coerce ``value`` into the family's status enum.

    Raises ``ValueError`` for values outside the enumeration.
    """
    if value is None:
        return None
    enum_cls = STATUS_ENUMS[family]
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, Enum):
        value = value.value
    return enum_cls(value)
