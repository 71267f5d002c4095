"""Delegated purchase request domain events."""

from protean.fields import DateTime, Float, Identifier, String, Text

from logistics.domain import logistics


@logistics.event(part_of="PurchaseRequest")
class PurchaseRequested:
    __version__ = 1

    purchase_id = Identifier(required=True)
    request_number = String(required=True)
    client_id = Identifier()
    contact_email = String()
    status = String(required=True)
    created_at = DateTime(required=True)


@logistics.event(part_of="PurchaseRequest")
class PurchaseStatusChanged:
    __version__ = 1

    purchase_id = Identifier(required=True)
    client_id = Identifier()
    old_status = String(required=True)
    new_status = String(required=True)
    actor_id = Identifier()
    notes = Text()
    changed_at = DateTime(required=True)


@logistics.event(part_of="PurchaseRequest")
class PurchaseAttachedToAccount:
    __version__ = 1

    purchase_id = Identifier(required=True)
    user_id = Identifier(required=True)
    client_id = Identifier(required=True)
    matched_by = String(required=True)
    attached_at = DateTime(required=True)


@logistics.event(part_of="PurchaseRequest")
class PurchaseCostsUpdated:
    __version__ = 1

    purchase_id = Identifier(required=True)
    actual_product_cost = Float()
    delivery_cost = Float()
    service_fee = Float()
    total_cost = Float(required=True)
    updated_at = DateTime(required=True)


@logistics.event(part_of="PurchaseRequest")
class PurchaseActivityRecorded:
    __version__ = 1

    purchase_id = Identifier(required=True)
    client_id = Identifier()
    event_type = String(required=True)
    recorded_at = DateTime(required=True)
