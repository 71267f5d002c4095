"""Shipment domain events."""

from protean.fields import DateTime, Identifier, String, Text

from logistics.domain import logistics


@logistics.event(part_of="Shipment")
class ShipmentCreated:
    __version__ = 1

    shipment_id = Identifier(required=True)
    tracking_number = String(required=True)
    client_id = Identifier()
    quote_id = Identifier()
    status = String(required=True)
    created_at = DateTime(required=True)


@logistics.event(part_of="Shipment")
class ShipmentStatusChanged:
    __version__ = 1

    shipment_id = Identifier(required=True)
    tracking_number = String(required=True)
    client_id = Identifier()
    old_status = String(required=True)
    new_status = String(required=True)
    actor_id = Identifier()
    notes = Text()
    changed_at = DateTime(required=True)


@logistics.event(part_of="Shipment")
class ShipmentAttachedToAccount:
    __version__ = 1

    shipment_id = Identifier(required=True)
    user_id = Identifier(required=True)
    client_id = Identifier(required=True)
    matched_by = String(required=True)
    attached_at = DateTime(required=True)


@logistics.event(part_of="Shipment")
class TrackingPointAdded:
    """A location update was recorded for a shipment."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    tracking_number = String(required=True)
    tracking_point_id = Identifier(required=True)
    status = String(required=True)
    location = String(required=True)
    occurred_at = DateTime(required=True)


@logistics.event(part_of="Shipment")
class ShipmentActivityRecorded:
    __version__ = 1

    shipment_id = Identifier(required=True)
    client_id = Identifier()
    event_type = String(required=True)
    recorded_at = DateTime(required=True)
