"""Pickup request domain events."""

from protean.fields import DateTime, Identifier, String, Text

from logistics.domain import logistics


@logistics.event(part_of="PickupRequest")
class PickupRequested:
    __version__ = 1

    pickup_id = Identifier(required=True)
    request_number = String(required=True)
    client_id = Identifier()
    contact_email = String()
    status = String(required=True)
    created_at = DateTime(required=True)


@logistics.event(part_of="PickupRequest")
class PickupStatusChanged:
    __version__ = 1

    pickup_id = Identifier(required=True)
    client_id = Identifier()
    old_status = String(required=True)
    new_status = String(required=True)
    actor_id = Identifier()
    notes = Text()
    changed_at = DateTime(required=True)


@logistics.event(part_of="PickupRequest")
class PickupAttachedToAccount:
    __version__ = 1

    pickup_id = Identifier(required=True)
    user_id = Identifier(required=True)
    client_id = Identifier(required=True)
    matched_by = String(required=True)
    attached_at = DateTime(required=True)


@logistics.event(part_of="PickupRequest")
class PickupScheduleChanged:
    """A pickup was scheduled or rescheduled."""

    __version__ = 1

    pickup_id = Identifier(required=True)
    scheduled_date = DateTime(required=True)
    time_slot = String()
    previous_date = DateTime()
    changed_at = DateTime(required=True)


@logistics.event(part_of="PickupRequest")
class PickupDriverAssigned:
    __version__ = 1

    pickup_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    driver_name = String()
    previous_driver_id = Identifier()
    assigned_at = DateTime(required=True)


@logistics.event(part_of="PickupRequest")
class PickupActivityRecorded:
    __version__ = 1

    pickup_id = Identifier(required=True)
    client_id = Identifier()
    event_type = String(required=True)
    recorded_at = DateTime(required=True)
