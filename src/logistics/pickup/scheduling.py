"""Pickup scheduling, driver assignment and other non-status pickup actions."""

import json

from protean import handle
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from logistics.audit.event_types import PickupEventType
from logistics.domain import logistics
from logistics.lifecycle.statuses import EntityFamily, PickupStatus
from logistics.lifecycle.workflow import apply_transition, load, log_free_activity, record_activity
from logistics.pickup.pickup import PickupRequest
from logistics.shared.actor import Actor
from logistics.shared.clock import as_utc
from logistics.shared.errors import AuthorizationError
from logistics.shared.roles import OPERATIONS


@logistics.command(part_of="PickupRequest")
class SchedulePickup:
    """Move a REQUESTED pickup to SCHEDULED with a pickup window."""

    pickup_id = Identifier(required=True)
    scheduled_date = DateTime(required=True)
    time_slot = String(max_length=20)
    notes = Text()
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


@logistics.command(part_of="PickupRequest")
class ReschedulePickup:
    pickup_id = Identifier(required=True)
    scheduled_date = DateTime(required=True)
    time_slot = String(max_length=20)
    notes = Text()
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


@logistics.command(part_of="PickupRequest")
class AssignPickupDriver:
    pickup_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    driver_name = String(max_length=200)
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


@logistics.command(part_of="PickupRequest")
class RecordPickupActivity:
    pickup_id = Identifier(required=True)
    event_type = String(required=True, max_length=50)
    event_metadata = Text()  # JSON object
    notes = Text()
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


def _window(scheduled_date, time_slot) -> dict:
    metadata = {"scheduled_date": as_utc(scheduled_date).isoformat()}
    if time_slot:
        metadata["time_slot"] = time_slot
    return metadata


def _require_operations(actor: Actor, action: str) -> None:
    if actor.role not in OPERATIONS:
        raise AuthorizationError(f"Only operations staff can {action}")


@logistics.command_handler(part_of=PickupRequest)
class PickupSchedulingHandler:
    @handle(SchedulePickup)
    def schedule_pickup(self, command):
        pickup = apply_transition(
            PickupRequest,
            EntityFamily.PICKUP,
            command.pickup_id,
            PickupStatus.SCHEDULED,
            Actor.from_command(command),
            notes=command.notes,
            metadata=_window(command.scheduled_date, command.time_slot),
        )
        pickup.set_schedule(command.scheduled_date, command.time_slot)
        current_domain.repository_for(PickupRequest).add(pickup)

    @handle(ReschedulePickup)
    def reschedule_pickup(self, command):
        actor = Actor.from_command(command)
        _require_operations(actor, "reschedule pickups")

        pickup = load(PickupRequest, command.pickup_id)
        previous = pickup.set_schedule(command.scheduled_date, command.time_slot)
        metadata = _window(command.scheduled_date, command.time_slot)
        if previous:
            metadata["previous_date"] = as_utc(previous).isoformat()
        record_activity(pickup, PickupEventType.RESCHEDULED, actor, metadata=metadata, notes=command.notes)
        current_domain.repository_for(PickupRequest).add(pickup)

    @handle(AssignPickupDriver)
    def assign_pickup_driver(self, command):
        actor = Actor.from_command(command)
        _require_operations(actor, "assign drivers")

        pickup = load(PickupRequest, command.pickup_id)
        previous = pickup.assign_driver(command.driver_id, command.driver_name)
        metadata = {"driver_id": str(command.driver_id)}
        if command.driver_name:
            metadata["driver_name"] = command.driver_name
        if previous:
            metadata["previous_driver_id"] = previous
            event_type = PickupEventType.DRIVER_CHANGED
        else:
            event_type = PickupEventType.DRIVER_ASSIGNED
        record_activity(pickup, event_type, actor, metadata=metadata)
        current_domain.repository_for(PickupRequest).add(pickup)

    @handle(RecordPickupActivity)
    def record_pickup_activity(self, command):
        log_free_activity(
            PickupRequest,
            EntityFamily.PICKUP,
            command.pickup_id,
            command.event_type,
            Actor.from_command(command),
            metadata=json.loads(command.event_metadata) if command.event_metadata else None,
            notes=command.notes,
        )
