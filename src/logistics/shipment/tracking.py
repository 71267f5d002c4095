"""Shipment tracking points and other non-status shipment actions."""

import json

from protean import handle
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from logistics.audit.event_types import ShipmentEventType
from logistics.domain import logistics
from logistics.lifecycle.statuses import EntityFamily
from logistics.lifecycle.workflow import load, log_free_activity, record_activity
from logistics.shared.actor import Actor
from logistics.shared.errors import AuthorizationError
from logistics.shared.roles import OPERATIONS
from logistics.shipment.shipment import Shipment


@logistics.command(part_of="Shipment")
class AddTrackingPoint:
    """Record where a shipment is now."""

    shipment_id = Identifier(required=True)
    location = String(required=True, max_length=200)
    description = String(max_length=500)
    latitude = Float()
    longitude = Float()
    internal_note = Text()
    occurred_at = DateTime()
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


@logistics.command(part_of="Shipment")
class RecordShipmentActivity:
    shipment_id = Identifier(required=True)
    event_type = String(required=True, max_length=50)
    event_metadata = Text()  # JSON object
    notes = Text()
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


@logistics.command_handler(part_of=Shipment)
class ShipmentTrackingHandler:
    @handle(AddTrackingPoint)
    def add_tracking_point(self, command):
        actor = Actor.from_command(command)
        if actor.role not in OPERATIONS:
            raise AuthorizationError("Only operations staff can add tracking points")

        shipment = load(Shipment, command.shipment_id)
        point = shipment.add_tracking_point(
            location=command.location,
            description=command.description,
            latitude=command.latitude,
            longitude=command.longitude,
            internal_note=command.internal_note,
            occurred_at=command.occurred_at,
        )
        metadata = {
            "tracking_point_id": str(point.id),
            "location": point.location,
            "status": point.status,
        }
        if point.latitude is not None and point.longitude is not None:
            metadata.update(latitude=point.latitude, longitude=point.longitude)
        record_activity(shipment, ShipmentEventType.TRACKING_EVENT_ADDED, actor, metadata=metadata)
        current_domain.repository_for(Shipment).add(shipment)
        return str(point.id)

    @handle(RecordShipmentActivity)
    def record_shipment_activity(self, command):
        log_free_activity(
            Shipment,
            EntityFamily.SHIPMENT,
            command.shipment_id,
            command.event_type,
            Actor.from_command(command),
            metadata=json.loads(command.event_metadata) if command.event_metadata else None,
            notes=command.notes,
        )
