"""Shipment status changes — command and handler."""

import json

from protean import handle
from protean.fields import Identifier, String, Text

from logistics.domain import logistics
from logistics.lifecycle.statuses import EntityFamily
from logistics.lifecycle.workflow import apply_transition
from logistics.shared.actor import Actor
from logistics.shipment.shipment import Shipment


@logistics.command(part_of="Shipment")
class ChangeShipmentStatus:
    shipment_id = Identifier(required=True)
    target_status = String(required=True, max_length=30)
    expected_status = String(max_length=30)
    notes = Text()
    event_metadata = Text()  # JSON object
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


@logistics.command_handler(part_of=Shipment)
class ChangeShipmentStatusHandler:
    @handle(ChangeShipmentStatus)
    def change_shipment_status(self, command):
        shipment = apply_transition(
            Shipment,
            EntityFamily.SHIPMENT,
            command.shipment_id,
            command.target_status,
            Actor.from_command(command),
            notes=command.notes,
            metadata=json.loads(command.event_metadata) if command.event_metadata else None,
            expected_status=command.expected_status,
        )
        return shipment.status
