"""Pickup request creation — command and handler.

Authenticated clients file requests for their own tenant; guests file them
with contact details only and no tenant.
"""

from protean import handle
from protean.fields import Boolean, DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from logistics.domain import logistics
from logistics.lifecycle.statuses import EntityFamily
from logistics.lifecycle.workflow import begin_lifecycle
from logistics.pickup.pickup import PickupRequest
from logistics.shared.actor import Actor


@logistics.command(part_of="PickupRequest")
class RequestPickup:
    request_number = String(required=True, max_length=20)
    client_id = Identifier()
    shipment_id = Identifier()
    contact_name = String(max_length=200)
    contact_email = String(max_length=254)
    contact_phone = String(max_length=30)
    pickup_address = String(required=True, max_length=300)
    pickup_city = String(required=True, max_length=100)
    pickup_country = String(required=True, max_length=100)
    cargo_description = Text()
    weight = Float()
    requested_date = DateTime()
    special_instructions = Text()
    is_guest = Boolean(default=False)
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


@logistics.command_handler(part_of=PickupRequest)
class RequestPickupHandler:
    @handle(RequestPickup)
    def request_pickup(self, command):
        actor = Actor.from_command(command)
        guest = bool(command.is_guest)
        pickup = PickupRequest.create(
            request_number=command.request_number,
            address={
                "address": command.pickup_address,
                "city": command.pickup_city,
                "country": command.pickup_country,
            },
            contact={
                "name": command.contact_name,
                "email": command.contact_email,
                "phone": command.contact_phone,
            },
            client_id=None if guest else (command.client_id or actor.client_id),
            user_id=None if guest or not actor.client_id else actor.user_id,
            shipment_id=command.shipment_id,
            cargo_description=command.cargo_description,
            weight=command.weight,
            requested_date=command.requested_date,
            special_instructions=command.special_instructions,
        )
        metadata = {"number": pickup.request_number, "source": "guest" if guest else "dashboard"}
        begin_lifecycle(pickup, EntityFamily.PICKUP, actor, metadata)
        current_domain.repository_for(PickupRequest).add(pickup)
        return str(pickup.id)
