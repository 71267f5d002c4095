"""Shipment creation — command and handler.

A shipment may be created from an accepted quote, in which case route and
cargo fields the caller leaves empty are copied from the quote.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from logistics.access.resolver import require_read
from logistics.domain import logistics
from logistics.lifecycle.statuses import EntityFamily, QuoteStatus
from logistics.lifecycle.workflow import begin_lifecycle, load
from logistics.quote.quote import Quote
from logistics.shared.actor import Actor
from logistics.shipment.shipment import Shipment

_QUOTE_STATUSES_FOR_SHIPMENT = {
    QuoteStatus.ACCEPTED.value,
    QuoteStatus.IN_TREATMENT.value,
    QuoteStatus.VALIDATED.value,
}


@logistics.command(part_of="Shipment")
class CreateShipment:
    tracking_number = String(required=True, max_length=20)
    client_id = Identifier()
    quote_id = Identifier()
    origin_address = String(max_length=300)
    origin_city = String(max_length=100)
    origin_country = String(max_length=100)
    destination_address = String(max_length=300)
    destination_city = String(max_length=100)
    destination_country = String(max_length=100)
    cargo_type = String(max_length=20)
    weight = Float()
    package_count = Integer()
    transport_modes = Text()  # JSON list
    estimated_cost = Float()
    requested_pickup_date = DateTime()
    estimated_delivery_date = DateTime()
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


def _quote_defaults(quote: Quote) -> dict:
    if quote.status not in _QUOTE_STATUSES_FOR_SHIPMENT:
        raise ValidationError({"quote_id": [f"Quote in {quote.status} cannot become a shipment"]})
    return {
        "origin_city": quote.origin_city,
        "origin_country": quote.origin_country,
        "destination_city": quote.destination_city,
        "destination_country": quote.destination_country,
        "cargo_type": quote.cargo_type,
        "weight": quote.weight,
        "transport_modes": quote.transport_mode_list,
        "estimated_cost": quote.estimated_cost,
        "client_id": quote.client_id,
    }


@logistics.command_handler(part_of=Shipment)
class CreateShipmentHandler:
    @handle(CreateShipment)
    def create_shipment(self, command):
        actor = Actor.from_command(command)
        defaults = {}
        if command.quote_id:
            quote = load(Quote, command.quote_id)
            require_read(actor, quote, "Quote")
            defaults = _quote_defaults(quote)

        def pick(field_name):
            value = getattr(command, field_name, None)
            return value if value not in (None, "") else defaults.get(field_name)

        modes = json.loads(command.transport_modes) if command.transport_modes else defaults.get("transport_modes")
        shipment = Shipment.create(
            tracking_number=command.tracking_number,
            route={
                key: pick(key)
                for key in (
                    "origin_address",
                    "origin_city",
                    "origin_country",
                    "destination_address",
                    "destination_city",
                    "destination_country",
                )
            },
            cargo={
                "cargo_type": pick("cargo_type"),
                "weight": pick("weight"),
                "package_count": command.package_count,
                "transport_modes": modes or [],
            },
            client_id=pick("client_id") or actor.client_id,
            user_id=actor.user_id if actor.client_id else None,
            quote_id=command.quote_id,
            estimated_cost=pick("estimated_cost"),
            requested_pickup_date=command.requested_pickup_date,
            estimated_delivery_date=command.estimated_delivery_date,
        )
        metadata = {"number": shipment.tracking_number, "source": "quote" if command.quote_id else "dashboard"}
        begin_lifecycle(shipment, EntityFamily.SHIPMENT, actor, metadata)
        current_domain.repository_for(Shipment).add(shipment)
        return str(shipment.id)
