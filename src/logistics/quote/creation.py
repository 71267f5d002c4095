"""Quote creation — command and handler."""

import json
from datetime import UTC, datetime, timedelta

from protean import handle
from protean.fields import DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from logistics.domain import custom_setting, logistics
from logistics.lifecycle.statuses import EntityFamily
from logistics.lifecycle.workflow import begin_lifecycle
from logistics.quote.quote import Quote
from logistics.shared.actor import Actor


@logistics.command(part_of="Quote")
class CreateQuote:
    """Create a DRAFT quote for a client."""

    quote_number = String(required=True, max_length=20)
    client_id = Identifier()
    origin_country = String(required=True, max_length=100)
    origin_city = String(max_length=100)
    destination_country = String(required=True, max_length=100)
    destination_city = String(max_length=100)
    cargo_type = String(max_length=20)
    weight = Float(required=True)
    length = Float()
    width = Float()
    height = Float()
    transport_modes = Text()  # JSON list
    priority = String(max_length=20)
    estimated_cost = Float()
    currency = String(max_length=3)
    estimated_delivery_days = Integer()
    breakdown = Text()  # JSON object
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


def default_valid_until(now: datetime | None = None) -> datetime:
    days = int(custom_setting("QUOTE_VALIDITY_DAYS", 30))
    return (now or datetime.now(UTC)) + timedelta(days=days)


@logistics.command_handler(part_of=Quote)
class CreateQuoteHandler:
    @handle(CreateQuote)
    def create_quote(self, command):
        actor = Actor.from_command(command)
        quote = Quote.create(
            quote_number=command.quote_number,
            route={
                "origin_country": command.origin_country,
                "origin_city": command.origin_city,
                "destination_country": command.destination_country,
                "destination_city": command.destination_city,
            },
            cargo={
                "cargo_type": command.cargo_type,
                "weight": command.weight,
                "length": command.length,
                "width": command.width,
                "height": command.height,
                "transport_modes": json.loads(command.transport_modes) if command.transport_modes else [],
                "priority": command.priority,
            },
            client_id=command.client_id or actor.client_id,
            user_id=actor.user_id if actor.client_id else None,
            pricing={
                "estimated_cost": command.estimated_cost,
                "currency": command.currency,
                "estimated_delivery_days": command.estimated_delivery_days,
                "breakdown": json.loads(command.breakdown) if command.breakdown else None,
            },
            valid_until=default_valid_until(),
        )
        begin_lifecycle(quote, EntityFamily.QUOTE, actor, {"number": quote.quote_number, "source": "dashboard"})
        current_domain.repository_for(Quote).add(quote)
        return str(quote.id)
