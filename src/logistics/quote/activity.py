"""Non-status quote actions — comments, documents, notes and payments."""

import json

from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from logistics.audit.event_types import QuoteEventType
from logistics.domain import logistics
from logistics.lifecycle.statuses import EntityFamily
from logistics.lifecycle.workflow import load, log_free_activity, record_activity
from logistics.quote.quote import Quote
from logistics.shared.actor import Actor
from logistics.shared.errors import AuthorizationError
from logistics.shared.roles import FINANCE


@logistics.command(part_of="Quote")
class RecordQuoteActivity:
    """Log a comment, document upload, address change or note on a quote."""

    quote_id = Identifier(required=True)
    event_type = String(required=True, max_length=50)
    event_metadata = Text()  # JSON object
    notes = Text()
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


@logistics.command(part_of="Quote")
class RecordQuotePayment:
    quote_id = Identifier(required=True)
    amount = Float(required=True, min_value=0.0)
    currency = String(required=True, max_length=3)
    reference = String(max_length=100)
    payment_method = String(max_length=50)
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


@logistics.command_handler(part_of=Quote)
class QuoteActivityHandler:
    @handle(RecordQuoteActivity)
    def record_quote_activity(self, command):
        log_free_activity(
            Quote,
            EntityFamily.QUOTE,
            command.quote_id,
            command.event_type,
            Actor.from_command(command),
            metadata=json.loads(command.event_metadata) if command.event_metadata else None,
            notes=command.notes,
        )

    @handle(RecordQuotePayment)
    def record_quote_payment(self, command):
        actor = Actor.from_command(command)
        if actor.role not in FINANCE:
            raise AuthorizationError("Only finance staff can record payments")

        quote = load(Quote, command.quote_id)
        metadata = {"amount": command.amount, "currency": command.currency}
        if command.reference:
            metadata["reference"] = command.reference
        if command.payment_method:
            metadata["payment_method"] = command.payment_method
        record_activity(quote, QuoteEventType.PAYMENT_RECEIVED, actor, metadata=metadata)
        quote.record_payment(command.amount, command.currency, command.reference)
        current_domain.repository_for(Quote).add(quote)
