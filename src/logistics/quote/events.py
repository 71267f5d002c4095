"""Quote domain events."""

from protean.fields import DateTime, Float, Identifier, String, Text

from logistics.domain import logistics


@logistics.event(part_of="Quote")
class QuoteCreated:
    """A quote was created, from the dashboard or from a reconciled guest quote."""

    __version__ = 1

    quote_id = Identifier(required=True)
    quote_number = String(required=True)
    client_id = Identifier()
    user_id = Identifier()
    status = String(required=True)
    guest_quote_id = Identifier()
    created_at = DateTime(required=True)


@logistics.event(part_of="Quote")
class QuoteStatusChanged:
    __version__ = 1

    quote_id = Identifier(required=True)
    client_id = Identifier()
    old_status = String(required=True)
    new_status = String(required=True)
    actor_id = Identifier()
    notes = Text()
    changed_at = DateTime(required=True)


@logistics.event(part_of="Quote")
class QuoteAttachedToAccount:
    __version__ = 1

    quote_id = Identifier(required=True)
    user_id = Identifier(required=True)
    client_id = Identifier(required=True)
    matched_by = String(required=True)
    attached_at = DateTime(required=True)


@logistics.event(part_of="Quote")
class QuotePaymentReceived:
    __version__ = 1

    quote_id = Identifier(required=True)
    amount = Float(required=True)
    currency = String(required=True)
    reference = String()
    received_at = DateTime(required=True)


@logistics.event(part_of="Quote")
class QuoteActivityRecorded:
    """A non-status action (comment, document, note) was logged on a quote."""

    __version__ = 1

    quote_id = Identifier(required=True)
    client_id = Identifier()
    event_type = String(required=True)
    recorded_at = DateTime(required=True)
