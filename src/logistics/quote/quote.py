"""Quote aggregate.

A quote prices a freight request. It is created as DRAFT from the dashboard
or from a guest quote reconciled into an account, and moves along the quote
graph in ``logistics.lifecycle.graph``. Its audit log is the only record of
how it got to its current status.
"""

import json
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from logistics.domain import logistics
from logistics.lifecycle.statuses import QuoteStatus
from logistics.quote.events import (
    QuoteActivityRecorded,
    QuoteAttachedToAccount,
    QuoteCreated,
    QuotePaymentReceived,
    QuoteStatusChanged,
)
from logistics.shared.cargo import CargoType, Priority, decode_transport_modes, encode_transport_modes


@logistics.aggregate
class Quote:
    quote_number = String(required=True, max_length=20, unique=True)
    status = String(max_length=20, choices=QuoteStatus, default=QuoteStatus.DRAFT.value)
    client_id = Identifier()
    user_id = Identifier()

    origin_country = String(required=True, max_length=100)
    origin_city = String(max_length=100)
    destination_country = String(required=True, max_length=100)
    destination_city = String(max_length=100)
    cargo_type = String(max_length=20, choices=CargoType, default=CargoType.GENERAL.value)
    weight = Float(required=True, min_value=0.0)
    length = Float(min_value=0.0)
    width = Float(min_value=0.0)
    height = Float(min_value=0.0)
    transport_modes = Text()  # JSON list of TransportMode values
    priority = String(max_length=20, choices=Priority, default=Priority.STANDARD.value)

    estimated_cost = Float(min_value=0.0)
    currency = String(max_length=3, default="XOF")
    estimated_delivery_days = Integer(min_value=0)
    cost_breakdown = Text()  # JSON object
    valid_until = DateTime()

    payment_method = String(max_length=50)
    amount_paid = Float(default=0.0, min_value=0.0)

    guest_quote_id = Identifier(unique=True)
    log_sequence = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def origin_and_destination_must_differ(self):
        if (
            self.origin_country
            and self.destination_country
            and self.origin_country == self.destination_country
            and (self.origin_city or "") == (self.destination_city or "")
        ):
            raise ValidationError({"destination_country": ["Destination must differ from origin"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        quote_number: str,
        route: dict,
        cargo: dict,
        client_id: str | None = None,
        user_id: str | None = None,
        pricing: dict | None = None,
        valid_until: datetime | None = None,
        guest_quote_id: str | None = None,
    ):
        now = datetime.now(UTC)
        pricing = pricing or {}
        quote = cls(
            quote_number=quote_number,
            status=QuoteStatus.DRAFT.value,
            client_id=client_id,
            user_id=user_id,
            origin_country=route.get("origin_country"),
            origin_city=route.get("origin_city"),
            destination_country=route.get("destination_country"),
            destination_city=route.get("destination_city"),
            cargo_type=cargo.get("cargo_type") or CargoType.GENERAL.value,
            weight=cargo.get("weight"),
            length=cargo.get("length"),
            width=cargo.get("width"),
            height=cargo.get("height"),
            transport_modes=encode_transport_modes(cargo.get("transport_modes") or []),
            priority=cargo.get("priority") or Priority.STANDARD.value,
            estimated_cost=pricing.get("estimated_cost"),
            currency=pricing.get("currency") or "XOF",
            estimated_delivery_days=pricing.get("estimated_delivery_days"),
            cost_breakdown=json.dumps(pricing["breakdown"]) if pricing.get("breakdown") else None,
            valid_until=valid_until,
            guest_quote_id=guest_quote_id,
            created_at=now,
            updated_at=now,
        )
        quote.raise_(
            QuoteCreated(
                quote_id=str(quote.id),
                quote_number=quote_number,
                client_id=client_id,
                user_id=user_id,
                status=quote.status,
                guest_quote_id=guest_quote_id,
                created_at=now,
            )
        )
        return quote

    @property
    def transport_mode_list(self) -> list[str]:
        return decode_transport_modes(self.transport_modes)

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def change_status(self, new_status: QuoteStatus, actor_id: str | None = None, notes: str | None = None) -> None:
        """Apply an already validated transition."""
        now = datetime.now(UTC)
        old_status = self.status
        self.status = new_status.value
        self.updated_at = now
        self.raise_(
            QuoteStatusChanged(
                quote_id=str(self.id),
                client_id=self.client_id,
                old_status=old_status,
                new_status=new_status.value,
                actor_id=actor_id,
                notes=notes,
                changed_at=now,
            )
        )

    def attach_to_account(self, user_id: str, client_id: str, matched_by: str) -> None:
        if self.user_id is not None:
            raise ValidationError({"user_id": ["Quote already belongs to an account"]})
        now = datetime.now(UTC)
        self.user_id = user_id
        self.client_id = client_id
        self.updated_at = now
        self.raise_(
            QuoteAttachedToAccount(
                quote_id=str(self.id),
                user_id=user_id,
                client_id=client_id,
                matched_by=matched_by,
                attached_at=now,
            )
        )

    def record_payment(self, amount: float, currency: str, reference: str | None = None) -> None:
        if amount <= 0:
            raise ValidationError({"amount": ["Payment amount must be positive"]})
        if currency != self.currency:
            raise ValidationError({"currency": [f"Quote is priced in {self.currency}"]})
        now = datetime.now(UTC)
        self.amount_paid = (self.amount_paid or 0.0) + amount
        self.updated_at = now
        self.raise_(
            QuotePaymentReceived(
                quote_id=str(self.id),
                amount=amount,
                currency=currency,
                reference=reference,
                received_at=now,
            )
        )

    def touch(self, event_type: str) -> None:
        """Mark a logged non-status action."""
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            QuoteActivityRecorded(
                quote_id=str(self.id),
                client_id=self.client_id,
                event_type=event_type,
                recorded_at=now,
            )
        )
