"""PurchaseRequest aggregate — goods bought on the client's behalf and shipped.

Like pickups, purchase requests may be filed by guests and claimed later by
the account whose email or phone matches.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from logistics.domain import logistics
from logistics.lifecycle.statuses import PurchaseStatus
from logistics.purchase.events import (
    PurchaseActivityRecorded,
    PurchaseAttachedToAccount,
    PurchaseCostsUpdated,
    PurchaseRequested,
    PurchaseStatusChanged,
)


@logistics.aggregate
class PurchaseRequest:
    request_number = String(required=True, max_length=20, unique=True)
    status = String(max_length=20, choices=PurchaseStatus, default=PurchaseStatus.NEW.value)
    client_id = Identifier()
    user_id = Identifier()

    contact_name = String(max_length=200)
    contact_email = String(max_length=254)
    contact_phone = String(max_length=30)
    product_name = String(required=True, max_length=300)
    product_url = String(max_length=1000)
    product_description = Text()
    quantity = Integer(default=1, min_value=1)
    estimated_price = Float(min_value=0.0)
    delivery_address = String(required=True, max_length=300)
    delivery_city = String(required=True, max_length=100)
    delivery_country = String(required=True, max_length=100)

    actual_product_cost = Float(min_value=0.0)
    delivery_cost = Float(min_value=0.0)
    service_fee = Float(min_value=0.0)
    total_cost = Float(min_value=0.0)
    currency = String(max_length=3, default="XOF")
    delivered_at = DateTime()

    log_sequence = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def guests_must_leave_a_contact(self):
        if self.client_id is None and not (self.contact_email or self.contact_phone):
            raise ValidationError({"contact_email": ["A guest purchase request needs a contact email or phone"]})

    @classmethod
    def create(
        cls,
        request_number: str,
        product: dict,
        delivery: dict,
        contact: dict | None = None,
        client_id: str | None = None,
        user_id: str | None = None,
    ):
        now = datetime.now(UTC)
        contact = contact or {}
        purchase = cls(
            request_number=request_number,
            status=PurchaseStatus.NEW.value,
            client_id=client_id,
            user_id=user_id,
            contact_name=contact.get("name"),
            contact_email=(contact.get("email") or "").strip().lower() or None,
            contact_phone=(contact.get("phone") or "").strip() or None,
            product_name=product.get("name"),
            product_url=product.get("url"),
            product_description=product.get("description"),
            quantity=product.get("quantity") or 1,
            estimated_price=product.get("estimated_price"),
            delivery_address=delivery.get("address"),
            delivery_city=delivery.get("city"),
            delivery_country=delivery.get("country"),
            created_at=now,
            updated_at=now,
        )
        purchase.raise_(
            PurchaseRequested(
                purchase_id=str(purchase.id),
                request_number=request_number,
                client_id=client_id,
                contact_email=purchase.contact_email,
                status=purchase.status,
                created_at=now,
            )
        )
        return purchase

    def change_status(self, new_status: PurchaseStatus, actor_id: str | None = None, notes: str | None = None) -> None:
        now = datetime.now(UTC)
        old_status = self.status
        self.status = new_status.value
        if new_status == PurchaseStatus.DELIVERED:
            self.delivered_at = now
        self.updated_at = now
        self.raise_(
            PurchaseStatusChanged(
                purchase_id=str(self.id),
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
            raise ValidationError({"user_id": ["Purchase request already belongs to an account"]})
        now = datetime.now(UTC)
        self.user_id = user_id
        self.client_id = client_id
        self.updated_at = now
        self.raise_(
            PurchaseAttachedToAccount(
                purchase_id=str(self.id),
                user_id=user_id,
                client_id=client_id,
                matched_by=matched_by,
                attached_at=now,
            )
        )

    def update_costs(
        self,
        actual_product_cost: float | None = None,
        delivery_cost: float | None = None,
        service_fee: float | None = None,
    ) -> float:
        """Replace the cost lines; returns the new total."""
        if PurchaseStatus(self.status) in (PurchaseStatus.DELIVERED, PurchaseStatus.CANCELLED):
            raise ValidationError({"status": [f"Costs of a {self.status} purchase are frozen"]})
        now = datetime.now(UTC)
        self.actual_product_cost = actual_product_cost
        self.delivery_cost = delivery_cost
        self.service_fee = service_fee
        self.total_cost = round(sum(c or 0.0 for c in (actual_product_cost, delivery_cost, service_fee)), 2)
        self.updated_at = now
        self.raise_(
            PurchaseCostsUpdated(
                purchase_id=str(self.id),
                actual_product_cost=actual_product_cost,
                delivery_cost=delivery_cost,
                service_fee=service_fee,
                total_cost=self.total_cost,
                updated_at=now,
            )
        )
        return self.total_cost

    def touch(self, event_type: str) -> None:
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            PurchaseActivityRecorded(
                purchase_id=str(self.id),
                client_id=self.client_id,
                event_type=event_type,
                recorded_at=now,
            )
        )
