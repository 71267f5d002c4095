"""PickupRequest aggregate.

A request to collect goods at an address. Guests can file one without an
account, leaving a contact email or phone; the request is claimed by the
matching account later (see ``logistics.guest.attachment``).
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from logistics.domain import logistics
from logistics.lifecycle.statuses import PickupStatus
from logistics.pickup.events import (
    PickupActivityRecorded,
    PickupAttachedToAccount,
    PickupDriverAssigned,
    PickupRequested,
    PickupScheduleChanged,
    PickupStatusChanged,
)


class TimeSlot(Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"
    FLEXIBLE = "FLEXIBLE"


@logistics.aggregate
class PickupRequest:
    request_number = String(required=True, max_length=20, unique=True)
    status = String(max_length=20, choices=PickupStatus, default=PickupStatus.REQUESTED.value)
    client_id = Identifier()
    user_id = Identifier()
    shipment_id = Identifier()

    contact_name = String(max_length=200)
    contact_email = String(max_length=254)
    contact_phone = String(max_length=30)
    pickup_address = String(required=True, max_length=300)
    pickup_city = String(required=True, max_length=100)
    pickup_country = String(required=True, max_length=100)
    cargo_description = Text()
    weight = Float(min_value=0.0)
    special_instructions = Text()

    requested_date = DateTime()
    scheduled_date = DateTime()
    time_slot = String(max_length=20, choices=TimeSlot)
    driver_id = Identifier()
    driver_name = String(max_length=200)
    completed_at = DateTime()

    log_sequence = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def guests_must_leave_a_contact(self):
        if self.client_id is None and not (self.contact_email or self.contact_phone):
            raise ValidationError({"contact_email": ["A guest pickup needs a contact email or phone"]})

    @classmethod
    def create(
        cls,
        request_number: str,
        address: dict,
        contact: dict | None = None,
        client_id: str | None = None,
        user_id: str | None = None,
        shipment_id: str | None = None,
        cargo_description: str | None = None,
        weight: float | None = None,
        requested_date: datetime | None = None,
        special_instructions: str | None = None,
    ):
        now = datetime.now(UTC)
        contact = contact or {}
        pickup = cls(
            request_number=request_number,
            status=PickupStatus.REQUESTED.value,
            client_id=client_id,
            user_id=user_id,
            shipment_id=shipment_id,
            contact_name=contact.get("name"),
            contact_email=(contact.get("email") or "").strip().lower() or None,
            contact_phone=(contact.get("phone") or "").strip() or None,
            pickup_address=address.get("address"),
            pickup_city=address.get("city"),
            pickup_country=address.get("country"),
            cargo_description=cargo_description,
            weight=weight,
            requested_date=requested_date,
            special_instructions=special_instructions,
            created_at=now,
            updated_at=now,
        )
        pickup.raise_(
            PickupRequested(
                pickup_id=str(pickup.id),
                request_number=request_number,
                client_id=client_id,
                contact_email=pickup.contact_email,
                status=pickup.status,
                created_at=now,
            )
        )
        return pickup

    def change_status(self, new_status: PickupStatus, actor_id: str | None = None, notes: str | None = None) -> None:
        now = datetime.now(UTC)
        old_status = self.status
        self.status = new_status.value
        if new_status == PickupStatus.COMPLETED:
            self.completed_at = now
        self.updated_at = now
        self.raise_(
            PickupStatusChanged(
                pickup_id=str(self.id),
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
            raise ValidationError({"user_id": ["Pickup request already belongs to an account"]})
        now = datetime.now(UTC)
        self.user_id = user_id
        self.client_id = client_id
        self.updated_at = now
        self.raise_(
            PickupAttachedToAccount(
                pickup_id=str(self.id),
                user_id=user_id,
                client_id=client_id,
                matched_by=matched_by,
                attached_at=now,
            )
        )

    def set_schedule(self, scheduled_date: datetime, time_slot: str | None = None) -> datetime | None:
        """Set the pickup window; returns the previous date, if any."""
        if PickupStatus(self.status) != PickupStatus.SCHEDULED:
            raise ValidationError({"status": ["Only a scheduled pickup has a pickup window"]})
        now = datetime.now(UTC)
        previous = self.scheduled_date
        self.scheduled_date = scheduled_date
        self.time_slot = time_slot
        self.updated_at = now
        self.raise_(
            PickupScheduleChanged(
                pickup_id=str(self.id),
                scheduled_date=scheduled_date,
                time_slot=time_slot,
                previous_date=previous,
                changed_at=now,
            )
        )
        return previous

    def assign_driver(self, driver_id: str, driver_name: str | None = None) -> str | None:
        """Assign or replace the driver; returns the previous driver id."""
        if PickupStatus(self.status) not in (PickupStatus.REQUESTED, PickupStatus.SCHEDULED, PickupStatus.IN_PROGRESS):
            raise ValidationError({"status": [f"Cannot assign a driver to a pickup in {self.status}"]})
        previous = str(self.driver_id) if self.driver_id else None
        if previous == str(driver_id):
            raise ValidationError({"driver_id": ["Driver is already assigned"]})
        now = datetime.now(UTC)
        self.driver_id = driver_id
        self.driver_name = driver_name
        self.updated_at = now
        self.raise_(
            PickupDriverAssigned(
                pickup_id=str(self.id),
                driver_id=driver_id,
                driver_name=driver_name,
                previous_driver_id=previous,
                assigned_at=now,
            )
        )
        return previous

    def touch(self, event_type: str) -> None:
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            PickupActivityRecorded(
                pickup_id=str(self.id),
                client_id=self.client_id,
                event_type=event_type,
                recorded_at=now,
            )
        )
