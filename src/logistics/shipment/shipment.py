"""Shipment aggregate and its tracking points.

A shipment is created as DRAFT (invisible to public tracking), submitted
for approval, and then moved by operations staff through pickup, transit,
customs and delivery. Tracking points carry the location history; their
coordinates and internal notes never leave the back office.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from logistics.domain import logistics
from logistics.lifecycle.statuses import ShipmentStatus
from logistics.shared.cargo import CargoType, decode_transport_modes, encode_transport_modes
from logistics.shared.clock import as_utc
from logistics.shipment.events import (
    ShipmentActivityRecorded,
    ShipmentAttachedToAccount,
    ShipmentCreated,
    ShipmentStatusChanged,
    TrackingPointAdded,
)


@logistics.entity(part_of="Shipment")
class TrackingPoint:
    """One location update. ``description`` is written for customers."""

    status = String(required=True, max_length=30, choices=ShipmentStatus)
    location = String(required=True, max_length=200)
    description = String(max_length=500)
    latitude = Float(min_value=-90.0, max_value=90.0)
    longitude = Float(min_value=-180.0, max_value=180.0)
    internal_note = Text()
    occurred_at = DateTime(required=True)


@logistics.aggregate
class Shipment:
    tracking_number = String(required=True, max_length=20, unique=True)
    status = String(max_length=30, choices=ShipmentStatus, default=ShipmentStatus.DRAFT.value)
    client_id = Identifier()
    user_id = Identifier()
    quote_id = Identifier()

    origin_address = String(max_length=300)
    origin_city = String(required=True, max_length=100)
    origin_country = String(required=True, max_length=100)
    destination_address = String(max_length=300)
    destination_city = String(required=True, max_length=100)
    destination_country = String(required=True, max_length=100)
    origin_latitude = Float()
    origin_longitude = Float()
    destination_latitude = Float()
    destination_longitude = Float()

    cargo_type = String(max_length=20, choices=CargoType, default=CargoType.GENERAL.value)
    weight = Float(required=True, min_value=0.0)
    package_count = Integer(default=1, min_value=1)
    transport_modes = Text()  # JSON list of TransportMode values

    estimated_cost = Float(min_value=0.0)
    actual_cost = Float(min_value=0.0)
    currency = String(max_length=3, default="XOF")

    requested_pickup_date = DateTime()
    actual_pickup_date = DateTime()
    estimated_delivery_date = DateTime()
    actual_delivery_date = DateTime()

    internal_notes = Text()
    tracking_points = HasMany(TrackingPoint)
    log_sequence = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def delivery_cannot_precede_pickup(self):
        if (
            self.actual_pickup_date
            and self.actual_delivery_date
            and as_utc(self.actual_delivery_date) < as_utc(self.actual_pickup_date)
        ):
            raise ValidationError({"actual_delivery_date": ["Delivery cannot precede pickup"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        tracking_number: str,
        route: dict,
        cargo: dict,
        client_id: str | None = None,
        user_id: str | None = None,
        quote_id: str | None = None,
        estimated_cost: float | None = None,
        requested_pickup_date: datetime | None = None,
        estimated_delivery_date: datetime | None = None,
    ):
        now = datetime.now(UTC)
        shipment = cls(
            tracking_number=tracking_number,
            status=ShipmentStatus.DRAFT.value,
            client_id=client_id,
            user_id=user_id,
            quote_id=quote_id,
            **{key: route.get(key) for key in _ROUTE_FIELDS},
            cargo_type=cargo.get("cargo_type") or CargoType.GENERAL.value,
            weight=cargo.get("weight"),
            package_count=cargo.get("package_count") or 1,
            transport_modes=encode_transport_modes(cargo.get("transport_modes") or []),
            estimated_cost=estimated_cost,
            requested_pickup_date=requested_pickup_date,
            estimated_delivery_date=estimated_delivery_date,
            created_at=now,
            updated_at=now,
        )
        shipment.raise_(
            ShipmentCreated(
                shipment_id=str(shipment.id),
                tracking_number=tracking_number,
                client_id=client_id,
                quote_id=quote_id,
                status=shipment.status,
                created_at=now,
            )
        )
        return shipment

    @property
    def transport_mode_list(self) -> list[str]:
        return decode_transport_modes(self.transport_modes)

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def change_status(self, new_status: ShipmentStatus, actor_id: str | None = None, notes: str | None = None) -> None:
        now = datetime.now(UTC)
        old_status = self.status
        self.status = new_status.value
        if new_status == ShipmentStatus.PICKED_UP:
            self.actual_pickup_date = now
        elif new_status == ShipmentStatus.DELIVERED:
            self.actual_delivery_date = now
        self.updated_at = now
        self.raise_(
            ShipmentStatusChanged(
                shipment_id=str(self.id),
                tracking_number=self.tracking_number,
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
            raise ValidationError({"user_id": ["Shipment already belongs to an account"]})
        now = datetime.now(UTC)
        self.user_id = user_id
        self.client_id = client_id
        self.updated_at = now
        self.raise_(
            ShipmentAttachedToAccount(
                shipment_id=str(self.id),
                user_id=user_id,
                client_id=client_id,
                matched_by=matched_by,
                attached_at=now,
            )
        )

    def add_tracking_point(
        self,
        location: str,
        description: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        internal_note: str | None = None,
        occurred_at: datetime | None = None,
    ) -> TrackingPoint:
        """Record a location update at the shipment's current status."""
        if ShipmentStatus(self.status) in (ShipmentStatus.DRAFT, ShipmentStatus.CANCELLED):
            raise ValidationError({"status": [f"Cannot track a shipment in {self.status}"]})

        now = datetime.now(UTC)
        point = TrackingPoint(
            status=self.status,
            location=location,
            description=description or "",
            latitude=latitude,
            longitude=longitude,
            internal_note=internal_note,
            occurred_at=occurred_at or now,
        )
        self.add_tracking_points(point)
        self.updated_at = now
        self.raise_(
            TrackingPointAdded(
                shipment_id=str(self.id),
                tracking_number=self.tracking_number,
                tracking_point_id=str(point.id),
                status=point.status,
                location=location,
                occurred_at=point.occurred_at,
            )
        )
        return point

    def touch(self, event_type: str) -> None:
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            ShipmentActivityRecorded(
                shipment_id=str(self.id),
                client_id=self.client_id,
                event_type=event_type,
                recorded_at=now,
            )
        )


_ROUTE_FIELDS = (
    "origin_address",
    "origin_city",
    "origin_country",
    "destination_address",
    "destination_city",
    "destination_country",
    "origin_latitude",
    "origin_longitude",
    "destination_latitude",
    "destination_longitude",
)
