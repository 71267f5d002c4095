"""Public tracking projection.

Anonymous visitors look shipments up by tracking number. The projection is
built from an explicit allow-list: route cities and countries, cargo summary,
dates, the tenant's display name and translated status labels. Costs,
coordinates, internal notes and audit metadata are never copied into it.

A malformed tracking number, an unknown one and a DRAFT shipment all give
the same "not found" answer.
"""

import re
from datetime import datetime

import structlog
from protean.utils.globals import current_domain
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from logistics.client.client import Client
from logistics.lifecycle.statuses import ShipmentStatus
from logistics.shared.cargo import decode_transport_modes
from logistics.shared.clock import as_utc
from logistics.shipment.shipment import Shipment
from logistics.tracking.labels import status_label

logger = structlog.get_logger(__name__)

TRACKING_NUMBER_PATTERN = re.compile(r"^[A-Z]{3}-\d{8}-[A-Z0-9]{5}$")

NON_PUBLIC_STATUSES = frozenset({ShipmentStatus.DRAFT.value})

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_TAGS = re.compile(r"<[^>]*>")


class _PublicModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class PublicTrackingEvent(_PublicModel):
    status: str
    status_label: str
    location: str
    timestamp: datetime
    description: str | None = None


class PublicTrackingView(_PublicModel):
    tracking_number: str
    status: str
    status_label: str
    origin_city: str
    origin_country: str
    destination_city: str
    destination_country: str
    cargo_type: str
    weight: float
    package_count: int
    transport_modes: list[str]
    requested_pickup_date: datetime | None = None
    actual_pickup_date: datetime | None = None
    estimated_delivery_date: datetime | None = None
    actual_delivery_date: datetime | None = None
    company_name: str | None = None
    events: list[PublicTrackingEvent] = []


def is_valid_tracking_number(tracking_number: str | None) -> bool:
    return bool(tracking_number) and TRACKING_NUMBER_PATTERN.fullmatch(tracking_number) is not None


def sanitize_description(text: str | None) -> str | None:
    if not text:
        return None
    cleaned = " ".join(_CONTROL_CHARS.sub(" ", _TAGS.sub("", text)).split())
    return cleaned[:500] or None


def _public_event(point) -> PublicTrackingEvent:
    return PublicTrackingEvent(
        status=point.status,
        status_label=status_label(point.status),
        location=point.location,
        timestamp=as_utc(point.occurred_at),
        description=sanitize_description(point.description),
    )


def project(shipment: Shipment, client_name: str | None = None) -> PublicTrackingView | None:
    """Public view of ``shipment``, or ``None`` while it is not public."""
    if shipment is None or shipment.status in NON_PUBLIC_STATUSES:
        return None
    points = sorted(shipment.tracking_points or [], key=lambda point: as_utc(point.occurred_at))
    return PublicTrackingView(
        tracking_number=shipment.tracking_number,
        status=shipment.status,
        status_label=status_label(shipment.status),
        origin_city=shipment.origin_city,
        origin_country=shipment.origin_country,
        destination_city=shipment.destination_city,
        destination_country=shipment.destination_country,
        cargo_type=shipment.cargo_type,
        weight=shipment.weight,
        package_count=shipment.package_count or 1,
        transport_modes=decode_transport_modes(shipment.transport_modes),
        requested_pickup_date=as_utc(shipment.requested_pickup_date),
        actual_pickup_date=as_utc(shipment.actual_pickup_date),
        estimated_delivery_date=as_utc(shipment.estimated_delivery_date),
        actual_delivery_date=as_utc(shipment.actual_delivery_date),
        company_name=client_name,
        events=[_public_event(point) for point in points],
    )


def _find(tracking_number: str) -> Shipment | None:
    return (
        current_domain.repository_for(Shipment)._dao.query.filter(tracking_number=tracking_number).limit(1).all().first
    )


def lookup(tracking_number: str | None) -> PublicTrackingView | None:
    if not is_valid_tracking_number(tracking_number):
        logger.info("Tracking lookup rejected", reason="format")
        return None
    shipment = _find(tracking_number)
    if shipment is None:
        return None
    if shipment.status in NON_PUBLIC_STATUSES:
        logger.info("Tracking lookup of non-public shipment", tracking_number=tracking_number)
        return None
    # Full aggregate, tracking points included
    shipment = current_domain.repository_for(Shipment).get(shipment.id)
    client_name = current_domain.repository_for(Client).display_name_of(shipment.client_id)
    return project(shipment, client_name)


def tracking_number_exists(tracking_number: str | None) -> bool:
    if not is_valid_tracking_number(tracking_number):
        return False
    shipment = _find(tracking_number)
    return shipment is not None and shipment.status not in NON_PUBLIC_STATUSES
