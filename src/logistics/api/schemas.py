"""Pydantic request/response schemas for the Logistics API.

These are external contracts — separate from internal Protean commands.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class TransitionRequest(BaseModel):
    target_status: str
    notes: str | None = None
    metadata: dict[str, Any] | None = None
    expected_status: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "target_status": "CANCELED",
                    "notes": "Customer withdrew the request",
                    "expected_status": "REQUESTED",
                }
            ]
        }
    }


class ActivityRequest(BaseModel):
    event_type: str
    metadata: dict[str, Any] | None = None
    notes: str | None = None


class CreatedResponse(BaseModel):
    id: str
    number: str


class TransitionResponse(BaseModel):
    id: str
    status: str


class StatusResponse(BaseModel):
    status: str = "ok"


class LogEventSchema(BaseModel):
    id: str
    entity_family: str
    entity_id: str
    sequence: int
    event_type: str
    old_status: str | None = None
    new_status: str | None = None
    actor_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    notes: str | None = None
    created_at: datetime | None = None


class HistoryResponse(BaseModel):
    entity_id: str
    events: list[LogEventSchema]


class ListResponse(BaseModel):
    items: list[dict[str, Any]]


class ErrorResponse(BaseModel):
    reason_code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------------
class CreateQuoteRequest(BaseModel):
    client_id: str | None = None
    origin_country: str
    origin_city: str | None = None
    destination_country: str
    destination_city: str | None = None
    cargo_type: str | None = None
    weight: float = Field(gt=0)
    length: float | None = Field(default=None, ge=0)
    width: float | None = Field(default=None, ge=0)
    height: float | None = Field(default=None, ge=0)
    transport_modes: list[str] = Field(default_factory=list)
    priority: str | None = None
    estimated_cost: float | None = Field(default=None, ge=0)
    currency: str | None = None
    estimated_delivery_days: int | None = Field(default=None, ge=0)
    breakdown: dict[str, float] | None = None


class RecordPaymentRequest(BaseModel):
    amount: float = Field(gt=0)
    currency: str = Field(min_length=3, max_length=3)
    reference: str | None = None
    payment_method: str | None = None


class ExpireQuotesRequest(BaseModel):
    as_of: datetime | None = None


class ExpireQuotesResponse(BaseModel):
    expired: list[str]
    failed: list[dict[str, Any]]


# ---------------------------------------------------------------------------
# Shipments
# ---------------------------------------------------------------------------
class CreateShipmentRequest(BaseModel):
    client_id: str | None = None
    quote_id: str | None = None
    origin_address: str | None = None
    origin_city: str | None = None
    origin_country: str | None = None
    destination_address: str | None = None
    destination_city: str | None = None
    destination_country: str | None = None
    cargo_type: str | None = None
    weight: float | None = Field(default=None, gt=0)
    package_count: int | None = Field(default=None, ge=1)
    transport_modes: list[str] = Field(default_factory=list)
    estimated_cost: float | None = Field(default=None, ge=0)
    requested_pickup_date: datetime | None = None
    estimated_delivery_date: datetime | None = None


class AddTrackingPointRequest(BaseModel):
    location: str
    description: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    internal_note: str | None = None
    occurred_at: datetime | None = None


# ---------------------------------------------------------------------------
# Pickups
# ---------------------------------------------------------------------------
class RequestPickupRequest(BaseModel):
    client_id: str | None = None
    shipment_id: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    pickup_address: str
    pickup_city: str
    pickup_country: str
    cargo_description: str | None = None
    weight: float | None = Field(default=None, ge=0)
    requested_date: datetime | None = None
    special_instructions: str | None = None


class SchedulePickupRequest(BaseModel):
    scheduled_date: datetime
    time_slot: str | None = None
    notes: str | None = None


class AssignDriverRequest(BaseModel):
    driver_id: str
    driver_name: str | None = None


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------
class RequestPurchaseRequest(BaseModel):
    client_id: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    product_name: str
    product_url: str | None = None
    product_description: str | None = None
    quantity: int = Field(default=1, ge=1)
    estimated_price: float | None = Field(default=None, ge=0)
    delivery_address: str
    delivery_city: str
    delivery_country: str


class UpdateCostsRequest(BaseModel):
    actual_product_cost: float | None = Field(default=None, ge=0)
    delivery_cost: float | None = Field(default=None, ge=0)
    service_fee: float | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Guests
# ---------------------------------------------------------------------------
class ReconcileRequest(BaseModel):
    """Guest quotes as held in the visitor's local store (camelCase JSON)."""

    candidates: list[dict[str, Any]] = Field(default_factory=list)


class ReconcileResponse(BaseModel):
    attached: list[dict[str, Any]]
    skipped: list[dict[str, Any]]
    settled_ids: list[str]


class AttachGuestRecordsResponse(BaseModel):
    attached: list[dict[str, Any]]
    failed: list[dict[str, Any]]
