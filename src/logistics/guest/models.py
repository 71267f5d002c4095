"""Guest quote shapes.

A guest quote lives in the visitor's browser storage, not on the server.
These models describe one stored entry as JSON (camelCase keys, the way the
calculator writes them) and validate whatever the client sends back at
reconciliation time.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from logistics.shared.clock import as_utc


class _Camel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class GuestQuoteFormData(_Camel):
    origin_country: str = Field(min_length=2)
    origin_city: str | None = None
    destination_country: str = Field(min_length=2)
    destination_city: str | None = None
    cargo_type: str = "GENERAL"
    weight: float = Field(gt=0, le=100000)
    length: float | None = Field(default=None, ge=0)
    width: float | None = Field(default=None, ge=0)
    height: float | None = Field(default=None, ge=0)
    transport_mode: list[str] = Field(min_length=1)
    priority: str | None = None


class CostBreakdown(_Camel):
    base_cost: float = 0.0
    transport_mode_cost: float = 0.0
    cargo_type_surcharge: float = 0.0
    priority_surcharge: float = 0.0
    distance_factor: float = 1.0


class GuestQuoteResult(_Camel):
    estimated_cost: float = Field(ge=0)
    currency: str = Field(default="XOF", min_length=3, max_length=3)
    estimated_delivery_days: int = Field(ge=0)
    breakdown: CostBreakdown = Field(default_factory=CostBreakdown)


class GuestQuote(_Camel):
    id: str = Field(min_length=1)
    created_at: datetime
    expires_at: datetime
    form_data: GuestQuoteFormData
    result: GuestQuoteResult

    def is_expired(self, now: datetime) -> bool:
        return as_utc(self.expires_at) <= as_utc(now)

    def route(self) -> dict:
        return {
            "origin_country": self.form_data.origin_country,
            "origin_city": self.form_data.origin_city,
            "destination_country": self.form_data.destination_country,
            "destination_city": self.form_data.destination_city,
        }

    def cargo(self) -> dict:
        return {
            "cargo_type": self.form_data.cargo_type,
            "weight": self.form_data.weight,
            "length": self.form_data.length,
            "width": self.form_data.width,
            "height": self.form_data.height,
            "transport_modes": self.form_data.transport_mode,
            "priority": self.form_data.priority,
        }

    def pricing(self) -> dict:
        return {
            "estimated_cost": self.result.estimated_cost,
            "currency": self.result.currency,
            "estimated_delivery_days": self.result.estimated_delivery_days,
            "breakdown": self.result.breakdown.model_dump(by_alias=True),
        }
