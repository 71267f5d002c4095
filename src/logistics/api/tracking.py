"""Public, unauthenticated tracking lookup."""

from fastapi import APIRouter

from logistics.api.errors import OperationFailed
from logistics.shared.results import OperationResult
from logistics.tracking.projection import PublicTrackingView, lookup

tracking_router = APIRouter(prefix="/tracking", tags=["tracking"])


@tracking_router.get("/{tracking_number}", response_model=PublicTrackingView, response_model_by_alias=True)
async def track_shipment(tracking_number: str) -> PublicTrackingView:
    view = lookup(tracking_number)
    if view is None:
        # Malformed, unknown and non-public shipments are indistinguishable
        raise OperationFailed(OperationResult.failure("NOT_FOUND", "Shipment not found"))
    return view
