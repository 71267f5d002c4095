"""FastAPI routes for the Logistics domain — quotes, shipments, pickups, purchases."""

import json

from fastapi import APIRouter, Depends

from logistics.access.resolver import list_scoped
from logistics.api.dependencies import current_actor
from logistics.api.errors import unwrap
from logistics.api.schemas import (
    ActivityRequest,
    AddTrackingPointRequest,
    AssignDriverRequest,
    CreatedResponse,
    CreateQuoteRequest,
    CreateShipmentRequest,
    ExpireQuotesRequest,
    ExpireQuotesResponse,
    HistoryResponse,
    ListResponse,
    RecordPaymentRequest,
    RequestPickupRequest,
    RequestPurchaseRequest,
    SchedulePickupRequest,
    StatusResponse,
    TransitionRequest,
    TransitionResponse,
    UpdateCostsRequest,
)
from logistics.lifecycle.service import (
    create_entity,
    entity_history,
    request_activity,
    request_transition,
    run_entity_command,
)
from logistics.lifecycle.statuses import EntityFamily
from logistics.pickup.pickup import PickupRequest
from logistics.pickup.scheduling import AssignPickupDriver, ReschedulePickup, SchedulePickup
from logistics.purchase.costs import UpdatePurchaseCosts
from logistics.purchase.purchase import PurchaseRequest
from logistics.quote.activity import RecordQuotePayment
from logistics.quote.expiry import expire_quotes
from logistics.quote.quote import Quote
from logistics.shared.actor import Actor
from logistics.shared.errors import AuthorizationError
from logistics.shared.roles import OPERATIONS, UserRole
from logistics.shipment.shipment import Shipment
from logistics.shipment.tracking import AddTrackingPoint


def _transition(actor: Actor, family: EntityFamily, entity_id: str, body: TransitionRequest) -> TransitionResponse:
    status = unwrap(
        request_transition(
            actor,
            family,
            entity_id,
            body.target_status,
            notes=body.notes,
            metadata=body.metadata,
            expected_status=body.expected_status,
        )
    )
    return TransitionResponse(id=entity_id, status=status)


def _list(actor: Actor, aggregate_cls, status: str | None) -> ListResponse:
    filters = {"status": status.upper()} if status else {}
    return ListResponse(items=[row.to_dict() for row in list_scoped(actor, aggregate_cls, **filters)])


def _history(actor: Actor, family: EntityFamily, entity_id: str) -> HistoryResponse:
    events = unwrap(entity_history(actor, family, entity_id))
    return HistoryResponse(entity_id=entity_id, events=events)


def _activity(actor: Actor, family: EntityFamily, entity_id: str, body: ActivityRequest) -> StatusResponse:
    unwrap(request_activity(actor, family, entity_id, body.event_type, metadata=body.metadata, notes=body.notes))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Quote Router
# ---------------------------------------------------------------------------
quote_router = APIRouter(prefix="/quotes", tags=["quotes"])


@quote_router.post("", status_code=201, response_model=CreatedResponse)
async def create_quote(body: CreateQuoteRequest, actor: Actor = Depends(current_actor)) -> CreatedResponse:
    fields = body.model_dump(exclude={"transport_modes", "breakdown"})
    created = unwrap(
        create_entity(
            actor,
            EntityFamily.QUOTE,
            **fields,
            transport_modes=json.dumps(body.transport_modes),
            breakdown=json.dumps(body.breakdown) if body.breakdown else None,
        )
    )
    return CreatedResponse(**created)


@quote_router.get("", response_model=ListResponse)
async def list_quotes(status: str | None = None, actor: Actor = Depends(current_actor)) -> ListResponse:
    return _list(actor, Quote, status)


@quote_router.put("/{quote_id}/status", response_model=TransitionResponse)
async def change_quote_status(
    quote_id: str, body: TransitionRequest, actor: Actor = Depends(current_actor)
) -> TransitionResponse:
    return _transition(actor, EntityFamily.QUOTE, quote_id, body)


@quote_router.get("/{quote_id}/history", response_model=HistoryResponse)
async def quote_history(quote_id: str, actor: Actor = Depends(current_actor)) -> HistoryResponse:
    return _history(actor, EntityFamily.QUOTE, quote_id)


@quote_router.post("/{quote_id}/activities", response_model=StatusResponse)
async def record_quote_activity(
    quote_id: str, body: ActivityRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    return _activity(actor, EntityFamily.QUOTE, quote_id, body)


@quote_router.post("/{quote_id}/payments", response_model=StatusResponse)
async def record_quote_payment(
    quote_id: str, body: RecordPaymentRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = RecordQuotePayment(quote_id=quote_id, **body.model_dump(), **actor.as_command_fields())
    unwrap(run_entity_command(EntityFamily.QUOTE, quote_id, command))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Shipment Router
# ---------------------------------------------------------------------------
shipment_router = APIRouter(prefix="/shipments", tags=["shipments"])


@shipment_router.post("", status_code=201, response_model=CreatedResponse)
async def create_shipment(body: CreateShipmentRequest, actor: Actor = Depends(current_actor)) -> CreatedResponse:
    fields = body.model_dump(exclude={"transport_modes"})
    created = unwrap(
        create_entity(
            actor,
            EntityFamily.SHIPMENT,
            **fields,
            transport_modes=json.dumps(body.transport_modes) if body.transport_modes else None,
        )
    )
    return CreatedResponse(**created)


@shipment_router.get("", response_model=ListResponse)
async def list_shipments(status: str | None = None, actor: Actor = Depends(current_actor)) -> ListResponse:
    return _list(actor, Shipment, status)


@shipment_router.put("/{shipment_id}/status", response_model=TransitionResponse)
async def change_shipment_status(
    shipment_id: str, body: TransitionRequest, actor: Actor = Depends(current_actor)
) -> TransitionResponse:
    return _transition(actor, EntityFamily.SHIPMENT, shipment_id, body)


@shipment_router.get("/{shipment_id}/history", response_model=HistoryResponse)
async def shipment_history(shipment_id: str, actor: Actor = Depends(current_actor)) -> HistoryResponse:
    return _history(actor, EntityFamily.SHIPMENT, shipment_id)


@shipment_router.post("/{shipment_id}/activities", response_model=StatusResponse)
async def record_shipment_activity(
    shipment_id: str, body: ActivityRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    return _activity(actor, EntityFamily.SHIPMENT, shipment_id, body)


@shipment_router.post("/{shipment_id}/tracking-points", status_code=201)
async def add_tracking_point(
    shipment_id: str, body: AddTrackingPointRequest, actor: Actor = Depends(current_actor)
) -> dict:
    command = AddTrackingPoint(shipment_id=shipment_id, **body.model_dump(), **actor.as_command_fields())
    point_id = unwrap(run_entity_command(EntityFamily.SHIPMENT, shipment_id, command))
    return {"tracking_point_id": point_id}


# ---------------------------------------------------------------------------
# Pickup Router
# ---------------------------------------------------------------------------
pickup_router = APIRouter(prefix="/pickups", tags=["pickups"])


@pickup_router.post("", status_code=201, response_model=CreatedResponse)
async def request_pickup(body: RequestPickupRequest, actor: Actor = Depends(current_actor)) -> CreatedResponse:
    created = unwrap(create_entity(actor, EntityFamily.PICKUP, **body.model_dump()))
    return CreatedResponse(**created)


@pickup_router.post("/guest", status_code=201, response_model=CreatedResponse)
async def request_guest_pickup(body: RequestPickupRequest) -> CreatedResponse:
    """Anonymous pickup request; claimed later by the account matching its contact."""
    fields = body.model_dump(exclude={"client_id"})
    created = unwrap(create_entity(Actor.system(), EntityFamily.PICKUP, **fields, is_guest=True))
    return CreatedResponse(**created)


@pickup_router.get("", response_model=ListResponse)
async def list_pickups(status: str | None = None, actor: Actor = Depends(current_actor)) -> ListResponse:
    return _list(actor, PickupRequest, status)


@pickup_router.put("/{pickup_id}/status", response_model=TransitionResponse)
async def change_pickup_status(
    pickup_id: str, body: TransitionRequest, actor: Actor = Depends(current_actor)
) -> TransitionResponse:
    return _transition(actor, EntityFamily.PICKUP, pickup_id, body)


@pickup_router.get("/{pickup_id}/history", response_model=HistoryResponse)
async def pickup_history(pickup_id: str, actor: Actor = Depends(current_actor)) -> HistoryResponse:
    return _history(actor, EntityFamily.PICKUP, pickup_id)


@pickup_router.post("/{pickup_id}/activities", response_model=StatusResponse)
async def record_pickup_activity(
    pickup_id: str, body: ActivityRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    return _activity(actor, EntityFamily.PICKUP, pickup_id, body)


@pickup_router.post("/{pickup_id}/schedule", response_model=StatusResponse)
async def schedule_pickup(
    pickup_id: str, body: SchedulePickupRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = SchedulePickup(pickup_id=pickup_id, **body.model_dump(), **actor.as_command_fields())
    unwrap(run_entity_command(EntityFamily.PICKUP, pickup_id, command))
    return StatusResponse()


@pickup_router.put("/{pickup_id}/schedule", response_model=StatusResponse)
async def reschedule_pickup(
    pickup_id: str, body: SchedulePickupRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = ReschedulePickup(pickup_id=pickup_id, **body.model_dump(), **actor.as_command_fields())
    unwrap(run_entity_command(EntityFamily.PICKUP, pickup_id, command))
    return StatusResponse()


@pickup_router.put("/{pickup_id}/driver", response_model=StatusResponse)
async def assign_pickup_driver(
    pickup_id: str, body: AssignDriverRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = AssignPickupDriver(pickup_id=pickup_id, **body.model_dump(), **actor.as_command_fields())
    unwrap(run_entity_command(EntityFamily.PICKUP, pickup_id, command))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Purchase Router
# ---------------------------------------------------------------------------
purchase_router = APIRouter(prefix="/purchases", tags=["purchases"])


@purchase_router.post("", status_code=201, response_model=CreatedResponse)
async def request_purchase(body: RequestPurchaseRequest, actor: Actor = Depends(current_actor)) -> CreatedResponse:
    created = unwrap(create_entity(actor, EntityFamily.PURCHASE, **body.model_dump()))
    return CreatedResponse(**created)


@purchase_router.post("/guest", status_code=201, response_model=CreatedResponse)
async def request_guest_purchase(body: RequestPurchaseRequest) -> CreatedResponse:
    fields = body.model_dump(exclude={"client_id"})
    created = unwrap(create_entity(Actor.system(), EntityFamily.PURCHASE, **fields, is_guest=True))
    return CreatedResponse(**created)


@purchase_router.get("", response_model=ListResponse)
async def list_purchases(status: str | None = None, actor: Actor = Depends(current_actor)) -> ListResponse:
    return _list(actor, PurchaseRequest, status)


@purchase_router.put("/{purchase_id}/status", response_model=TransitionResponse)
async def change_purchase_status(
    purchase_id: str, body: TransitionRequest, actor: Actor = Depends(current_actor)
) -> TransitionResponse:
    return _transition(actor, EntityFamily.PURCHASE, purchase_id, body)


@purchase_router.get("/{purchase_id}/history", response_model=HistoryResponse)
async def purchase_history(purchase_id: str, actor: Actor = Depends(current_actor)) -> HistoryResponse:
    return _history(actor, EntityFamily.PURCHASE, purchase_id)


@purchase_router.post("/{purchase_id}/activities", response_model=StatusResponse)
async def record_purchase_activity(
    purchase_id: str, body: ActivityRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    return _activity(actor, EntityFamily.PURCHASE, purchase_id, body)


@purchase_router.put("/{purchase_id}/costs", response_model=StatusResponse)
async def update_purchase_costs(
    purchase_id: str, body: UpdateCostsRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = UpdatePurchaseCosts(purchase_id=purchase_id, **body.model_dump(), **actor.as_command_fields())
    unwrap(run_entity_command(EntityFamily.PURCHASE, purchase_id, command))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Maintenance Router
# ---------------------------------------------------------------------------
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post("/expire-quotes", response_model=ExpireQuotesResponse)
async def run_quote_expiry(
    body: ExpireQuotesRequest, actor: Actor = Depends(current_actor)
) -> ExpireQuotesResponse:
    if actor.role not in OPERATIONS | {UserRole.SYSTEM}:
        raise AuthorizationError("Only operations staff or the scheduler can expire quotes")
    return ExpireQuotesResponse(**expire_quotes(body.as_of))
