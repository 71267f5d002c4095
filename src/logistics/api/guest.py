"""Routes that bring guest-held data into an account."""

from fastapi import APIRouter, Depends

from logistics.api.dependencies import current_actor
from logistics.api.schemas import AttachGuestRecordsResponse, ReconcileRequest, ReconcileResponse
from logistics.guest.attachment import attach_guest_records
from logistics.guest.reconciliation import reconcile
from logistics.shared.actor import Actor

guest_router = APIRouter(tags=["guests"])


@guest_router.post("/guest-quotes/reconcile", response_model=ReconcileResponse)
async def reconcile_guest_quotes(body: ReconcileRequest, actor: Actor = Depends(current_actor)) -> ReconcileResponse:
    report = reconcile(actor, body.candidates)
    return ReconcileResponse(**report.to_dict(), settled_ids=report.settled_ids)


@guest_router.post("/guest-records/attach", response_model=AttachGuestRecordsResponse)
async def attach_records(actor: Actor = Depends(current_actor)) -> AttachGuestRecordsResponse:
    return AttachGuestRecordsResponse(**attach_guest_records(actor).to_dict())
