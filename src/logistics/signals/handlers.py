"""Domain event handlers that turn committed changes into invalidation signals."""

import structlog
from protean.utils.mixins import handle

from logistics.domain import logistics
from logistics.pickup.events import (
    PickupActivityRecorded,
    PickupAttachedToAccount,
    PickupDriverAssigned,
    PickupRequested,
    PickupScheduleChanged,
    PickupStatusChanged,
)
from logistics.pickup.pickup import PickupRequest
from logistics.purchase.events import (
    PurchaseActivityRecorded,
    PurchaseAttachedToAccount,
    PurchaseCostsUpdated,
    PurchaseRequested,
    PurchaseStatusChanged,
)
from logistics.purchase.purchase import PurchaseRequest
from logistics.quote.events import (
    QuoteActivityRecorded,
    QuoteAttachedToAccount,
    QuoteCreated,
    QuotePaymentReceived,
    QuoteStatusChanged,
)
from logistics.quote.quote import Quote
from logistics.shipment.events import (
    ShipmentActivityRecorded,
    ShipmentAttachedToAccount,
    ShipmentCreated,
    ShipmentStatusChanged,
    TrackingPointAdded,
)
from logistics.shipment.shipment import Shipment
from logistics.signals import get_bus
from logistics.signals.bus import InvalidationSignal

logger = structlog.get_logger(__name__)


def _announce(family: str, entity_id, event, reason: str) -> None:
    client_id = getattr(event, "client_id", None)
    signal = InvalidationSignal(
        family=family,
        entity_id=str(entity_id),
        client_id=str(client_id) if client_id else None,
        reason=reason,
    )
    delivered = get_bus().publish(signal)
    logger.debug("Invalidation published", family=family, entity_id=str(entity_id), reason=reason, delivered=delivered)


@logistics.event_handler(part_of=Quote)
class QuoteInvalidationHandler:
    @handle(QuoteCreated)
    def on_created(self, event: QuoteCreated) -> None:
        _announce("QUOTE", event.quote_id, event, "created")

    @handle(QuoteStatusChanged)
    def on_status_changed(self, event: QuoteStatusChanged) -> None:
        _announce("QUOTE", event.quote_id, event, "status_changed")

    @handle(QuoteAttachedToAccount)
    def on_attached(self, event: QuoteAttachedToAccount) -> None:
        _announce("QUOTE", event.quote_id, event, "attached_to_account")

    @handle(QuotePaymentReceived)
    def on_payment(self, event: QuotePaymentReceived) -> None:
        _announce("QUOTE", event.quote_id, event, "payment_received")

    @handle(QuoteActivityRecorded)
    def on_activity(self, event: QuoteActivityRecorded) -> None:
        _announce("QUOTE", event.quote_id, event, "activity")


@logistics.event_handler(part_of=Shipment)
class ShipmentInvalidationHandler:
    @handle(ShipmentCreated)
    def on_created(self, event: ShipmentCreated) -> None:
        _announce("SHIPMENT", event.shipment_id, event, "created")

    @handle(ShipmentStatusChanged)
    def on_status_changed(self, event: ShipmentStatusChanged) -> None:
        _announce("SHIPMENT", event.shipment_id, event, "status_changed")

    @handle(ShipmentAttachedToAccount)
    def on_attached(self, event: ShipmentAttachedToAccount) -> None:
        _announce("SHIPMENT", event.shipment_id, event, "attached_to_account")

    @handle(TrackingPointAdded)
    def on_tracking_point(self, event: TrackingPointAdded) -> None:
        _announce("SHIPMENT", event.shipment_id, event, "tracking_point_added")

    @handle(ShipmentActivityRecorded)
    def on_activity(self, event: ShipmentActivityRecorded) -> None:
        _announce("SHIPMENT", event.shipment_id, event, "activity")


@logistics.event_handler(part_of=PickupRequest)
class PickupInvalidationHandler:
    @handle(PickupRequested)
    def on_created(self, event: PickupRequested) -> None:
        _announce("PICKUP", event.pickup_id, event, "created")

    @handle(PickupStatusChanged)
    def on_status_changed(self, event: PickupStatusChanged) -> None:
        _announce("PICKUP", event.pickup_id, event, "status_changed")

    @handle(PickupAttachedToAccount)
    def on_attached(self, event: PickupAttachedToAccount) -> None:
        _announce("PICKUP", event.pickup_id, event, "attached_to_account")

    @handle(PickupScheduleChanged)
    def on_schedule_changed(self, event: PickupScheduleChanged) -> None:
        _announce("PICKUP", event.pickup_id, event, "schedule_changed")

    @handle(PickupDriverAssigned)
    def on_driver_assigned(self, event: PickupDriverAssigned) -> None:
        _announce("PICKUP", event.pickup_id, event, "driver_assigned")

    @handle(PickupActivityRecorded)
    def on_activity(self, event: PickupActivityRecorded) -> None:
        _announce("PICKUP", event.pickup_id, event, "activity")


@logistics.event_handler(part_of=PurchaseRequest)
class PurchaseInvalidationHandler:
    @handle(PurchaseRequested)
    def on_created(self, event: PurchaseRequested) -> None:
        _announce("PURCHASE", event.purchase_id, event, "created")

    @handle(PurchaseStatusChanged)
    def on_status_changed(self, event: PurchaseStatusChanged) -> None:
        _announce("PURCHASE", event.purchase_id, event, "status_changed")

    @handle(PurchaseAttachedToAccount)
    def on_attached(self, event: PurchaseAttachedToAccount) -> None:
        _announce("PURCHASE", event.purchase_id, event, "attached_to_account")

    @handle(PurchaseCostsUpdated)
    def on_costs_updated(self, event: PurchaseCostsUpdated) -> None:
        _announce("PURCHASE", event.purchase_id, event, "costs_updated")

    @handle(PurchaseActivityRecorded)
    def on_activity(self, event: PurchaseActivityRecorded) -> None:
        _announce("PURCHASE", event.purchase_id, event, "activity")
