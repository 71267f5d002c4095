"""Operation boundary for lifecycle requests.

Routes and the guest reconciler call these functions. Each one runs a
single command synchronously, serialized per entity inside the process,
and returns an ``OperationResult`` instead of raising for expected failures.
"""

import json
from enum import Enum

import structlog
from protean.utils.globals import current_domain

from logistics.access.resolver import require_read
from logistics.audit.writer import history
from logistics.lifecycle.statuses import EntityFamily
from logistics.lifecycle.workflow import load
from logistics.numbering.sequence import next_number_for
from logistics.pickup.creation import RequestPickup
from logistics.pickup.pickup import PickupRequest
from logistics.pickup.scheduling import RecordPickupActivity
from logistics.pickup.status import ChangePickupStatus
from logistics.purchase.costs import RecordPurchaseActivity
from logistics.purchase.creation import RequestPurchase
from logistics.purchase.purchase import PurchaseRequest
from logistics.purchase.status import ChangePurchaseStatus
from logistics.quote.activity import RecordQuoteActivity
from logistics.quote.creation import CreateQuote
from logistics.quote.quote import Quote
from logistics.quote.status import ChangeQuoteStatus
from logistics.shared.actor import Actor
from logistics.shared.results import OperationResult, capture
from logistics.shipment.creation import CreateShipment
from logistics.shipment.shipment import Shipment
from logistics.shipment.status import ChangeShipmentStatus
from logistics.shipment.tracking import RecordShipmentActivity
from logistics.utils.locks import entity_locks

logger = structlog.get_logger(__name__)


class FamilyBinding:
    """Aggregate and command classes that serve one entity family."""

    def __init__(self, aggregate, id_field, number_field, create, change_status, record_activity):
        self.aggregate = aggregate
        self.id_field = id_field
        self.number_field = number_field
        self.create = create
        self.change_status = change_status
        self.record_activity = record_activity


BINDINGS = {
    EntityFamily.QUOTE: FamilyBinding(
        Quote, "quote_id", "quote_number", CreateQuote, ChangeQuoteStatus, RecordQuoteActivity
    ),
    EntityFamily.SHIPMENT: FamilyBinding(
        Shipment, "shipment_id", "tracking_number", CreateShipment, ChangeShipmentStatus, RecordShipmentActivity
    ),
    EntityFamily.PICKUP: FamilyBinding(
        PickupRequest, "pickup_id", "request_number", RequestPickup, ChangePickupStatus, RecordPickupActivity
    ),
    EntityFamily.PURCHASE: FamilyBinding(
        PurchaseRequest, "purchase_id", "request_number", RequestPurchase, ChangePurchaseStatus, RecordPurchaseActivity
    ),
}


def _family(family: EntityFamily | str) -> EntityFamily:
    return family if isinstance(family, EntityFamily) else EntityFamily(str(family).upper())


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _process_for(family: EntityFamily, entity_id: str, command):
    with entity_locks.hold(f"{family.value}:{entity_id}"):
        return _process(command)


def create_entity(actor: Actor, family: EntityFamily | str, **fields) -> OperationResult:
    """Reserve a business number and create an entity in its initial status."""
    family = _family(family)
    binding = BINDINGS[family]

    def _create():
        number = next_number_for(family)
        entity_id = _process(binding.create(**{binding.number_field: number}, **fields, **actor.as_command_fields()))
        return {"id": entity_id, "number": number}

    result = capture(_create)
    if result.ok:
        logger.info("Entity created", family=family.value, **result.data)
    return result


def request_transition(
    actor: Actor,
    family: EntityFamily | str,
    entity_id: str,
    target_status: Enum | str,
    notes: str | None = None,
    metadata: dict | None = None,
    expected_status: str | None = None,
) -> OperationResult:
    family = _family(family)
    binding = BINDINGS[family]
    command = binding.change_status(
        **{binding.id_field: entity_id},
        target_status=target_status.value if isinstance(target_status, Enum) else target_status,
        expected_status=expected_status,
        notes=notes,
        event_metadata=json.dumps(metadata) if metadata else None,
        **actor.as_command_fields(),
    )
    return capture(_process_for, family, entity_id, command)


def request_activity(
    actor: Actor,
    family: EntityFamily | str,
    entity_id: str,
    event_type: str,
    metadata: dict | None = None,
    notes: str | None = None,
) -> OperationResult:
    """Log a comment, document, note or similar action on an entity."""
    family = _family(family)
    binding = BINDINGS[family]
    command = binding.record_activity(
        **{binding.id_field: entity_id},
        event_type=event_type,
        event_metadata=json.dumps(metadata) if metadata else None,
        notes=notes,
        **actor.as_command_fields(),
    )
    return capture(_process_for, family, entity_id, command)


def run_entity_command(family: EntityFamily | str, entity_id: str, command) -> OperationResult:
    """Run a family-specific command (schedule, costs, tracking point) on one entity."""
    return capture(_process_for, _family(family), entity_id, command)


def entity_history(actor: Actor, family: EntityFamily | str, entity_id: str) -> OperationResult:
    """The ordered audit log of an entity the actor may see."""
    family = _family(family)
    binding = BINDINGS[family]

    def _read():
        entity = load(binding.aggregate, entity_id)
        require_read(actor, entity, binding.aggregate.__name__)
        return [event.to_dict() for event in history(entity_id)]

    return capture(_read)
