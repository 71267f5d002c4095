"""Transition graphs of the four entity families.

Each graph maps a status to the edges leaving it. An edge may restrict the
roles allowed to traverse it and may name the audit event kind recorded for
it; edges without roles are open to any actor already scoped to the entity,
edges without an event kind record ``STATUS_CHANGED``. Statuses without
outgoing edges are terminal.

Quote:
    DRAFT → SUBMITTED → SENT → ACCEPTED → IN_TREATMENT → VALIDATED
    SENT → {REJECTED, EXPIRED};  SUBMITTED → REJECTED
    {DRAFT, SUBMITTED, SENT, ACCEPTED, IN_TREATMENT} → CANCELLED

Shipment:
    DRAFT → PENDING_APPROVAL → APPROVED → PICKED_UP → IN_TRANSIT
    IN_TRANSIT → {AT_CUSTOMS, OUT_FOR_DELIVERY, READY_FOR_PICKUP}
    AT_CUSTOMS → CUSTOMS_CLEARED → {IN_TRANSIT, OUT_FOR_DELIVERY, READY_FOR_PICKUP}
    {OUT_FOR_DELIVERY, READY_FOR_PICKUP} → DELIVERED
    ON_HOLD and EXCEPTION are side tracks that resume or cancel

Pickup:
    REQUESTED → SCHEDULED → IN_PROGRESS → COMPLETED, each → CANCELED

Purchase:
    NEW → IN_PROGRESS → DELIVERED, each → CANCELLED
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from logistics.audit.event_types import (
    PickupEventType,
    PurchaseEventType,
    QuoteEventType,
    ShipmentEventType,
)
from logistics.lifecycle.statuses import (
    EntityFamily,
    PickupStatus,
    PurchaseStatus,
    QuoteStatus,
    ShipmentStatus,
)
from logistics.shared.roles import BACK_OFFICE, FINANCE, OPERATIONS, UserRole


@dataclass(frozen=True)
class Edge:
    target: Enum
    roles: frozenset[UserRole] | None = None
    event_type: Enum | None = None

    def permits(self, role: UserRole) -> bool:
        return self.roles is None or role in self.roles


@dataclass(frozen=True)
class TransitionGraph:
    family: EntityFamily
    initial: Enum
    edges: dict[Enum, tuple[Edge, ...]]
    cancellation_states: frozenset[Enum] = field(default_factory=frozenset)
    default_event_type: Enum | None = None
    created_event_type: Enum | None = None

    def edges_from(self, status: Enum | None) -> tuple[Edge, ...]:
        if status is None:
            return (Edge(self.initial, event_type=self.created_event_type),)
        return self.edges.get(status, ())

    def edge(self, current: Enum | None, target: Enum) -> Edge | None:
        return next((e for e in self.edges_from(current) if e.target == target), None)

    def is_terminal(self, status: Enum) -> bool:
        return not self.edges.get(status)

    @property
    def terminal_states(self) -> frozenset[Enum]:
        return frozenset(s for s in type(self.initial) if self.is_terminal(s))


def _build(
    family: EntityFamily,
    initial: Enum,
    table: dict[Enum, Iterable[Edge]],
    cancellation_states: Iterable[Enum],
    event_types: type[Enum],
) -> TransitionGraph:
    status_enum = type(initial)
    edges = {status: tuple(table.get(status, ())) for status in status_enum}
    return TransitionGraph(
        family=family,
        initial=initial,
        edges=edges,
        cancellation_states=frozenset(cancellation_states),
        default_event_type=event_types["STATUS_CHANGED"],
        created_event_type=event_types["CREATED"],
    )


# ---------------------------------------------------------------------------
# Quote
# ---------------------------------------------------------------------------
_Q = QuoteStatus
_QE = QuoteEventType
_CLIENT_OR_OPS = OPERATIONS | {UserRole.CLIENT}

QUOTE_GRAPH = _build(
    EntityFamily.QUOTE,
    _Q.DRAFT,
    {
        _Q.DRAFT: [
            Edge(_Q.SUBMITTED),
            Edge(_Q.CANCELLED, event_type=_QE.CANCELLED),
        ],
        _Q.SUBMITTED: [
            Edge(_Q.SENT, OPERATIONS, _QE.SENT_TO_CLIENT),
            Edge(_Q.REJECTED, OPERATIONS),
            Edge(_Q.CANCELLED, event_type=_QE.CANCELLED),
        ],
        _Q.SENT: [
            Edge(_Q.ACCEPTED, _CLIENT_OR_OPS, _QE.ACCEPTED_BY_CLIENT),
            Edge(_Q.REJECTED, _CLIENT_OR_OPS, _QE.REJECTED_BY_CLIENT),
            Edge(_Q.EXPIRED, OPERATIONS | {UserRole.SYSTEM}, _QE.EXPIRED),
            Edge(_Q.CANCELLED, OPERATIONS, _QE.CANCELLED),
        ],
        _Q.ACCEPTED: [
            Edge(_Q.IN_TREATMENT, BACK_OFFICE, _QE.TREATMENT_STARTED),
            Edge(_Q.CANCELLED, OPERATIONS, _QE.CANCELLED),
        ],
        _Q.IN_TREATMENT: [
            Edge(_Q.VALIDATED, FINANCE, _QE.TREATMENT_VALIDATED),
            Edge(_Q.CANCELLED, BACK_OFFICE, _QE.CANCELLED),
        ],
    },
    cancellation_states=[_Q.CANCELLED],
    event_types=QuoteEventType,
)

# ---------------------------------------------------------------------------
# Shipment
# ---------------------------------------------------------------------------
_S = ShipmentStatus
_SE = ShipmentEventType


def _ops(target: ShipmentStatus, event_type: ShipmentEventType | None = None) -> Edge:
    return Edge(target, OPERATIONS, event_type)


_HOLD = _ops(_S.ON_HOLD)
_PROBLEM = _ops(_S.EXCEPTION, _SE.PROBLEM_REPORTED)
_CANCEL_SHIPMENT = _ops(_S.CANCELLED, _SE.CANCELLED)

SHIPMENT_GRAPH = _build(
    EntityFamily.SHIPMENT,
    _S.DRAFT,
    {
        _S.DRAFT: [
            Edge(_S.PENDING_APPROVAL),
            Edge(_S.CANCELLED, event_type=_SE.CANCELLED),
        ],
        _S.PENDING_APPROVAL: [
            _ops(_S.APPROVED),
            Edge(_S.CANCELLED, event_type=_SE.CANCELLED),
        ],
        _S.APPROVED: [_ops(_S.PICKED_UP, _SE.PICKUP_COMPLETED), _HOLD, _CANCEL_SHIPMENT],
        _S.PICKED_UP: [_ops(_S.IN_TRANSIT), _HOLD, _PROBLEM],
        _S.IN_TRANSIT: [
            _ops(_S.AT_CUSTOMS),
            _ops(_S.OUT_FOR_DELIVERY),
            _ops(_S.READY_FOR_PICKUP),
            _HOLD,
            _PROBLEM,
        ],
        _S.AT_CUSTOMS: [_ops(_S.CUSTOMS_CLEARED), _HOLD, _PROBLEM],
        _S.CUSTOMS_CLEARED: [
            _ops(_S.IN_TRANSIT),
            _ops(_S.OUT_FOR_DELIVERY),
            _ops(_S.READY_FOR_PICKUP),
        ],
        _S.OUT_FOR_DELIVERY: [
            _ops(_S.DELIVERED, _SE.DELIVERED),
            _ops(_S.READY_FOR_PICKUP, _SE.DELIVERY_ATTEMPT_FAILED),
            _ops(_S.EXCEPTION, _SE.DELIVERY_ATTEMPT_FAILED),
        ],
        _S.READY_FOR_PICKUP: [_ops(_S.DELIVERED, _SE.DELIVERED), _PROBLEM],
        _S.ON_HOLD: [_ops(_S.APPROVED), _ops(_S.IN_TRANSIT), _CANCEL_SHIPMENT],
        _S.EXCEPTION: [_ops(_S.IN_TRANSIT), _HOLD, _CANCEL_SHIPMENT],
    },
    cancellation_states=[_S.CANCELLED],
    event_types=ShipmentEventType,
)

# ---------------------------------------------------------------------------
# Pickup
# ---------------------------------------------------------------------------
_P = PickupStatus

PICKUP_GRAPH = _build(
    EntityFamily.PICKUP,
    _P.REQUESTED,
    {
        _P.REQUESTED: [
            Edge(_P.SCHEDULED, OPERATIONS, PickupEventType.SCHEDULED),
            Edge(_P.CANCELED),
        ],
        _P.SCHEDULED: [
            Edge(_P.IN_PROGRESS, OPERATIONS),
            Edge(_P.CANCELED),
        ],
        _P.IN_PROGRESS: [
            Edge(_P.COMPLETED, OPERATIONS),
            Edge(_P.CANCELED, OPERATIONS),
        ],
    },
    cancellation_states=[_P.CANCELED],
    event_types=PickupEventType,
)

# ---------------------------------------------------------------------------
# Purchase
# ---------------------------------------------------------------------------
_U = PurchaseStatus

PURCHASE_GRAPH = _build(
    EntityFamily.PURCHASE,
    _U.NEW,
    {
        _U.NEW: [
            Edge(_U.IN_PROGRESS, BACK_OFFICE),
            Edge(_U.CANCELLED),
        ],
        _U.IN_PROGRESS: [
            Edge(_U.DELIVERED, BACK_OFFICE),
            Edge(_U.CANCELLED, BACK_OFFICE),
        ],
    },
    cancellation_states=[_U.CANCELLED],
    event_types=PurchaseEventType,
)


GRAPHS: dict[EntityFamily, TransitionGraph] = {
    EntityFamily.QUOTE: QUOTE_GRAPH,
    EntityFamily.SHIPMENT: SHIPMENT_GRAPH,
    EntityFamily.PICKUP: PICKUP_GRAPH,
    EntityFamily.PURCHASE: PURCHASE_GRAPH,
}
