"""Transition validation shared by every entity family.

``validate_transition`` is side-effect free and reports bad input as a
``Rejected`` decision. It checks, in order: that the family is known, that
both statuses belong to the family, that the source is not terminal, that
the edge exists, that the role may traverse it, and that a cancellation
carries notes.
"""

from dataclasses import dataclass
from enum import Enum

from logistics.lifecycle.graph import GRAPHS, TransitionGraph
from logistics.lifecycle.statuses import EntityFamily, parse_status
from logistics.shared.roles import UserRole

EDGE_NOT_ALLOWED = "EDGE_NOT_ALLOWED"
TERMINAL_STATE = "TERMINAL_STATE"
ROLE_NOT_PERMITTED = "ROLE_NOT_PERMITTED"
NOTES_REQUIRED = "NOTES_REQUIRED"
UNKNOWN_STATUS = "UNKNOWN_STATUS"
UNKNOWN_FAMILY = "UNKNOWN_FAMILY"


@dataclass(frozen=True)
class Allowed:
    event_type: Enum

    allowed = True


@dataclass(frozen=True)
class Rejected:
    reason_code: str
    message: str

    allowed = False


def graph_for(family: EntityFamily | str) -> TransitionGraph:
    """The transition graph of ``family``; raises ``ValueError`` for an unknown family."""
    return GRAPHS[EntityFamily(family)]


def _label(status: Enum | None) -> str:
    return "(new)" if status is None else status.value


def validate_transition(
    family: EntityFamily | str,
    current_status: Enum | str | None,
    requested_status: Enum | str,
    actor_role: UserRole | str,
    notes: str | None = None,
) -> Allowed | Rejected:
    """Decide whether ``actor_role`` may move an entity to ``requested_status``.

    ``current_status`` is ``None`` for creation, which is the implicit edge
    into the family's initial status.
    """
    try:
        graph = graph_for(family)
    except ValueError:
        return Rejected(UNKNOWN_FAMILY, f"Unknown entity family {family!r}")
    try:
        current = parse_status(graph.family, current_status)
        requested = parse_status(graph.family, requested_status)
    except ValueError as exc:
        return Rejected(UNKNOWN_STATUS, str(exc))
    try:
        role = actor_role if isinstance(actor_role, UserRole) else UserRole(actor_role)
    except ValueError:
        return Rejected(ROLE_NOT_PERMITTED, f"Unknown role {actor_role!r}")

    if current is not None and graph.is_terminal(current):
        return Rejected(
            TERMINAL_STATE,
            f"{graph.family.value} in terminal status {current.value} cannot change",
        )

    edge = graph.edge(current, requested)
    if edge is None:
        return Rejected(
            EDGE_NOT_ALLOWED,
            f"{graph.family.value} cannot move from {_label(current)} to {requested.value}",
        )

    if not edge.permits(role):
        return Rejected(
            ROLE_NOT_PERMITTED,
            f"Role {role.value} may not move {graph.family.value} from {_label(current)} to {requested.value}",
        )

    if requested in graph.cancellation_states and not (notes or "").strip():
        return Rejected(NOTES_REQUIRED, f"Moving to {requested.value} requires notes")

    return Allowed(edge.event_type or graph.default_event_type)


def allowed_targets(
    family: EntityFamily | str,
    current_status: Enum | str | None,
    actor_role: UserRole | str,
) -> list[Enum]:
    """Statuses ``actor_role`` may request next, in graph order."""
    graph = graph_for(family)
    current = parse_status(graph.family, current_status)
    role = actor_role if isinstance(actor_role, UserRole) else UserRole(actor_role)
    if current is not None and graph.is_terminal(current):
        return []
    return [edge.target for edge in graph.edges_from(current) if edge.permits(role)]


def is_terminal(family: EntityFamily | str, status: Enum | str) -> bool:
    graph = graph_for(family)
    return graph.is_terminal(parse_status(graph.family, status))
