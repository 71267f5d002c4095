"""Claiming pickups and purchases filed as a guest.

A guest pickup or purchase request carries only a contact email or phone.
Once the visitor has an account, every unowned request whose contact matches
the account is attached to it. Email matches take precedence over phone.
"""

from dataclasses import asdict, dataclass, field

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from logistics.access.resolver import can_attach
from logistics.audit.event_types import PickupEventType, PurchaseEventType
from logistics.audit.writer import append_event
from logistics.domain import logistics
from logistics.lifecycle.statuses import EntityFamily
from logistics.lifecycle.workflow import load
from logistics.pickup.pickup import PickupRequest
from logistics.purchase.purchase import PurchaseRequest
from logistics.shared.actor import Actor
from logistics.shared.errors import AuthorizationError
from logistics.shared.results import capture
from logistics.utils.locks import entity_locks
from logistics.utils.paging import fetch_all

logger = structlog.get_logger(__name__)


@logistics.command(part_of="PickupRequest")
class AttachGuestPickup:
    pickup_id = Identifier(required=True)
    matched_by = String(required=True, max_length=10)
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


@logistics.command(part_of="PurchaseRequest")
class AttachGuestPurchase:
    purchase_id = Identifier(required=True)
    matched_by = String(required=True, max_length=10)
    actor_id = Identifier()
    actor_role = String(required=True, max_length=30)
    actor_client_id = Identifier()


def _claim(aggregate_cls, event_type, entity_id: str, matched_by: str, actor: Actor):
    entity = load(aggregate_cls, entity_id)
    if not can_attach(actor, entity):
        raise AuthorizationError(f"{aggregate_cls.__name__} cannot be attached to this account")
    entity.attach_to_account(actor.user_id, actor.client_id, matched_by)

    metadata = {"user_id": actor.user_id, "matched_by": matched_by, "client_id": actor.client_id}
    if matched_by == "email":
        metadata["email"] = entity.contact_email
    else:
        metadata["phone"] = entity.contact_phone
    append_event(entity, event_type, actor_id=actor.user_id, metadata=metadata)
    current_domain.repository_for(aggregate_cls).add(entity)


@logistics.command_handler(part_of=PickupRequest)
class AttachGuestPickupHandler:
    @handle(AttachGuestPickup)
    def attach_guest_pickup(self, command):
        _claim(
            PickupRequest,
            PickupEventType.ATTACHED_TO_ACCOUNT,
            command.pickup_id,
            command.matched_by,
            Actor.from_command(command),
        )


@logistics.command_handler(part_of=PurchaseRequest)
class AttachGuestPurchaseHandler:
    @handle(AttachGuestPurchase)
    def attach_guest_purchase(self, command):
        _claim(
            PurchaseRequest,
            PurchaseEventType.ATTACHED_TO_ACCOUNT,
            command.purchase_id,
            command.matched_by,
            Actor.from_command(command),
        )


@dataclass
class AttachmentReport:
    attached: list[dict] = field(default_factory=list)
    failed: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _matches(aggregate_cls, actor: Actor) -> list[tuple[object, str]]:
    """Unowned rows of ``aggregate_cls`` matching the actor's contact, with the strategy used."""
    query = current_domain.repository_for(aggregate_cls)._dao.query
    found: dict[str, tuple[object, str]] = {}
    if actor.email:
        for row in fetch_all(query.filter(contact_email=actor.email)):
            found[str(row.id)] = (row, "email")
    if actor.phone:
        for row in fetch_all(query.filter(contact_phone=actor.phone)):
            found.setdefault(str(row.id), (row, "phone"))
    return [(row, matched_by) for row, matched_by in found.values() if can_attach(actor, row)]


_TARGETS = (
    (EntityFamily.PICKUP, PickupRequest, AttachGuestPickup, "pickup_id"),
    (EntityFamily.PURCHASE, PurchaseRequest, AttachGuestPurchase, "purchase_id"),
)


def attach_guest_records(actor: Actor) -> AttachmentReport:
    """Attach every unowned guest pickup and purchase that matches ``actor``."""
    report = AttachmentReport()
    if not (actor.email or actor.phone):
        return report

    for family, aggregate_cls, command_cls, id_field in _TARGETS:
        for row, matched_by in _matches(aggregate_cls, actor):
            entity_id = str(row.id)
            command = command_cls(**{id_field: entity_id}, matched_by=matched_by, **actor.as_command_fields())
            with entity_locks.hold(f"{family.value}:{entity_id}"):
                result = capture(current_domain.process, command, asynchronous=False)
            outcome = {"family": family.value, "entity_id": entity_id, "matched_by": matched_by}
            if result.ok:
                report.attached.append(outcome)
            else:
                report.failed.append({**outcome, "reason_code": result.reason_code, "message": result.message})

    logger.info(
        "Guest records attached",
        actor_id=actor.user_id,
        client_id=actor.client_id,
        attached=len(report.attached),
        failed=len(report.failed),
    )
    return report
