"""Access scope resolution — who may read, change or claim which entity.

Every entity carries its tenant in ``client_id``. Platform actors are not
bounded by it; tenant actors see and change only their own tenant's rows.
A tenant actor without a tenant sees nothing: a missing tenant is never
read as "all tenants".
"""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from logistics.shared.actor import Actor
from logistics.shared.errors import AuthorizationError, NotFoundError
from logistics.shared.roles import Capability, capabilities_for

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ScopeFilter:
    """Row filter for collection queries, usable as a predicate."""

    unrestricted: bool = False
    client_id: str | None = None
    deny_all: bool = False

    @property
    def criteria(self) -> dict | None:
        """Repository filter kwargs, or ``None`` when nothing may match."""
        if self.deny_all:
            return None
        if self.unrestricted:
            return {}
        return {"client_id": self.client_id}

    def __call__(self, entity) -> bool:
        if self.deny_all:
            return False
        if self.unrestricted:
            return True
        return entity.client_id is not None and str(entity.client_id) == self.client_id


DENY_ALL = ScopeFilter(deny_all=True)


def scope_filter(actor: Actor | None) -> ScopeFilter:
    if actor is None:
        return DENY_ALL
    caps = capabilities_for(actor.role)
    if Capability.READ_ANY in caps:
        return ScopeFilter(unrestricted=True)
    if Capability.READ_TENANT in caps and actor.client_id:
        return ScopeFilter(client_id=str(actor.client_id))
    return DENY_ALL


def _owns(actor: Actor, entity) -> bool:
    return bool(actor.client_id) and entity.client_id is not None and str(entity.client_id) == str(actor.client_id)


def can_read(actor: Actor | None, entity) -> bool:
    return scope_filter(actor)(entity)


def can_mutate(actor: Actor | None, entity) -> bool:
    if actor is None:
        return False
    caps = capabilities_for(actor.role)
    if Capability.MUTATE_ANY in caps:
        return True
    return Capability.MUTATE_TENANT in caps and _owns(actor, entity)


def can_create_for(actor: Actor | None, client_id: str | None) -> bool:
    """Whether ``actor`` may create an entity owned by ``client_id``."""
    if actor is None:
        return False
    caps = capabilities_for(actor.role)
    if Capability.MUTATE_ANY in caps:
        return True
    return Capability.MUTATE_TENANT in caps and bool(actor.client_id) and str(client_id) == str(actor.client_id)


def can_attach(actor: Actor | None, entity) -> bool:
    """Whether ``actor`` may claim an unowned guest entity for its account."""
    if actor is None or not actor.user_id or not actor.client_id:
        return False
    if Capability.CLAIM_GUEST_RECORDS not in capabilities_for(actor.role):
        return False
    return entity.user_id is None and entity.client_id is None


def require_read(actor: Actor | None, entity, label: str = "Record") -> None:
    # Unscoped reads look exactly like missing records
    if not can_read(actor, entity):
        logger.info("Read denied", entity_id=str(entity.id), role=actor.role.value if actor else None)
        raise NotFoundError(f"{label} not found")


def require_mutate(actor: Actor | None, entity, label: str = "Record") -> None:
    if not can_read(actor, entity):
        raise NotFoundError(f"{label} not found")
    if not can_mutate(actor, entity):
        logger.info("Mutation denied", entity_id=str(entity.id), role=actor.role.value if actor else None)
        raise AuthorizationError(f"Not allowed to modify this {label.lower()}")


def list_scoped(actor: Actor | None, aggregate_cls, limit: int = 1000, **filters) -> list:
    """Rows of ``aggregate_cls`` visible to ``actor``, narrowed by ``filters``."""
    scope = scope_filter(actor)
    criteria = scope.criteria
    if criteria is None:
        return []
    query = current_domain.repository_for(aggregate_cls)._dao.query
    conditions = {**filters, **criteria}
    if conditions:
        query = query.filter(**conditions)
    return [row for row in query.limit(limit).all().items if scope(row)]
