"""Logistics bounded context — quotes, shipments, pickups and purchases.

Every lifecycle change runs through one transition graph per entity family,
is scoped to the actor's tenant, and is recorded in an append-only audit log
that is the only history of an entity. Guest quotes computed before sign-up
are reconciled into the account when the visitor authenticates.
"""

import structlog
from protean.domain import Domain

logistics = Domain(name="logistics")

logger = structlog.get_logger(__name__)


def custom_setting(key: str, default):
    """Read a value from the ``[custom]`` table of the active configuration."""
    custom = logistics.config.get("custom") or {}
    return custom.get(key, default)
