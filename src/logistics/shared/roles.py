"""Platform roles and the capability sets they carry.

This module is the only place where role names are interpreted. Everything
else asks for a capability (see ``logistics.access.resolver``).
"""

from enum import Enum


class UserRole(Enum):
    ADMIN = "ADMIN"
    OPERATIONS_MANAGER = "OPERATIONS_MANAGER"
    FINANCE_MANAGER = "FINANCE_MANAGER"
    CLIENT = "CLIENT"
    VIEWER = "VIEWER"
    SYSTEM = "SYSTEM"


class Capability(Enum):
    READ_ANY = "READ_ANY"
    MUTATE_ANY = "MUTATE_ANY"
    READ_TENANT = "READ_TENANT"
    MUTATE_TENANT = "MUTATE_TENANT"
    CLAIM_GUEST_RECORDS = "CLAIM_GUEST_RECORDS"


_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.ADMIN: frozenset({Capability.READ_ANY, Capability.MUTATE_ANY}),
    UserRole.OPERATIONS_MANAGER: frozenset({Capability.READ_ANY, Capability.MUTATE_ANY}),
    UserRole.FINANCE_MANAGER: frozenset({Capability.READ_ANY, Capability.MUTATE_ANY}),
    UserRole.SYSTEM: frozenset({Capability.READ_ANY, Capability.MUTATE_ANY}),
    UserRole.VIEWER: frozenset({Capability.READ_ANY}),
    UserRole.CLIENT: frozenset(
        {
            Capability.READ_TENANT,
            Capability.MUTATE_TENANT,
            Capability.CLAIM_GUEST_RECORDS,
        }
    ),
}

# Roles whose visibility is not bounded by a tenant
PLATFORM_ROLES = frozenset(role for role, caps in _CAPABILITIES.items() if Capability.READ_ANY in caps)
TENANT_ROLES = frozenset(role for role, caps in _CAPABILITIES.items() if Capability.READ_TENANT in caps)

# Role groups referenced by transition edges
OPERATIONS = frozenset({UserRole.ADMIN, UserRole.OPERATIONS_MANAGER})
FINANCE = frozenset({UserRole.ADMIN, UserRole.FINANCE_MANAGER})
BACK_OFFICE = OPERATIONS | FINANCE


def capabilities_for(role: UserRole | str | None) -> frozenset[Capability]:
    """Return the capability set of ``role``; unknown roles get none."""
    if role is None:
        return frozenset()
    try:
        role = UserRole(role) if not isinstance(role, UserRole) else role
    except ValueError:
        return frozenset()
    return _CAPABILITIES.get(role, frozenset())
