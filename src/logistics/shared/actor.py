"""The authenticated caller of an operation."""

from dataclasses import dataclass

from protean.exceptions import ValidationError

from logistics.shared.roles import UserRole


@dataclass(frozen=True)
class Actor:
    """Who is acting, with which role, on behalf of which tenant.

    ``user_id`` is ``None`` only for the system actor. ``client_id`` is the
    tenant of a tenant-scoped actor and ``None`` for platform staff.
    """

    user_id: str | None
    role: UserRole
    client_id: str | None = None
    email: str | None = None
    phone: str | None = None

    @classmethod
    def system(cls) -> "Actor":
        return cls(user_id=None, role=UserRole.SYSTEM)

    @classmethod
    def build(
        cls,
        user_id: str | None,
        role: str | UserRole,
        client_id: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> "Actor":
        """Build an actor from untrusted strings, rejecting unknown roles."""
        try:
            parsed_role = role if isinstance(role, UserRole) else UserRole(str(role).upper())
        except ValueError:
            raise ValidationError({"role": [f"Unknown role: {role}"]}) from None
        if parsed_role != UserRole.SYSTEM and not user_id:
            raise ValidationError({"user_id": ["An authenticated actor needs a user id"]})
        return cls(
            user_id=user_id or None,
            role=parsed_role,
            client_id=client_id or None,
            email=(email or "").strip().lower() or None,
            phone=(phone or "").strip() or None,
        )

    @property
    def is_system(self) -> bool:
        return self.role == UserRole.SYSTEM

    def as_command_fields(self) -> dict:
        """Actor fields as carried on lifecycle commands."""
        return {
            "actor_id": self.user_id,
            "actor_role": self.role.value,
            "actor_client_id": self.client_id,
        }

    @classmethod
    def from_command(cls, command) -> "Actor":
        return cls(
            user_id=command.actor_id or None,
            role=UserRole(command.actor_role),
            client_id=command.actor_client_id or None,
        )
