"""Request-scoped dependencies.

Sessions are issued upstream; the gateway forwards the authenticated
identity as ``X-Actor-*`` headers.
"""

from fastapi import Header, HTTPException

from logistics.shared.actor import Actor


def current_actor(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
    x_client_id: str | None = Header(default=None),
    x_actor_email: str | None = Header(default=None),
    x_actor_phone: str | None = Header(default=None),
) -> Actor:
    if not x_actor_role:
        raise HTTPException(status_code=401, detail="Authentication required")
    return Actor.build(
        user_id=x_actor_id,
        role=x_actor_role,
        client_id=x_client_id,
        email=x_actor_email,
        phone=x_actor_phone,
    )
