"""Request actor resolution.

Authentication happens upstream; the identity provider forwards the
authenticated actor in ``X-Actor-Id``, ``X-Actor-Role`` and
``X-Actor-Email`` headers.
"""

from fastapi import Header, HTTPException

from storefront.errors import Forbidden
from storefront.shared.actor import Actor, ActorRole

_ROLES = {role.value for role in ActorRole}


def current_actor(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
    x_actor_email: str | None = Header(default=None),
) -> Actor:
    if not x_actor_id or not x_actor_role:
        raise HTTPException(status_code=401, detail="Missing actor identity")
    if x_actor_role not in _ROLES:
        raise HTTPException(status_code=401, detail=f"Unknown actor role '{x_actor_role}'")
    return Actor(id=x_actor_id, role=x_actor_role, email=x_actor_email)


def require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise Forbidden({"role": ["Admin role required"]})
