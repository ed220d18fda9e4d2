# app/core/rbac.py

from fastapi import Depends, HTTPException, status
from app.api.deps import get_actor
from app.core.context import Actor
from app.models.user import UserRole

def AllowRoles(*allowed_roles):
    """
    Flexible RBAC:
    - Accepts UserRole values or raw strings ("Division CC")
    - Case-insensitive
    - Admin bypasses everything
    """

    def normalize(role) -> str:
        if isinstance(role, UserRole):
            return role.value.lower().strip()
        return str(role).lower().strip()

    normalized_allowed = {normalize(r) for r in allowed_roles}

    async def role_checker(actor: Actor = Depends(get_actor)) -> Actor:
        # Admin bypass
        if actor.role == UserRole.Admin:
            return actor

        if normalize(actor.role) not in normalized_allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied for role '{actor.role.value}'"
            )

        return actor

    return role_checker
