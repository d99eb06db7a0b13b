"""API dependencies."""
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from trainingcog.core.database import get_db
from trainingcog.services.access import AccessPolicy, Role, ADMIN_ROLES
from trainingcog.services.cache import CachedLoader, FreshnessCache
from trainingcog.services.identity import Identity, IdentityProvider, extract_token, resolve_identity

__all__ = [
    "get_db", "get_cache", "get_loader", "get_policy", "get_identity_provider",
    "get_current_identity", "require_roles", "require_admin", "require_developer",
]


def get_cache(request: Request) -> FreshnessCache:
    return request.app.state.cache


def get_loader(request: Request) -> CachedLoader:
    return request.app.state.loader


def get_policy(request: Request) -> AccessPolicy:
    return request.app.state.policy


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity_provider


def get_current_identity(
    request: Request,
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    """Authenticated caller with a profile, or 401."""
    identity = resolve_identity(db, provider, extract_token(request))
    if identity.user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated.")
    if identity.role is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Profile not found.")
    return identity


def require_roles(*roles: str):
    """Dependency factory: caller's role must be one of ``roles`` (developer always passes)."""
    allowed = {str(getattr(r, "value", r)) for r in roles}

    def checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role != Role.SVILUPPATORE.value and identity.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{identity.role}' may not perform this operation.",
            )
        return identity

    return checker


require_admin = require_roles(*ADMIN_ROLES)
require_developer = require_roles(Role.SVILUPPATORE)
