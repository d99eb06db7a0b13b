"""Identity lookups against the provider's token table.

Sign-in and token issuance belong to the external identity provider; this
module only reads tokens it has issued and revokes them on sign-out.
"""
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.orm import Session
from starlette.requests import Request
from trainingcog import crud
from trainingcog.core.config import SESSION_COOKIE_NAME
from trainingcog.services.access import AccessState


@dataclass
class Identity:
    token: Optional[str] = None
    user_id: Optional[str] = None
    role: Optional[str] = None

    @property
    def state(self) -> AccessState:
        if self.user_id is None:
            return AccessState.UNAUTHENTICATED
        if self.role is None:
            return AccessState.AUTHENTICATED_NO_PROFILE
        return AccessState.AUTHENTICATED_WITH_ROLE


def extract_token(request: Request) -> Optional[str]:
    """Bearer header first, then the session cookie."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(SESSION_COOKIE_NAME) or None


class IdentityProvider:
    """Token -> user id resolution backed by the ``auth_sessions`` table."""

    def get_user_id(self, db: Session, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        return crud.get_user_id_for_token(db, token)

    def sign_out(self, db: Session, token: Optional[str]) -> None:
        if token:
            crud.revoke_token(db, token)


def resolve_identity(db: Session, provider: IdentityProvider, token: Optional[str]) -> Identity:
    """Resolve the caller's identity and role, reading the profile at most once."""
    user_id = provider.get_user_id(db, token)
    if user_id is None:
        return Identity(token=token)
    return Identity(token=token, user_id=user_id, role=crud.get_profile_role(db, user_id))
