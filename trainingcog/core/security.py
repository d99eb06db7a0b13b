"""Seed-route protection with the admin API key."""
import secrets
from fastapi import Security, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from trainingcog.core.config import ADMIN_API_KEY

security_scheme = HTTPBearer()


def verify_admin_key(credentials: HTTPAuthorizationCredentials = Security(security_scheme)):
    """Seed routes create profiles and tokens, so they take the admin key, not a user token."""
    if not secrets.compare_digest(credentials.credentials, ADMIN_API_KEY):
        raise HTTPException(
            status_code=403,
            detail="Invalid or missing API Key for seed access."
        )
    return True
