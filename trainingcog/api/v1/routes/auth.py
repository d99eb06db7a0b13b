"""Session teardown endpoint."""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from trainingcog.api.deps import get_db, get_identity_provider
from trainingcog.core.config import SESSION_COOKIE_NAME
from trainingcog.core.logging_config import logger
from trainingcog.services.identity import IdentityProvider, extract_token

router = APIRouter(prefix="/api/auth")


@router.post("/logout")
def logout(
    request: Request,
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider)
):
    """Revoke the caller's token and drop the session cookie."""
    token = extract_token(request)
    user_id = provider.get_user_id(db, token)
    provider.sign_out(db, token)
    if user_id:
        logger.info(f"User {user_id} logged out")
    response = JSONResponse({"logged_out": user_id is not None})
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response
