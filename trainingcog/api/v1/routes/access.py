"""Access check API endpoints."""
from typing import List
from fastapi import APIRouter, Depends
from trainingcog import schemas
from trainingcog.api.deps import get_policy
from trainingcog.services.access import AccessPolicy

router = APIRouter()


def check_access(request: schemas.AccessCheckRequest, policy: AccessPolicy) -> schemas.AccessCheckResponse:
    allowed = policy.is_allowed(request.role, request.path)
    return schemas.AccessCheckResponse(
        path=request.path,
        role=request.role,
        route_class=policy.classify(request.path).value,
        allowed=allowed,
        redirect_to=None if allowed else (
            policy.redirect_target_for(request.role) if request.role
            else policy.login_redirect(request.path)
        ),
    )


@router.post("/api/access", response_model=schemas.AccessCheckResponse)
def check(
    request: schemas.AccessCheckRequest,
    policy: AccessPolicy = Depends(get_policy)
):
    """Evaluate whether a role may open a path, and where it would be sent otherwise."""
    return check_access(request, policy)


@router.post("/api/access/batch", response_model=List[schemas.AccessCheckResponse])
def check_batch(
    requests: List[schemas.AccessCheckRequest],
    policy: AccessPolicy = Depends(get_policy)
):
    """Evaluates several (role, path) pairs in one call."""
    return [check_access(req, policy) for req in requests]
