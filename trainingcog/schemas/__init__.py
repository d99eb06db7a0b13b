"""Pydantic schemas."""
from trainingcog.schemas.schemas import (
    RoleBase, RoleCreate, RoleResponse,
    SedeBase, SedeCreate, SedeUpdate, SedeResponse,
    ProfileBase, ProfileCreate, ProfileResponse,
    SessionCreate, SessionResponse,
    AccessCheckRequest, AccessCheckResponse,
    CacheClearResponse,
    AccessLogResponse
)

__all__ = [
    "RoleBase", "RoleCreate", "RoleResponse",
    "SedeBase", "SedeCreate", "SedeUpdate", "SedeResponse",
    "ProfileBase", "ProfileCreate", "ProfileResponse",
    "SessionCreate", "SessionResponse",
    "AccessCheckRequest", "AccessCheckResponse",
    "CacheClearResponse",
    "AccessLogResponse"
]
