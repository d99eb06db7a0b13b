"""SQLAlchemy models."""
from trainingcog.models.models import RoleInfo, Sede, Profile, AuthSession, AccessLog
from trainingcog.core.database import Base

__all__ = ["RoleInfo", "Sede", "Profile", "AuthSession", "AccessLog", "Base"]
