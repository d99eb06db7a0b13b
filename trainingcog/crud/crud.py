"""Database CRUD operations."""
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException
from trainingcog.models import RoleInfo, Sede, Profile, AuthSession, AccessLog
from trainingcog import schemas
from trainingcog.services.cache import FreshnessCache
from trainingcog.core.logging_config import logger

SEDI_CACHE_KEY = "admin:sedi"
RUOLI_CACHE_KEY = "admin:ruoli"
UTENTI_CACHE_KEY = "admin:utenti"
STAFF_CACHE_KEY = "admin:staff"
EDUCATORI_CACHE_KEY = "admin:educatori"

# Every cached list built from profiles
PROFILE_CACHE_KEYS = (UTENTI_CACHE_KEY, STAFF_CACHE_KEY, EDUCATORI_CACHE_KEY)


def _invalidate(cache: Optional[FreshnessCache], *keys: str):
    if cache is not None:
        for key in keys:
            cache.invalidate(key)


# --- Identity / profile lookups (used by the access middleware) ---

def get_user_id_for_token(db: Session, token: str) -> Optional[str]:
    """Resolve an identity token to a user id. None when unknown or revoked."""
    session = db.query(AuthSession).filter(AuthSession.token == token).first()
    if not session or session.revoked:
        return None
    return session.id_utente


def revoke_token(db: Session, token: str) -> bool:
    """Mark a token revoked. Returns False when the token does not exist."""
    session = db.query(AuthSession).filter(AuthSession.token == token).first()
    if not session:
        return False
    session.revoked = True
    db.commit()
    logger.info(f"Session revoked for user {session.id_utente}")
    return True


def create_session(db: Session, data: schemas.SessionCreate):
    """Register a token issued by the identity provider."""
    db_session = AuthSession(token=data.token, id_utente=data.id_utente)
    try:
        db.add(db_session)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Token already registered.")
    db.refresh(db_session)
    return db_session


def get_profile(db: Session, user_id: str):
    return db.query(Profile).filter(Profile.id == user_id).first()


def get_profile_role(db: Session, user_id: str) -> Optional[str]:
    """Single key read of profiles.ruolo. None means no profile, not 'visitatore'."""
    row = db.query(Profile.ruolo).filter(Profile.id == user_id).first()
    return row[0] if row else None


def list_profiles(db: Session):
    return db.query(Profile).order_by(Profile.cognome.asc(), Profile.nome.asc()).all()


def list_profiles_by_roles(db: Session, roles):
    """Profiles whose role is one of ``roles``, ordered by surname."""
    return db.query(Profile).filter(Profile.ruolo.in_(list(roles)))\
        .order_by(Profile.cognome.asc(), Profile.nome.asc()).all()


def create_profile(db: Session, profile: schemas.ProfileCreate, cache: Optional[FreshnessCache] = None):
    logger.info(f"Creating profile {profile.id} with role {profile.ruolo}")
    db_profile = Profile(**profile.model_dump())
    try:
        db.add(db_profile)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Profile {profile.id} already exists")
        raise HTTPException(status_code=409, detail="Profile already exists.")
    db.refresh(db_profile)
    _invalidate(cache, *PROFILE_CACHE_KEYS)
    return db_profile


def delete_profile(db: Session, user_id: str, cache: Optional[FreshnessCache] = None) -> bool:
    db_profile = get_profile(db, user_id)
    if not db_profile:
        return False
    db.delete(db_profile)
    db.commit()
    _invalidate(cache, *PROFILE_CACHE_KEYS)
    logger.info(f"Profile deleted: {user_id}")
    return True


# --- Role catalogue ---

def list_roles(db: Session):
    """All catalogue roles, highest access level first."""
    return db.query(RoleInfo).order_by(RoleInfo.livello_accesso.desc()).all()


def create_role(db: Session, role: schemas.RoleCreate, cache: Optional[FreshnessCache] = None):
    logger.info(f"Creating role: {role.codice} (level {role.livello_accesso})")
    db_role = RoleInfo(**role.model_dump())
    try:
        db.add(db_role)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Role {role.codice} already exists")
        raise HTTPException(status_code=409, detail="Role already exists.")
    db.refresh(db_role)
    _invalidate(cache, RUOLI_CACHE_KEY)
    return db_role


# --- Sedi ---

def list_sedi(db: Session):
    return db.query(Sede).order_by(Sede.nome.asc()).all()


def get_sede(db: Session, sede_id: int):
    return db.query(Sede).filter(Sede.id == sede_id).first()


def create_sede(db: Session, sede: schemas.SedeCreate, cache: Optional[FreshnessCache] = None):
    db_sede = Sede(**sede.model_dump())
    try:
        db.add(db_sede)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Sede '{sede.nome}' already exists.")
    db.refresh(db_sede)
    _invalidate(cache, SEDI_CACHE_KEY)
    logger.info(f"Sede created: {db_sede.nome} (ID: {db_sede.id})")
    return db_sede


def update_sede(db: Session, sede_id: int, changes: schemas.SedeUpdate,
                cache: Optional[FreshnessCache] = None):
    db_sede = get_sede(db, sede_id)
    if not db_sede:
        return None
    for field, value in changes.model_dump(exclude_unset=True).items():
        setattr(db_sede, field, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Another sede already uses that name.")
    db.refresh(db_sede)
    _invalidate(cache, SEDI_CACHE_KEY)
    logger.info(f"Sede updated: ID {sede_id}")
    return db_sede


def delete_sede(db: Session, sede_id: int, cache: Optional[FreshnessCache] = None) -> bool:
    db_sede = get_sede(db, sede_id)
    if not db_sede:
        return False
    db.delete(db_sede)
    db.commit()
    _invalidate(cache, SEDI_CACHE_KEY)
    # Profiles point at sedi, so their cached rows are stale too
    _invalidate(cache, *PROFILE_CACHE_KEYS)
    logger.info(f"Sede deleted: ID {sede_id}")
    return True


# --- Access log ---

def create_access_log(db: Session, log: dict):
    """Create an access log entry."""
    db_log = AccessLog(**log)
    db.add(db_log)
    db.commit()
    db.refresh(db_log)
    return db_log


def list_access_logs(db: Session, skip: int = 0, limit: int = 100):
    return db.query(AccessLog).order_by(AccessLog.id.desc()).offset(skip).limit(limit).all()
