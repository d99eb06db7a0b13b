"""Seed API endpoints. Require the admin API key."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from trainingcog import schemas
from trainingcog import crud
from trainingcog.api.deps import get_db, get_cache
from trainingcog.core.security import verify_admin_key
from trainingcog.services.access import ACCESS_LEVELS
from trainingcog.services.cache import FreshnessCache

router = APIRouter(prefix="/api/seed")

ROLE_NAMES = {
    "sviluppatore": "Sviluppatore",
    "amministratore": "Amministratore",
    "direttore": "Direttore",
    "casemanager": "Case Manager",
    "educatore": "Educatore",
    "utente": "Utente",
    "visitatore": "Visitatore",
}


@router.post("/ruoli", status_code=status.HTTP_201_CREATED)
def seed_roles_api(
    db: Session = Depends(get_db),
    cache: FreshnessCache = Depends(get_cache),
    verified: bool = Depends(verify_admin_key)
):
    """Populate the role catalogue with the built-in roles. Existing codes are skipped."""
    existing = {r.codice for r in crud.list_roles(db)}
    created = []
    for codice, livello in ACCESS_LEVELS.items():
        if codice in existing:
            continue
        role = schemas.RoleCreate(codice=codice, nome=ROLE_NAMES[codice], livello_accesso=livello)
        created.append(crud.create_role(db, role, cache=cache).codice)
    return {"created": created, "skipped": sorted(existing)}


@router.post("/profiles", response_model=schemas.ProfileResponse, status_code=status.HTTP_201_CREATED)
def seed_profile_api(
    profile: schemas.ProfileCreate,
    db: Session = Depends(get_db),
    cache: FreshnessCache = Depends(get_cache),
    verified: bool = Depends(verify_admin_key)
):
    """Create a profile for an identity. Roles are assigned here, never by self-registration."""
    return crud.create_profile(db, profile, cache=cache)


@router.post("/sessions", response_model=schemas.SessionResponse, status_code=status.HTTP_201_CREATED)
def seed_session_api(
    session: schemas.SessionCreate,
    db: Session = Depends(get_db),
    verified: bool = Depends(verify_admin_key)
):
    """Register an identity token (development and demo setups)."""
    return crud.create_session(db, session)
