"""Admin area API endpoints (sedi, ruoli, utenti, staff, educatori, access log)."""
from typing import Any, Callable, List
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from trainingcog import crud
from trainingcog import schemas
from trainingcog.api.deps import get_db, get_cache, get_loader, require_admin, require_developer
from trainingcog.services.access import MANAGEMENT_ROLES, Role
from trainingcog.services.cache import CachedLoader, FetchAborted, FetchFailed, FreshnessCache

router = APIRouter(prefix="/api/admin")

# Client closed request
HTTP_499_CLIENT_CLOSED_REQUEST = 499


async def load_cached(loader: CachedLoader, key: str, query: Callable[[], List[Any]], refresh: bool):
    """Serve ``key`` from the cache, falling through to ``query`` on a miss."""
    async def fetch():
        return await run_in_threadpool(query)

    try:
        return await loader.load(key, fetch, force=refresh)
    except FetchAborted:
        return Response(status_code=HTTP_499_CLIENT_CLOSED_REQUEST)
    except FetchFailed as e:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(e), "retry": True},
        )


# --- Sedi ---

@router.get("/sedi", response_model=List[schemas.SedeResponse])
async def list_sedi_api(
    refresh: bool = False,
    db: Session = Depends(get_db),
    loader: CachedLoader = Depends(get_loader),
    _=Depends(require_admin)
):
    """Site list, served from the freshness cache when possible."""
    def query():
        return [schemas.SedeResponse.model_validate(s).model_dump(mode="json") for s in crud.list_sedi(db)]

    return await load_cached(loader, crud.SEDI_CACHE_KEY, query, refresh)


@router.post("/sedi", response_model=schemas.SedeResponse, status_code=status.HTTP_201_CREATED)
def create_sede_api(
    sede: schemas.SedeCreate,
    db: Session = Depends(get_db),
    cache: FreshnessCache = Depends(get_cache),
    _=Depends(require_admin)
):
    return crud.create_sede(db, sede, cache=cache)


@router.put("/sedi/{sede_id}", response_model=schemas.SedeResponse)
def update_sede_api(
    sede_id: int,
    changes: schemas.SedeUpdate,
    db: Session = Depends(get_db),
    cache: FreshnessCache = Depends(get_cache),
    _=Depends(require_admin)
):
    sede = crud.update_sede(db, sede_id, changes, cache=cache)
    if not sede:
        raise HTTPException(status_code=404, detail="Sede not found")
    return sede


@router.delete("/sedi/{sede_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sede_api(
    sede_id: int,
    db: Session = Depends(get_db),
    cache: FreshnessCache = Depends(get_cache),
    _=Depends(require_admin)
):
    if not crud.delete_sede(db, sede_id, cache=cache):
        raise HTTPException(status_code=404, detail="Sede not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Ruoli ---

@router.get("/ruoli", response_model=List[schemas.RoleResponse])
async def list_roles_api(
    refresh: bool = False,
    db: Session = Depends(get_db),
    loader: CachedLoader = Depends(get_loader),
    _=Depends(require_admin)
):
    """Role catalogue ordered by access level, highest first."""
    def query():
        return [schemas.RoleResponse.model_validate(r).model_dump(mode="json") for r in crud.list_roles(db)]

    return await load_cached(loader, crud.RUOLI_CACHE_KEY, query, refresh)


# --- Staff and educatori ---

@router.get("/staff", response_model=List[schemas.ProfileResponse])
async def list_staff_api(
    refresh: bool = False,
    db: Session = Depends(get_db),
    loader: CachedLoader = Depends(get_loader),
    _=Depends(require_admin)
):
    """Operators with a management role."""
    def query():
        return [schemas.ProfileResponse.model_validate(p).model_dump(mode="json")
                for p in crud.list_profiles_by_roles(db, sorted(MANAGEMENT_ROLES))]

    return await load_cached(loader, crud.STAFF_CACHE_KEY, query, refresh)


@router.get("/educatori", response_model=List[schemas.ProfileResponse])
async def list_educatori_api(
    refresh: bool = False,
    db: Session = Depends(get_db),
    loader: CachedLoader = Depends(get_loader),
    _=Depends(require_admin)
):
    def query():
        return [schemas.ProfileResponse.model_validate(p).model_dump(mode="json")
                for p in crud.list_profiles_by_roles(db, [Role.EDUCATORE.value])]

    return await load_cached(loader, crud.EDUCATORI_CACHE_KEY, query, refresh)


# --- Utenti (developer only) ---

@router.get("/utenti", response_model=List[schemas.ProfileResponse])
async def list_profiles_api(
    refresh: bool = False,
    db: Session = Depends(get_db),
    loader: CachedLoader = Depends(get_loader),
    _=Depends(require_developer)
):
    def query():
        return [schemas.ProfileResponse.model_validate(p).model_dump(mode="json") for p in crud.list_profiles(db)]

    return await load_cached(loader, crud.UTENTI_CACHE_KEY, query, refresh)


@router.delete("/utenti/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_profile_api(
    user_id: str,
    db: Session = Depends(get_db),
    cache: FreshnessCache = Depends(get_cache),
    _=Depends(require_developer)
):
    if not crud.delete_profile(db, user_id, cache=cache):
        raise HTTPException(status_code=404, detail="Profile not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Access log ---

@router.get("/log-accessi", response_model=List[schemas.AccessLogResponse])
def list_access_logs_api(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    _=Depends(require_admin)
):
    """Most recent access decisions first. Not cached."""
    return crud.list_access_logs(db, skip=skip, limit=limit)


# --- Cache ---

@router.post("/cache/clear", response_model=schemas.CacheClearResponse)
def clear_cache_api(
    cache: FreshnessCache = Depends(get_cache),
    _=Depends(require_admin)
):
    """Drops every cached collection; the next read of each refetches."""
    cleared = len(cache)
    cache.clear()
    return schemas.CacheClearResponse(cleared=cleared)
