"""Main API router that includes all v1 routes."""
from fastapi import APIRouter
from trainingcog.api.v1.routes import access, admin, auth, pages, seed

api_router = APIRouter()

api_router.include_router(access.router, tags=["access"])
api_router.include_router(admin.router, tags=["admin"])
api_router.include_router(seed.router, tags=["seed"])
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(pages.router, tags=["pages"])
