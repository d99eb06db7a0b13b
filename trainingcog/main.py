"""FastAPI application entry point."""
from fastapi import FastAPI, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from trainingcog.core.config import CACHE_TTL_SECONDS, ACCESS_FAIL_CLOSED, CORS_ORIGINS
from trainingcog.core.database import SessionLocal, init_db
from trainingcog.core.logging_config import logger
from trainingcog.api.v1.router import api_router
from trainingcog.middleware import AccessControlMiddleware
from trainingcog.services.access import default_policy
from trainingcog.services.cache import CachedLoader, FreshnessCache
from trainingcog.services.identity import IdentityProvider

logger.info("Starting Training Cognitivo service")

# Create database tables
try:
    init_db()
    logger.info("Database tables initialized successfully")
except Exception as e:
    logger.error(f"Failed to initialize database tables: {e}")
    raise

app = FastAPI(
    title="Training Cognitivo",
    description="Role-based page access and cached reference data for the cognitive training platform",
    version="1.0.0"
)

policy = default_policy(fail_closed=ACCESS_FAIL_CLOSED)
if ACCESS_FAIL_CLOSED:
    logger.info("Access policy: protected paths without a rule are denied")

identity_provider = IdentityProvider()
cache = FreshnessCache(ttl=CACHE_TTL_SECONDS)

app.state.policy = policy
app.state.identity_provider = identity_provider
app.state.cache = cache
app.state.loader = CachedLoader(cache)
app.state.session_factory = SessionLocal

# Added last so it runs first: CORS preflights never hit the access policy
app.add_middleware(AccessControlMiddleware, policy=policy, provider=identity_provider)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
logger.info("API routes registered successfully")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    app.state.cache.clear()
    logger.info("Application shutting down")


@app.get("/health", tags=["Health"], status_code=status.HTTP_200_OK)
def health_check():
    """Detailed health check endpoint with system status."""
    health_status = {
        "status": "healthy",
        "service": "Training Cognitivo",
        "version": "1.0.0",
        "checks": {}
    }

    # Database connectivity check
    try:
        db = app.state.session_factory()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
        health_status["checks"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful"
        }
    except Exception as e:
        health_status["status"] = "degraded"
        health_status["checks"]["database"] = {
            "status": "unhealthy",
            "message": f"Database connection failed: {str(e)}"
        }
        logger.error(f"Database health check failed: {e}")

    # Cache status check
    try:
        health_status["checks"]["cache"] = {
            "status": "healthy",
            "message": "Cache operational",
            "entries": len(app.state.cache),
            "ttl_seconds": app.state.cache.ttl
        }
    except Exception as e:
        health_status["status"] = "degraded"
        health_status["checks"]["cache"] = {
            "status": "unhealthy",
            "message": f"Cache check failed: {str(e)}"
        }
        logger.error(f"Cache health check failed: {e}")

    health_status["checks"]["access_policy"] = {
        "status": "healthy",
        "rules": len(app.state.policy.rules),
        "fail_closed": app.state.policy.fail_closed
    }

    status_code = status.HTTP_200_OK
    if health_status["status"] == "degraded":
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(content=health_status, status_code=status_code)
