"""Page endpoints. Each returns a small descriptor of the area the caller landed in.

Access to these paths is enforced by AccessControlMiddleware before any of
these handlers run; the handlers only read what the middleware resolved.
"""
from fastapi import APIRouter, Request

router = APIRouter()


def _page(request: Request, area: str, **extra):
    identity = getattr(request.state, "identity", None)
    return {
        "area": area,
        "user_id": identity.user_id if identity else None,
        "role": identity.role if identity else None,
        **extra,
    }


@router.get("/")
def home_page(request: Request):
    return _page(request, "home")


@router.get("/login")
def login_page(request: Request, redirect: str = None):
    """Login form. ``redirect`` is where the identity provider should send the user back."""
    return _page(request, "login", redirect=redirect)


@router.get("/register")
def register_page(request: Request):
    return _page(request, "register")


@router.get("/admin")
@router.get("/admin/{section:path}")
def admin_page(request: Request, section: str = ""):
    return _page(request, "admin", section=section or None)


@router.get("/dashboard")
def dashboard_page(request: Request):
    return _page(request, "dashboard")


@router.get("/training")
def training_page(request: Request, demo: bool = False):
    return _page(request, "training", demo=demo)


@router.get("/strumenti")
@router.get("/strumenti/{tool:path}")
def tool_page(request: Request, tool: str = ""):
    return _page(request, "strumenti", tool=tool or None)
