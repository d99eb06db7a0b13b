"""Edge interceptor applying the route access policy to every request."""
from fastapi import status
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from trainingcog import crud
from trainingcog.core.config import SESSION_COOKIE_NAME
from trainingcog.core.logging_config import access_logger, logger
from trainingcog.services.access import AccessPolicy, RouteClass
from trainingcog.services.identity import Identity, IdentityProvider, extract_token, resolve_identity


class AccessControlMiddleware(BaseHTTPMiddleware):
    """Redirects callers away from pages their role may not open.

    The DB session factory is read from ``app.state.session_factory`` on each
    request so tests can point it at their own database.
    """

    def __init__(self, app, policy: AccessPolicy, provider: IdentityProvider = None):
        super().__init__(app)
        self.policy = policy
        self.provider = provider or IdentityProvider()

    def _needs_identity(self, path: str) -> bool:
        return (self.policy.classify(path) == RouteClass.PROTECTED
                or path in self.policy.auth_form_paths)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        request.state.identity = Identity()

        if self.policy.is_ignored(path) or not self._needs_identity(path):
            return await call_next(request)

        session_factory = request.app.state.session_factory
        token = extract_token(request)
        identity, decision = await run_in_threadpool(
            self._decide, session_factory, token, path
        )
        request.state.identity = identity

        if not decision.is_redirect:
            return await call_next(request)

        access_logger.info(
            f"Redirecting {path} -> {decision.location} "
            f"(user={identity.user_id}, role={identity.role}, reason={decision.reason})"
        )
        response = RedirectResponse(decision.location, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
        if decision.sign_out:
            response.delete_cookie(SESSION_COOKIE_NAME)
        return response

    def _decide(self, session_factory, token, path):
        db = session_factory()
        try:
            identity = resolve_identity(db, self.provider, token)
            decision = self.policy.resolve(identity.state, identity.role, path)

            if decision.sign_out:
                logger.warning(f"No profile for authenticated user {identity.user_id}, signing out")
                self.provider.sign_out(db, token)

            if decision.is_redirect and self.policy.classify(path) == RouteClass.PROTECTED:
                crud.create_access_log(db, {
                    "id_utente": identity.user_id,
                    "path": path,
                    "esito": "fallimento",
                    "motivo": decision.reason,
                })
            return identity, decision
        finally:
            db.close()
