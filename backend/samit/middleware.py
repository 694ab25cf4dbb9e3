"""
Edge access control.

Runs the access policy on every request before any route is matched.
Identity failures here fail open: the request continues and the page-level
guards (which fail closed) make the final call.
"""
import logging

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from samit import database
from samit.errors import IdentityUnavailableError
from samit.services.access_policy import AUTH_PREFIX, RouteClass, classify_path, evaluate
from samit.services.identity import SESSION_COOKIE, resolve_session

logger = logging.getLogger(__name__)


def _needs_identity(path: str) -> bool:
    return classify_path(path) is not RouteClass.PUBLIC or path == AUTH_PREFIX or path.startswith(AUTH_PREFIX + "/")


class AccessMiddleware(BaseHTTPMiddleware):
    """Redirects requests the access policy refuses (HTTP 303)."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        token = request.cookies.get(SESSION_COOKIE)
        
        role = None
        if token and _needs_identity(path):
            try:
                async with database.AsyncSessionLocal() as session:
                    actor = await resolve_session(session, token)
            except IdentityUnavailableError:
                logger.warning(f"Identity lookup failed at the edge for {path}; letting the page decide")
                return await call_next(request)
            role = actor.role if actor else None
        
        decision = evaluate(path, role)
        if not decision.allowed:
            if role is not None:
                logger.warning(f"Access to {path} redirected to {decision.redirect_to} (role={role.value})")
            return RedirectResponse(decision.redirect_to, status_code=303)
        return await call_next(request)
