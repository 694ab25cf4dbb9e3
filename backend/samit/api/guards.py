"""
Page-level authorization dependencies.

Every dashboard, apply and enroll endpoint depends on one of these. Unlike
the edge middleware they resolve the session themselves and fail closed:
an identity error sends the caller to the login page.
"""
import logging

from fastapi import Cookie, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from samit.database import get_db
from samit.errors import AuthorizationError, IdentityUnavailableError
from samit.models.user import UserRole
from samit.services.access_policy import DASHBOARD_PATH, login_redirect
from samit.services.identity import Actor, resolve_session

logger = logging.getLogger(__name__)


async def require_actor(
    request: Request,
    auth_token: str = Cookie(None),
    db: AsyncSession = Depends(get_db)
) -> Actor:
    """
    Dependency to get the signed-in actor from the httpOnly session cookie.
    
    Raises:
        AuthorizationError: not signed in, or the session could not be checked
    """
    try:
        actor = await resolve_session(db, auth_token)
    except IdentityUnavailableError:
        logger.error(f"Identity lookup failed for {request.url.path}; sending to login")
        actor = None
    
    if actor is None:
        raise AuthorizationError(login_redirect(request.url.path))
    return actor


def require_roles(*roles: UserRole):
    """
    Dependency factory requiring one of ``roles``.
    
    Example:
        @router.get("/dashboard/jobs")
        async def my_jobs(actor: Actor = Depends(require_roles(UserRole.LEMBAGA, UserRole.ADMIN))):
            ...
    """
    allowed = frozenset(roles)
    
    async def dependency(actor: Actor = Depends(require_actor)) -> Actor:
        if actor.role not in allowed:
            logger.warning(
                f"User {actor.email} (role={actor.role.value}) "
                f"attempted to access a {'/'.join(sorted(r.value for r in allowed))} page"
            )
            raise AuthorizationError(DASHBOARD_PATH)
        return actor
    
    return dependency


require_admin = require_roles(UserRole.ADMIN)
require_organization = require_roles(UserRole.LEMBAGA, UserRole.ADMIN)
require_job_seeker = require_roles(UserRole.USER)
