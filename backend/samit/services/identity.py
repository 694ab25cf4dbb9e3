"""
Session resolution for the identity collaborator.

The session cookie carries the user id, timestamped and signed with the
app secret. Every workflow operation receives the resolved Actor explicitly
instead of re-querying the session itself.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from itsdangerous import BadSignature, URLSafeTimedSerializer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from samit.config import settings
from samit.errors import IdentityUnavailableError
from samit.models.profile import Profile
from samit.models.user import User, UserRole
from samit.services.role_router import UnknownRoleError, parse_role

logger = logging.getLogger(__name__)

SESSION_COOKIE = "auth_token"


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation."""
    user_id: UUID
    email: str
    role: UserRole
    full_name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_organization(self) -> bool:
        return self.role == UserRole.LEMBAGA


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(settings.secret_key, salt="session")


def sign_session(user_id: UUID) -> str:
    """Timestamped, signed cookie value for an authenticated user."""
    return _serializer().dumps(str(user_id))


def read_session_token(token: Optional[str]) -> Optional[UUID]:
    """
    User id from a cookie value, or None if missing, tampered or older than
    ``session_max_age_days``.
    """
    if not token:
        return None
    try:
        value = _serializer().loads(token, max_age=86400 * settings.session_max_age_days)
        return UUID(value)
    except (BadSignature, TypeError, ValueError):
        return None


async def resolve_session(db: AsyncSession, token: Optional[str]) -> Optional[Actor]:
    """
    Resolve the current actor from a session cookie.
    
    Returns None for anonymous requests, invalid cookies, locked accounts and
    users without a profile (treated as signed out).
    
    Raises:
        IdentityUnavailableError: the identity lookup itself failed
    """
    user_id = read_session_token(token)
    if user_id is None:
        if token:
            logger.warning("Rejected invalid or expired session cookie")
        return None
    
    try:
        result = await db.execute(
            select(User, Profile)
            .outerjoin(Profile, Profile.id == User.id)
            .where(User.id == user_id)
        )
        row = result.first()
    except Exception as e:
        logger.error(f"Session lookup failed: {str(e)}", exc_info=True)
        raise IdentityUnavailableError("Session lookup failed") from e
    
    if row is None:
        return None
    
    user, profile = row
    if user.is_account_locked():
        return None
    if profile is None:
        logger.warning(f"User {user.email} has a session but no profile; treating as signed out")
        return None
    
    try:
        role = parse_role(profile.role)
    except UnknownRoleError:
        return None
    
    return Actor(
        user_id=user.id,
        email=user.email,
        role=role,
        full_name=profile.full_name,
    )
