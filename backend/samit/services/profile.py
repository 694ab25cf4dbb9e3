"""Profile management business logic."""
import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from samit.errors import DependencyError, NotFoundError
from samit.models.profile import Profile
from samit.models.user import User
from samit.schemas.profile import ProfileResponse
from samit.services.identity import Actor

logger = logging.getLogger(__name__)


def build_profile_response(user: User, profile: Profile) -> ProfileResponse:
    """Build ProfileResponse from the identity record and its profile."""
    return ProfileResponse(
        user_id=str(user.id),
        email=user.email,
        role=profile.role.value,
        full_name=profile.full_name,
        phone=profile.phone,
        bio=profile.bio,
        socials=profile.socials,
        default_cv_id=str(profile.default_cv_id) if profile.default_cv_id else None,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
        last_login_at=user.last_login_at
    )


async def load_profile(db: AsyncSession, actor: Actor) -> tuple[User, Profile]:
    result = await db.execute(
        select(User, Profile)
        .join(Profile, Profile.id == User.id)
        .where(User.id == actor.user_id)
    )
    row = result.first()
    if row is None:
        raise NotFoundError()
    return row[0], row[1]


async def update_profile(db: AsyncSession, actor: Actor, update_data: dict) -> ProfileResponse:
    """Update profile fields. Role is never touched here."""
    user, profile = await load_profile(db, actor)
    for field, value in update_data.items():
        if field == "socials" and value is not None:
            # Pydantic already validated the URLs; store plain strings
            value = {name: str(url) for name, url in value.items() if url is not None}
        setattr(profile, field, value)
    
    profile.updated_at = datetime.utcnow()
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Error updating profile: {str(e)}", exc_info=True)
        raise DependencyError()
    await db.refresh(profile)
    logger.info(f"Profile updated for user {user.email}")
    return build_profile_response(user, profile)
