"""Read models for the admin dashboard pages."""
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from samit.errors import ValidationError
from samit.models.application import Application
from samit.models.job import Job
from samit.models.language_class import LanguageClass
from samit.models.organization import Organization, VerificationStatus
from samit.models.profile import Profile
from samit.models.user import User, UserRole

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


async def _count(db: AsyncSession, column, *criteria) -> int:
    query = select(func.count(column))
    for criterion in criteria:
        query = query.where(criterion)
    result = await db.execute(query)
    return result.scalar_one()


async def overview(db: AsyncSession) -> dict:
    """Platform totals plus the most recent organizations and jobs."""
    stats = {
        "users": await _count(db, Profile.id),
        "organizations": await _count(db, Organization.id),
        "pending_organizations": await _count(
            db, Organization.id,
            Organization.verification_status == VerificationStatus.PENDING.value,
        ),
        "verified_organizations": await _count(
            db, Organization.id,
            Organization.verification_status == VerificationStatus.VERIFIED.value,
        ),
        "jobs": await _count(db, Job.id),
        "active_jobs": await _count(db, Job.id, Job.is_active.is_(True)),
        "applications": await _count(db, Application.id),
        "classes": await _count(db, LanguageClass.id),
    }
    
    recent_orgs = await db.execute(
        select(Organization).order_by(Organization.created_at.desc()).limit(RECENT_LIMIT)
    )
    recent_jobs = await db.execute(
        select(Job).order_by(Job.created_at.desc()).limit(RECENT_LIMIT)
    )
    return {
        "stats": stats,
        "recent_organizations": list(recent_orgs.scalars().all()),
        "recent_jobs": list(recent_jobs.scalars().unique().all()),
    }


async def verification_queue(db: AsyncSession, status: Optional[str] = None) -> dict:
    """Organizations (optionally filtered by status) and the count per status."""
    query = select(Organization).order_by(Organization.created_at.desc())
    if status:
        try:
            VerificationStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown verification status {status}")
        query = query.where(Organization.verification_status == status)
    result = await db.execute(query)
    
    counts_result = await db.execute(
        select(Organization.verification_status, func.count(Organization.id))
        .group_by(Organization.verification_status)
    )
    counts = {s.value: 0 for s in VerificationStatus}
    counts.update({row[0]: row[1] for row in counts_result.all()})
    
    return {"organizations": list(result.scalars().all()), "counts": counts}


async def list_users(db: AsyncSession, role: Optional[str] = None) -> list[dict]:
    query = (
        select(User, Profile)
        .join(Profile, Profile.id == User.id)
        .order_by(Profile.created_at.desc())
    )
    if role:
        try:
            query = query.where(Profile.role == UserRole(role))
        except ValueError:
            raise ValidationError(f"Unknown role {role}")
    result = await db.execute(query)
    return [
        {
            "user_id": str(user.id),
            "email": user.email,
            "role": profile.role.value,
            "full_name": profile.full_name,
            "phone": profile.phone,
            "created_at": profile.created_at,
            "last_login_at": user.last_login_at,
        }
        for user, profile in result.all()
    ]
