"""
Job posting and public job listing.

A job is publicly visible only while it is active AND its organization is
verified. Organizations that are not verified cannot post at all; admins
post under the admin organization.
"""
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from samit.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    VerificationRequiredError,
)
from samit.models.job import Job
from samit.models.organization import Organization, VerificationStatus
from samit.schemas.job import JobCreate
from samit.services.counters import increment_views_count
from samit.services.identity import Actor
from samit.services.organizations import (
    ensure_admin_organization,
    get_owner_organization,
    require_owner_organization,
)
from samit.services.slugs import unique_slug, validate_slug

logger = logging.getLogger(__name__)

PUBLIC_PAGE_SIZE = 10

# Columns an update may not clear
REQUIRED_FIELDS = ("title", "description", "salary_currency", "show_salary", "is_active")


def is_publicly_listable():
    """SQL predicate for jobs visible to the public (needs Organization joined)."""
    return and_(
        Job.is_active.is_(True),
        Organization.verification_status == VerificationStatus.VERIFIED.value,
    )


def _public_jobs():
    return select(Job).join(Organization, Job.org_id == Organization.id).where(is_publicly_listable())


def _check_salary_range(data: dict) -> None:
    salary_min, salary_max = data.get("salary_min"), data.get("salary_max")
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise ValidationError("Minimum salary cannot exceed maximum salary")


async def _organization_for_posting(db: AsyncSession, actor: Actor) -> Organization:
    if actor.is_admin:
        return await ensure_admin_organization(db, actor)
    organization = await get_owner_organization(db, actor)
    if organization is None or not organization.is_verified():
        logger.info(f"Job creation refused for {actor.email}: organization not verified")
        raise VerificationRequiredError()
    return organization


async def _commit_job(db: AsyncSession, job: Job, action: str) -> Job:
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if "slug" in str(e.orig):
            raise ConflictError("A job with this slug already exists")
        logger.error(f"Constraint violation {action} job: {str(e)}", exc_info=True)
        raise DependencyError()
    except Exception as e:
        await db.rollback()
        logger.error(f"Error {action} job: {str(e)}", exc_info=True)
        raise DependencyError()
    await db.refresh(job)
    return job


async def create_job(db: AsyncSession, actor: Actor, payload: JobCreate) -> Job:
    """
    Create and publish a job for the actor's organization.
    
    Raises:
        VerificationRequiredError: lembaga whose organization is not verified
        ValidationError: bad slug or salary range
        ConflictError: slug already used
    """
    data = payload.model_dump()
    slug = data.pop("slug") or unique_slug(payload.title)
    validate_slug(slug)
    _check_salary_range(data)
    
    organization = await _organization_for_posting(db, actor)
    
    job = Job(
        **data,
        org_id=organization.id,
        slug=slug,
        published_at=datetime.utcnow(),
        applications_count=0,
        views_count=0,
    )
    db.add(job)
    job = await _commit_job(db, job, "creating")
    
    logger.info(f"Created job {job.slug} for organization {organization.slug}")
    return job


async def get_manageable_job(db: AsyncSession, actor: Actor, job_id: UUID) -> Job:
    """A job the actor may edit: admins any, lembaga only their own."""
    job = await db.get(Job, job_id)
    if job is None:
        raise NotFoundError()
    if not actor.is_admin:
        organization = await require_owner_organization(db, actor)
        if job.org_id != organization.id:
            raise NotFoundError()
    return job


async def update_job(db: AsyncSession, actor: Actor, job_id: UUID, update_data: dict) -> Job:
    """
    Partial update by the owner (or an admin). A null slug keeps the current one.
    
    Raises:
        ValidationError: bad slug or salary range, or a required field set to null
        NotFoundError: job missing or owned by another organization
        ConflictError: slug already used
    """
    cleared = [field for field in REQUIRED_FIELDS if field in update_data and update_data[field] is None]
    if cleared:
        raise ValidationError(f"{', '.join(cleared)} cannot be empty")
    if update_data.get("slug") is not None:
        validate_slug(update_data["slug"])
    job = await get_manageable_job(db, actor, job_id)
    
    merged = {
        "salary_min": update_data.get("salary_min", job.salary_min),
        "salary_max": update_data.get("salary_max", job.salary_max),
    }
    _check_salary_range(merged)
    
    for field, value in update_data.items():
        if field == "slug" and value is None:
            continue
        setattr(job, field, value)
    job.updated_at = datetime.utcnow()
    
    job = await _commit_job(db, job, "updating")
    logger.info(f"Updated job {job.slug}")
    return job


async def list_organization_jobs(db: AsyncSession, actor: Actor) -> list[Job]:
    """Jobs of the actor's organization. An admin without one simply has none yet."""
    if actor.is_admin:
        organization = await get_owner_organization(db, actor)
        if organization is None:
            return []
    else:
        organization = await require_owner_organization(db, actor)
    result = await db.execute(
        select(Job).where(Job.org_id == organization.id).order_by(Job.created_at.desc())
    )
    return list(result.scalars().all())


async def list_all_jobs(db: AsyncSession) -> list[Job]:
    """Admin view: every job regardless of status."""
    result = await db.execute(select(Job).order_by(Job.created_at.desc()))
    return list(result.scalars().all())


async def list_public_jobs(
    db: AsyncSession,
    category: Optional[str] = None,
    jlpt: Optional[str] = None,
    employment_type: Optional[str] = None,
    q: Optional[str] = None,
    page: int = 1,
    per_page: int = PUBLIC_PAGE_SIZE,
) -> tuple[list[Job], int]:
    """Active jobs of verified organizations, newest first, with the total count."""
    query = _public_jobs()
    
    filters = []
    if category:
        filters.append(Job.category == category)
    if jlpt:
        filters.append(Job.jlpt_required == jlpt)
    if employment_type:
        filters.append(Job.employment_type == employment_type)
    if q:
        filters.append(Job.title.ilike(f"%{q}%"))
    if filters:
        query = query.where(and_(*filters))
    
    total = await db.scalar(select(func.count()).select_from(query.subquery()))
    result = await db.execute(
        query.order_by(Job.published_at.desc()).offset((page - 1) * per_page).limit(per_page)
    )
    return list(result.scalars().all()), total or 0


async def find_public_job(db: AsyncSession, slug: str) -> Job:
    """Publicly visible job by slug; anything else is reported as not found."""
    result = await db.execute(_public_jobs().where(Job.slug == slug))
    job = result.scalar_one_or_none()
    if job is None:
        raise NotFoundError()
    return job


async def view_public_job(db: AsyncSession, slug: str) -> Job:
    """Job detail page read. The only read that writes: it counts the view."""
    job = await find_public_job(db, slug)
    try:
        views = await increment_views_count(db, job.id)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.warning(f"Could not record view for job {slug}: {str(e)}")
    else:
        set_committed_value(job, "views_count", views)
    return job


async def list_public_jobs_for_organization(db: AsyncSession, org_id: UUID) -> list[Job]:
    result = await db.execute(
        _public_jobs().where(Job.org_id == org_id).order_by(Job.published_at.desc())
    )
    return list(result.scalars().all())
