"""
Application workflow.
ALL application status changes must go through this module.
"""
import logging
from datetime import datetime
from typing import Dict, Optional
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from samit.errors import (
    AuthorizationError,
    ConflictError,
    DependencyError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from samit.models.application import Application, ApplicationStatus
from samit.models.job import Job
from samit.models.resume import Resume
from samit.models.user import UserRole
from samit.services.access_policy import DASHBOARD_PATH
from samit.services.counters import increment_applications_count
from samit.services.identity import Actor
from samit.services.jobs import find_public_job
from samit.services.organizations import require_owner_organization
from samit.services.resumes import discard_stored_file, get_own_resume, store_resume
from samit.services.storage import ObjectStorage
from samit.services.uploads import RESUME_RULES, read_upload

logger = logging.getLogger(__name__)


# Transitions an owning organization may make. Admins may set any status
# to correct mistakes.
ALLOWED_TRANSITIONS: Dict[ApplicationStatus, list[ApplicationStatus]] = {
    ApplicationStatus.APPLIED: [
        ApplicationStatus.SHORTLISTED,
        ApplicationStatus.INTERVIEW,
        ApplicationStatus.REJECTED,
        ApplicationStatus.HIRED,
    ],
    ApplicationStatus.SHORTLISTED: [
        ApplicationStatus.INTERVIEW,
        ApplicationStatus.REJECTED,
        ApplicationStatus.HIRED,
    ],
    ApplicationStatus.INTERVIEW: [ApplicationStatus.REJECTED, ApplicationStatus.HIRED],
    ApplicationStatus.REJECTED: [],  # Terminal state
    ApplicationStatus.HIRED: [],  # Terminal state
}

ALREADY_APPLIED = "You have already applied to this job"


def can_transition(from_status: ApplicationStatus, to_status: ApplicationStatus) -> bool:
    """Check if an owner may make this transition (same status counts as a notes edit)"""
    return from_status == to_status or to_status in ALLOWED_TRANSITIONS.get(from_status, [])


def _require_job_seeker(actor: Actor) -> None:
    if actor.role != UserRole.USER:
        logger.warning(f"{actor.email} (role={actor.role.value}) attempted to apply for a job")
        raise AuthorizationError(DASHBOARD_PATH)


async def find_existing_application(
    db: AsyncSession, job_id: UUID, applicant_id: UUID
) -> Optional[Application]:
    result = await db.execute(
        select(Application).where(
            Application.job_id == job_id,
            Application.applicant_id == applicant_id,
        )
    )
    return result.scalar_one_or_none()


async def apply_page(db: AsyncSession, actor: Actor, job_slug: str) -> dict:
    """Everything the apply form needs: the job, the caller's CVs, any earlier application."""
    _require_job_seeker(actor)
    job = await find_public_job(db, job_slug)
    resumes = await db.execute(
        select(Resume).where(Resume.user_id == actor.user_id).order_by(Resume.uploaded_at.desc())
    )
    return {
        "job": job,
        "resumes": list(resumes.scalars().all()),
        "existing_application": await find_existing_application(db, job.id, actor.user_id),
    }


async def submit_application(
    db: AsyncSession,
    storage: ObjectStorage,
    actor: Actor,
    job_slug: str,
    resume_id: Optional[UUID] = None,
    cv_file: Optional[UploadFile] = None,
    cover_letter: Optional[str] = None,
) -> Application:
    """
    Create an application in ``applied`` status and count it on the job.
    
    CV resolution: an uploaded file wins over ``resume_id``. A new file is
    validated before anything else and uploaded before any row is written,
    so a failed upload leaves neither a Resume nor an Application behind,
    and a failed insert removes the uploaded file again.
    
    Raises:
        AuthorizationError: caller is not a job seeker
        NotFoundError: job missing, inactive or its organization unverified
        ConflictError: caller already applied (pre-check or unique constraint)
        ValidationError: no CV chosen, bad file
        DependencyError: storage or store failure
    """
    _require_job_seeker(actor)
    if cv_file is None and resume_id is None:
        raise ValidationError("Choose an existing CV or upload a new one")
    cv_data = await read_upload(cv_file, RESUME_RULES) if cv_file is not None else None
    
    job = await find_public_job(db, job_slug)
    
    if await find_existing_application(db, job.id, actor.user_id) is not None:
        raise ConflictError(ALREADY_APPLIED)
    
    new_file_path = None
    if cv_data is not None:
        resume = await store_resume(db, storage, actor, cv_file.filename, cv_data)
        new_file_path = resume.storage_path
    else:
        resume = await get_own_resume(db, actor, resume_id)
    
    application = Application(
        job_id=job.id,
        applicant_id=actor.user_id,
        cv_url=resume.file_url,
        cover_letter=(cover_letter or "").strip() or None,
        status=ApplicationStatus.APPLIED.value,
        applied_at=datetime.utcnow(),
        updated_at=datetime.utcnow(),
    )
    db.add(application)
    
    try:
        await db.flush()
        count = await increment_applications_count(db, job.id)
        await db.commit()
    except IntegrityError:
        # Concurrent double submit: the unique constraint is the final word
        await db.rollback()
        if new_file_path:
            await discard_stored_file(storage, new_file_path)
        raise ConflictError(ALREADY_APPLIED)
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating application: {str(e)}", exc_info=True)
        if new_file_path:
            await discard_stored_file(storage, new_file_path)
        raise DependencyError("Failed to send your application. Please try again.")
    
    await db.refresh(application)
    logger.info(
        f"Application submitted for job {job.slug}",
        extra={
            "application_id": str(application.id),
            "applicant_id": str(actor.user_id),
            "applications_count": count,
        },
    )
    return application


async def _get_reviewable_application(db: AsyncSession, actor: Actor, application_id: UUID) -> Application:
    application = await db.get(Application, application_id)
    if application is None:
        raise NotFoundError()
    if actor.is_admin:
        return application
    if actor.role != UserRole.LEMBAGA:
        raise AuthorizationError(DASHBOARD_PATH)
    organization = await require_owner_organization(db, actor)
    job = await db.get(Job, application.job_id)
    if job is None or job.org_id != organization.id:
        # Same answer as a missing application
        raise NotFoundError()
    return application


async def update_application_status(
    db: AsyncSession,
    actor: Actor,
    application_id: UUID,
    to_status: ApplicationStatus,
    notes: Optional[str] = None,
) -> Application:
    """
    Move an application to a new status.
    
    Owners follow ALLOWED_TRANSITIONS; admins may set any status.
    
    Raises:
        NotFoundError: application missing or not on one of the owner's jobs
        InvalidTransitionError: owner tried e.g. hired -> applied
    """
    application = await _get_reviewable_application(db, actor, application_id)
    current = ApplicationStatus(application.status)
    
    if not actor.is_admin and not can_transition(current, to_status):
        raise InvalidTransitionError(
            f"Invalid transition from {current.value} to {to_status.value}"
        )
    
    application.status = to_status.value
    if notes is not None:
        application.status_notes = notes.strip() or None
    application.updated_at = datetime.utcnow()
    
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Error updating application status: {str(e)}", exc_info=True)
        raise DependencyError()
    
    await db.refresh(application)
    logger.info(
        f"Application status transition: {current.value} → {to_status.value}",
        extra={
            "application_id": str(application.id),
            "actor_id": str(actor.user_id),
            "actor_role": actor.role.value,
        },
    )
    return application


def count_by_status(applications: list[Application]) -> dict[str, int]:
    counts = {status.value: 0 for status in ApplicationStatus}
    for application in applications:
        counts[application.status] = counts.get(application.status, 0) + 1
    return counts


async def list_my_applications(db: AsyncSession, actor: Actor) -> list[Application]:
    _require_job_seeker(actor)
    result = await db.execute(
        select(Application)
        .where(Application.applicant_id == actor.user_id)
        .order_by(Application.applied_at.desc())
    )
    return list(result.scalars().all())


async def list_applicants(
    db: AsyncSession,
    actor: Actor,
    job_id: Optional[UUID] = None,
    status: Optional[ApplicationStatus] = None,
) -> list[Application]:
    """Applications on the lembaga's own jobs, or on every job for admins."""
    query = select(Application).join(Job, Application.job_id == Job.id)
    if not actor.is_admin:
        organization = await require_owner_organization(db, actor)
        query = query.where(Job.org_id == organization.id)
    if job_id is not None:
        query = query.where(Application.job_id == job_id)
    if status is not None:
        query = query.where(Application.status == status.value)
    
    result = await db.execute(query.order_by(Application.applied_at.desc()))
    return list(result.scalars().all())
