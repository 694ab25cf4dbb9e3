"""
Admin dashboard endpoints.

Every route here depends on require_admin; the edge middleware already
turns non-admins away from /dashboard/admin, this is the second check.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from samit.api.guards import require_admin
from samit.config import settings
from samit.database import get_db
from samit.schemas.admin import OverviewResponse, UserListResponse
from samit.schemas.job import JobResponse
from samit.schemas.language_class import (
    ClassCreate,
    ClassResponse,
    EnrollmentResponse,
    EnrollmentStatusUpdate,
)
from samit.schemas.organization import (
    OrganizationResponse,
    VerificationQueueResponse,
    VerificationRequest,
)
from samit.services import admin as admin_service
from samit.services.enrollments import (
    class_view,
    create_class,
    enrollment_view,
    list_all_classes,
    list_class_enrollments,
    update_enrollment_status,
)
from samit.services.identity import Actor
from samit.services.jobs import list_all_jobs
from samit.services.organizations import ensure_admin_organization
from samit.services.verification import VerificationCommand, decide

router = APIRouter(prefix="/dashboard/admin")


@router.get("/overview", response_model=OverviewResponse)
async def overview(
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await admin_service.overview(db)


# Organization verification
@router.get("/verify-org", response_model=VerificationQueueResponse)
async def verification_queue(
    status: Optional[str] = None,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Organizations awaiting (or past) review, with the count per status."""
    return await admin_service.verification_queue(db, status)


@router.post("/verify-org/{organization_id}", response_model=OrganizationResponse)
async def verify_organization(
    organization_id: UUID,
    verification: VerificationRequest,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Verify or reject an organization.
    
    Returns:
        200: Decision applied
        400: Rejection without a reason
        404: Organization not found
        409: Transition not allowed (e.g. verified -> rejected)
    """
    command = VerificationCommand(
        organization_id=organization_id,
        decision=verification.decision,
        notes=verification.notes,
    )
    return await decide(db, admin, command)


@router.post("/organization", response_model=OrganizationResponse)
async def admin_organization(
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Provision (once) the verified organization admin-posted jobs belong to."""
    return await ensure_admin_organization(db, admin)


@router.get("/settings")
async def portal_settings(admin: Actor = Depends(require_admin)):
    """Non-secret runtime settings for the admin settings page."""
    return {
        "site_url": settings.get_site_url(),
        "admin_org_name": settings.admin_org_name,
        "email_mode": settings.email_mode,
        "magic_link_ttl_minutes": settings.magic_link_ttl_minutes,
        "session_max_age_days": settings.session_max_age_days,
    }


# Jobs and users
@router.get("/jobs", response_model=list[JobResponse])
async def all_jobs(
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await list_all_jobs(db)


@router.get("/users", response_model=UserListResponse)
async def users(
    role: Optional[str] = None,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    user_list = await admin_service.list_users(db, role)
    return {"users": user_list, "total": len(user_list)}


# Classes
@router.get("/classes", response_model=list[ClassResponse])
async def classes(
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return [class_view(language_class) for language_class in await list_all_classes(db)]


@router.post("/classes", response_model=ClassResponse, status_code=201)
async def post_class(
    class_data: ClassCreate,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return class_view(await create_class(db, admin, class_data))


@router.get("/classes/{class_id}/enrollments", response_model=list[EnrollmentResponse])
async def class_enrollments(
    class_id: UUID,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return [enrollment_view(enrollment) for enrollment in await list_class_enrollments(db, class_id)]


@router.post("/enrollments/{enrollment_id}/status", response_model=EnrollmentResponse)
async def enrollment_status(
    enrollment_id: UUID,
    update_request: EnrollmentStatusUpdate,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    enrollment = await update_enrollment_status(
        db, admin, enrollment_id, update_request.status, update_request.notes
    )
    return enrollment_view(enrollment)
