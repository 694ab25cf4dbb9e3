"""
Organization dashboard (lembaga, and admins acting as an organization).

- Organization profile (created as pending on first visit)
- Legal documents needed for verification
- Job postings (verified organizations only)
- Applicant review
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from samit.api.guards import require_organization
from samit.database import get_db
from samit.errors import VerificationRequiredError
from samit.models.application import ApplicationStatus
from samit.schemas.application import ApplicationListResponse, ApplicationStatusUpdate
from samit.schemas.job import JobCreate, JobResponse, JobUpdate
from samit.schemas.organization import (
    LegalDocumentsResponse,
    OrganizationPageResponse,
    OrganizationResponse,
    OrganizationUpdateRequest,
)
from samit.services.applications import count_by_status, list_applicants, update_application_status
from samit.services.identity import Actor
from samit.services.jobs import create_job, list_organization_jobs, update_job
from samit.services.organizations import (
    get_or_create_owner_organization,
    get_owner_organization,
    legal_document_summary,
    require_owner_organization,
    update_organization,
    upload_legal_document,
)
from samit.services.storage import ObjectStorage, get_storage

router = APIRouter(prefix="/dashboard")

APPLICANTS_PATH = "/dashboard/applicants"


# Organization profile
@router.get("/org", response_model=OrganizationPageResponse)
async def get_org(
    actor: Actor = Depends(require_organization),
    db: AsyncSession = Depends(get_db)
):
    """
    The actor's organization profile.
    
    First visit by a lembaga creates its organization in pending state.
    """
    return {"organization": await get_or_create_owner_organization(db, actor)}


@router.put("/org", response_model=OrganizationResponse)
async def put_org(
    update_request: OrganizationUpdateRequest,
    actor: Actor = Depends(require_organization),
    db: AsyncSession = Depends(get_db)
):
    return await update_organization(db, actor, update_request.model_dump(exclude_unset=True))


# Legal documents
@router.get("/legal", response_model=LegalDocumentsResponse)
async def get_legal_documents(
    actor: Actor = Depends(require_organization),
    db: AsyncSession = Depends(get_db)
):
    organization = await require_owner_organization(db, actor)
    return legal_document_summary(organization)


@router.post("/legal/{doc_type}", response_model=LegalDocumentsResponse)
async def post_legal_document(
    doc_type: str,
    file: UploadFile = File(...),
    actor: Actor = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage)
):
    """Upload one legal document (PDF, JPG or PNG, at most 10MB)."""
    organization = await upload_legal_document(db, storage, actor, doc_type, file)
    return legal_document_summary(organization)


# Jobs
@router.get("/jobs", response_model=list[JobResponse])
async def my_jobs(
    actor: Actor = Depends(require_organization),
    db: AsyncSession = Depends(get_db)
):
    return await list_organization_jobs(db, actor)


@router.get("/jobs/new")
async def new_job_form(
    actor: Actor = Depends(require_organization),
    db: AsyncSession = Depends(get_db)
):
    """Whether the actor may post yet; unverified organizations see why not."""
    if actor.is_admin:
        return {"can_post": True, "message": None}
    organization = await get_owner_organization(db, actor)
    if organization is None or not organization.is_verified():
        return {"can_post": False, "message": VerificationRequiredError.default_message}
    return {"can_post": True, "message": None}


@router.post("/jobs/new", response_model=JobResponse, status_code=201)
async def post_job(
    job_data: JobCreate,
    actor: Actor = Depends(require_organization),
    db: AsyncSession = Depends(get_db)
):
    """
    Publish a job.
    
    Returns:
        201: Job created
        403: Organization is not verified yet
        409: Slug already used
    """
    return await create_job(db, actor, job_data)


@router.put("/jobs/{job_id}", response_model=JobResponse)
async def put_job(
    job_id: UUID,
    job_data: JobUpdate,
    actor: Actor = Depends(require_organization),
    db: AsyncSession = Depends(get_db)
):
    return await update_job(db, actor, job_id, job_data.model_dump(exclude_unset=True))


# Applicants
@router.get("/applicants", response_model=ApplicationListResponse)
async def applicants(
    job: Optional[UUID] = None,
    status: Optional[ApplicationStatus] = None,
    actor: Actor = Depends(require_organization),
    db: AsyncSession = Depends(get_db)
):
    """Applications on the actor's jobs, optionally filtered by job and status."""
    applications = await list_applicants(db, actor, job_id=job, status=status)
    return {
        "applications": applications,
        "counts": count_by_status(applications),
        "total": len(applications),
    }


@router.post("/applicants/{application_id}/status")
async def post_application_status(
    application_id: UUID,
    update_request: ApplicationStatusUpdate,
    actor: Actor = Depends(require_organization),
    db: AsyncSession = Depends(get_db)
):
    """Move an application to a new status, then back to the applicants list."""
    application = await update_application_status(
        db, actor, application_id, update_request.status, update_request.notes
    )
    return RedirectResponse(f"{APPLICANTS_PATH}?job={application.job_id}", status_code=303)
