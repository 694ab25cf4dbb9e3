"""
Job application and class enrollment form endpoints (job seekers only).

Successful submissions answer with a 303 redirect to the matching
dashboard list, the way a form post would.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from samit.api.guards import require_job_seeker
from samit.database import get_db
from samit.schemas.application import ApplyPageResponse
from samit.services.applications import apply_page, submit_application
from samit.services.enrollments import enroll
from samit.services.identity import Actor
from samit.services.storage import ObjectStorage, get_storage

router = APIRouter()

APPLICATIONS_PATH = "/dashboard/applications"
CLASSES_PATH = "/dashboard/classes"


@router.get("/apply/{slug}", response_model=ApplyPageResponse)
async def get_apply_page(
    slug: str,
    actor: Actor = Depends(require_job_seeker),
    db: AsyncSession = Depends(get_db)
):
    return await apply_page(db, actor, slug)


@router.post("/apply/{slug}")
async def post_application(
    slug: str,
    resume_id: Optional[UUID] = Form(None),
    cover_letter: Optional[str] = Form(None),
    cv_file: Optional[UploadFile] = File(None),
    actor: Actor = Depends(require_job_seeker),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage)
):
    """
    Apply with an existing CV (``resume_id``) or a new upload (``cv_file``).
    
    Returns:
        303: Application sent, redirect to the applications list
        400: No CV chosen or invalid file
        404: Job not open to applications
        409: Already applied
    """
    # Browsers send an empty file part when nothing was chosen
    if cv_file is not None and not cv_file.filename:
        cv_file = None
    await submit_application(
        db, storage, actor, slug,
        resume_id=resume_id,
        cv_file=cv_file,
        cover_letter=cover_letter,
    )
    return RedirectResponse(APPLICATIONS_PATH, status_code=303)


@router.post("/enroll/{slug}")
async def post_enrollment(
    slug: str,
    notes: Optional[str] = Form(None),
    actor: Actor = Depends(require_job_seeker),
    db: AsyncSession = Depends(get_db)
):
    await enroll(db, actor, slug, notes)
    return RedirectResponse(CLASSES_PATH, status_code=303)
