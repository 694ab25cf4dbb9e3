"""
Signed-in dashboard pages shared by every role, and the job seeker's pages.

- Role landing redirect and sidebar menu
- Profile view/update
- CV (resume) library with a single default
- Own applications and class enrollments
"""
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from samit.api.guards import require_actor, require_job_seeker
from samit.database import get_db
from samit.models.profile import Profile
from samit.schemas.application import ApplicationListResponse
from samit.schemas.language_class import EnrollmentListResponse, EnrollmentResponse
from samit.schemas.profile import MenuResponse, ProfileResponse, ProfileUpdateRequest
from samit.schemas.resume import ResumeListResponse, ResumeResponse
from samit.services.applications import count_by_status, list_my_applications
from samit.services.enrollments import cancel_enrollment, enrollment_view, list_my_enrollments
from samit.services.identity import Actor
from samit.services.profile import build_profile_response, load_profile, update_profile
from samit.services.resumes import delete_resume, list_resumes, set_default_resume, upload_resume
from samit.services.role_router import home_route, menu_for
from samit.services.storage import ObjectStorage, get_storage

router = APIRouter()


@router.get("/dashboard")
async def dashboard_home(actor: Actor = Depends(require_actor)):
    """Send the actor to their role's landing page."""
    return RedirectResponse(home_route(actor.role), status_code=303)


@router.get("/dashboard/menu", response_model=MenuResponse)
async def dashboard_menu(actor: Actor = Depends(require_actor)):
    return MenuResponse(
        role=actor.role.value,
        home=home_route(actor.role),
        items=[{"label": item.label, "href": item.href} for item in menu_for(actor.role)],
    )


# Profile
@router.get("/dashboard/profile", response_model=ProfileResponse)
async def get_profile(
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db)
):
    """Get current user's profile."""
    user, profile = await load_profile(db, actor)
    return build_profile_response(user, profile)


@router.put("/dashboard/profile", response_model=ProfileResponse)
async def put_profile(
    profile_data: ProfileUpdateRequest,
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db)
):
    """Update profile information (partial update)."""
    return await update_profile(db, actor, profile_data.model_dump(exclude_unset=True))


# CV library
@router.get("/dashboard/cv", response_model=ResumeListResponse)
async def get_cvs(
    actor: Actor = Depends(require_job_seeker),
    db: AsyncSession = Depends(get_db)
):
    resumes = await list_resumes(db, actor)
    profile = await db.get(Profile, actor.user_id)
    return {"resumes": resumes, "default_cv_id": profile.default_cv_id if profile else None}


@router.post("/dashboard/cv", response_model=ResumeResponse, status_code=201)
async def post_cv(
    file: UploadFile = File(...),
    actor: Actor = Depends(require_job_seeker),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage)
):
    """
    Upload a CV (PDF, DOC or DOCX, at most 5MB).
    
    The first CV becomes the default.
    """
    return await upload_resume(db, storage, actor, file)


@router.post("/dashboard/cv/{resume_id}/default", response_model=ResumeResponse)
async def make_default_cv(
    resume_id: UUID,
    actor: Actor = Depends(require_job_seeker),
    db: AsyncSession = Depends(get_db)
):
    return await set_default_resume(db, actor, resume_id)


@router.delete("/dashboard/cv/{resume_id}", status_code=204)
async def remove_cv(
    resume_id: UUID,
    actor: Actor = Depends(require_job_seeker),
    db: AsyncSession = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage)
):
    await delete_resume(db, storage, actor, resume_id)


# Applications and classes
@router.get("/dashboard/applications", response_model=ApplicationListResponse)
async def my_applications(
    actor: Actor = Depends(require_job_seeker),
    db: AsyncSession = Depends(get_db)
):
    applications = await list_my_applications(db, actor)
    return {
        "applications": applications,
        "counts": count_by_status(applications),
        "total": len(applications),
    }


@router.get("/dashboard/classes", response_model=EnrollmentListResponse)
async def my_classes(
    actor: Actor = Depends(require_job_seeker),
    db: AsyncSession = Depends(get_db)
):
    """Own enrollments. Meeting links only appear once an enrollment is confirmed."""
    enrollments = await list_my_enrollments(db, actor)
    counts: dict[str, int] = {}
    for enrollment in enrollments:
        counts[enrollment.status] = counts.get(enrollment.status, 0) + 1
    return {
        "enrollments": [enrollment_view(enrollment) for enrollment in enrollments],
        "counts": counts,
    }


@router.post("/dashboard/classes/{enrollment_id}/cancel", response_model=EnrollmentResponse)
async def cancel_my_enrollment(
    enrollment_id: UUID,
    actor: Actor = Depends(require_job_seeker),
    db: AsyncSession = Depends(get_db)
):
    enrollment = await cancel_enrollment(db, actor, enrollment_id)
    return enrollment_view(enrollment)
