"""
Public pages: job board, company directory and class catalogue.

No session is needed. Only active jobs of verified organizations, verified
organizations and active classes are ever shown.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from samit.database import get_db
from samit.schemas.job import CompanyPageResponse, JobListResponse, JobResponse
from samit.schemas.language_class import ClassResponse
from samit.schemas.organization import PublicOrganizationResponse
from samit.services.enrollments import class_view, find_public_class, list_public_classes
from samit.services.jobs import (
    PUBLIC_PAGE_SIZE,
    list_public_jobs,
    list_public_jobs_for_organization,
    view_public_job,
)
from samit.services.organizations import get_public_organization, list_public_organizations

router = APIRouter()


@router.get("/jobs", response_model=JobListResponse)
async def job_board(
    category: Optional[str] = None,
    jlpt: Optional[str] = None,
    employment_type: Optional[str] = None,
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    db: AsyncSession = Depends(get_db)
):
    """Active jobs from verified organizations, newest first."""
    jobs, total = await list_public_jobs(
        db, category=category, jlpt=jlpt, employment_type=employment_type, q=q, page=page
    )
    return {"jobs": jobs, "total": total, "page": page, "per_page": PUBLIC_PAGE_SIZE}


@router.get("/jobs/{slug}", response_model=JobResponse)
async def job_detail(slug: str, db: AsyncSession = Depends(get_db)):
    """Job detail. Counts the view."""
    return await view_public_job(db, slug)


@router.get("/companies", response_model=list[PublicOrganizationResponse])
async def company_directory(q: Optional[str] = None, db: AsyncSession = Depends(get_db)):
    return await list_public_organizations(db, q)


@router.get("/companies/{slug}", response_model=CompanyPageResponse)
async def company_page(slug: str, db: AsyncSession = Depends(get_db)):
    organization = await get_public_organization(db, slug)
    jobs = await list_public_jobs_for_organization(db, organization.id)
    return {"organization": organization, "jobs": jobs}


@router.get("/classes", response_model=list[ClassResponse])
async def class_catalogue(
    type: Optional[str] = None,
    level: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Active classes with their date-derived status."""
    classes = await list_public_classes(db, class_type=type, jlpt_level=level)
    return [class_view(language_class) for language_class in classes]


@router.get("/classes/{slug}", response_model=ClassResponse)
async def class_detail(slug: str, db: AsyncSession = Depends(get_db)):
    return class_view(await find_public_class(db, slug))
