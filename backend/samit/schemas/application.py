"""Application-related Pydantic schemas."""
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict

from samit.models.application import ApplicationStatus
from samit.schemas.job import JobResponse
from samit.schemas.resume import ResumeResponse


class ApplicationResponse(BaseModel):
    id: UUID
    job_id: UUID
    applicant_id: UUID
    cv_url: str
    cover_letter: Optional[str] = None
    status: ApplicationStatus
    status_notes: Optional[str] = None
    applied_at: datetime
    updated_at: datetime
    job: Optional[JobResponse] = None
    
    model_config = ConfigDict(from_attributes=True)


class ApplicationListResponse(BaseModel):
    """Applications with the number in each status."""
    applications: list[ApplicationResponse]
    counts: dict[str, int]
    total: int


class ApplyPageResponse(BaseModel):
    """What the apply page needs: the job, the caller's CVs and any earlier application."""
    job: JobResponse
    resumes: list[ResumeResponse]
    existing_application: Optional[ApplicationResponse] = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = None
