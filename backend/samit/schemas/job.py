"""Job-related Pydantic schemas."""
from datetime import date, datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from samit.schemas.organization import OrganizationSummary, PublicOrganizationDetail


class JobBase(BaseModel):
    """Base schema with common job fields."""
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    requirements: Optional[str] = None
    benefits: Optional[str] = None
    category: Optional[str] = "dalam-negeri"  # dalam-negeri | luar-negeri
    employment_type: Optional[str] = "fulltime"  # fulltime | parttime | contract | internship
    location_type: Optional[str] = "onsite"  # onsite | remote | hybrid
    location_city: Optional[str] = None
    jlpt_required: Optional[str] = Field(default=None, pattern=r"^N[1-5]$")
    salary_min: Optional[int] = Field(default=None, ge=0)
    salary_max: Optional[int] = Field(default=None, ge=0)
    salary_currency: str = "JPY"
    show_salary: bool = True
    tags: List[str] = Field(default_factory=list)
    application_deadline: Optional[date] = None
    is_active: bool = True


class JobCreate(JobBase):
    """Schema for creating a new job. Slug is generated from the title when omitted."""
    slug: Optional[str] = None


class JobUpdate(BaseModel):
    """Partial update of a job."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    benefits: Optional[str] = None
    category: Optional[str] = None
    employment_type: Optional[str] = None
    location_type: Optional[str] = None
    location_city: Optional[str] = None
    jlpt_required: Optional[str] = Field(default=None, pattern=r"^N[1-5]$")
    salary_min: Optional[int] = Field(default=None, ge=0)
    salary_max: Optional[int] = Field(default=None, ge=0)
    salary_currency: Optional[str] = None
    show_salary: Optional[bool] = None
    tags: Optional[List[str]] = None
    application_deadline: Optional[date] = None
    is_active: Optional[bool] = None


class JobResponse(JobBase):
    """Schema for job response."""
    id: UUID
    org_id: UUID
    slug: str
    published_at: Optional[datetime] = None
    applications_count: int
    views_count: int
    created_at: datetime
    organization: Optional[OrganizationSummary] = None
    
    model_config = ConfigDict(from_attributes=True)


class JobListResponse(BaseModel):
    jobs: List[JobResponse]
    total: int
    page: int
    per_page: int


class CompanyPageResponse(BaseModel):
    organization: PublicOrganizationDetail
    jobs: List[JobResponse]
