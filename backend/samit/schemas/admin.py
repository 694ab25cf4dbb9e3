"""Admin dashboard Pydantic schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from samit.schemas.job import JobResponse
from samit.schemas.organization import OrganizationSummary


class OverviewStats(BaseModel):
    users: int
    organizations: int
    pending_organizations: int
    verified_organizations: int
    jobs: int
    active_jobs: int
    applications: int
    classes: int


class OverviewResponse(BaseModel):
    stats: OverviewStats
    recent_organizations: list[OrganizationSummary]
    recent_jobs: list[JobResponse]


class UserSummary(BaseModel):
    user_id: str
    email: str
    role: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime
    last_login_at: Optional[datetime] = None


class UserListResponse(BaseModel):
    users: list[UserSummary]
    total: int
