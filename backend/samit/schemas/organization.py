"""Organization-related Pydantic schemas."""
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, HttpUrl

from samit.services.verification import VerificationDecision


class OrganizationSummary(BaseModel):
    """Organization fields embedded in job listings."""
    id: UUID
    slug: str
    display_name: str
    city: Optional[str] = None
    verification_status: str
    
    model_config = ConfigDict(from_attributes=True)


class OrganizationResponse(OrganizationSummary):
    owner_id: UUID
    description: Optional[str] = None
    website: Optional[str] = None
    employee_count: Optional[str] = None
    verification_notes: Optional[str] = None
    verified_at: Optional[datetime] = None
    legal_documents: Optional[dict] = None
    created_at: datetime
    updated_at: datetime


class OrganizationUpdateRequest(BaseModel):
    """Request body for updating the organization profile (partial update)."""
    slug: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    website: Optional[HttpUrl] = None
    city: Optional[str] = None
    employee_count: Optional[str] = None


class OrganizationPageResponse(BaseModel):
    organization: Optional[OrganizationResponse] = None


class PublicOrganizationDetail(OrganizationSummary):
    """What a company page shows about a verified organization."""
    description: Optional[str] = None
    website: Optional[str] = None
    employee_count: Optional[str] = None


class PublicOrganizationResponse(BaseModel):
    organization: OrganizationSummary
    active_jobs: int


class VerificationRequest(BaseModel):
    """Admin verify/reject decision."""
    decision: VerificationDecision
    notes: Optional[str] = None


class VerificationQueueResponse(BaseModel):
    organizations: list[OrganizationResponse]
    counts: dict[str, int]


class LegalDocumentsResponse(BaseModel):
    organization_id: UUID
    verification_status: str
    verification_notes: Optional[str] = None
    documents: dict
    missing_required: list[str]
    document_types: dict
