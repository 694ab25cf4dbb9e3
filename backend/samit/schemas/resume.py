"""Resume (CV) Pydantic schemas."""
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict


class ResumeResponse(BaseModel):
    id: UUID
    title: str
    file_url: str
    file_size: int
    is_default: bool
    uploaded_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class ResumeListResponse(BaseModel):
    resumes: list[ResumeResponse]
    default_cv_id: UUID | None = None
