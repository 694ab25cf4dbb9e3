"""Class and enrollment Pydantic schemas."""
from datetime import date, datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, model_validator

from samit.models.language_class import ClassType, EnrollmentStatus


class ClassCreate(BaseModel):
    """Admin request to open a new class."""
    title: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = None
    description: Optional[str] = None
    class_type: ClassType = ClassType.KAIWA
    jlpt_level: Optional[str] = Field(default=None, pattern=r"^N[1-5]$")
    start_date: date
    end_date: date
    schedule: Optional[str] = None
    is_online: bool = True
    meeting_link: Optional[str] = None
    location: Optional[str] = None
    max_students: Optional[int] = Field(default=None, ge=1)
    price: Optional[int] = Field(default=None, ge=0)
    is_active: bool = True

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ClassResponse(BaseModel):
    id: UUID
    slug: str
    title: str
    description: Optional[str] = None
    class_type: str
    jlpt_level: Optional[str] = None
    start_date: date
    end_date: date
    schedule: Optional[str] = None
    is_online: bool
    location: Optional[str] = None
    max_students: Optional[int] = None
    enrolled_count: int
    price: Optional[int] = None
    is_active: bool
    status: str
    
    model_config = ConfigDict(from_attributes=True)


class EnrollRequest(BaseModel):
    notes: Optional[str] = None


class EnrollmentResponse(BaseModel):
    id: UUID
    class_id: UUID
    user_id: UUID
    status: EnrollmentStatus
    notes: Optional[str] = None
    enrolled_at: datetime
    updated_at: datetime
    language_class: Optional[ClassResponse] = None
    # Only filled in for confirmed enrollments in online classes
    meeting_link: Optional[str] = None


class EnrollmentListResponse(BaseModel):
    enrollments: list[EnrollmentResponse]
    counts: dict[str, int]


class EnrollmentStatusUpdate(BaseModel):
    status: EnrollmentStatus
    notes: Optional[str] = None
