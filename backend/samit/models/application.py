from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Index, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid

from samit.database import Base
from samit.database_types import GUID


class ApplicationStatus(str, Enum):
    """Valid states for a job application"""
    APPLIED = "applied"
    SHORTLISTED = "shortlisted"
    INTERVIEW = "interview"
    REJECTED = "rejected"
    HIRED = "hired"


class Application(Base):
    __tablename__ = "applications"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    job_id = Column(GUID, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    applicant_id = Column(GUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    
    cv_url = Column(String, nullable=False)
    cover_letter = Column(Text, nullable=True)
    
    # State machine
    status = Column(String, nullable=False, default=ApplicationStatus.APPLIED.value)
    status_notes = Column(Text, nullable=True)
    
    applied_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    
    job = relationship("Job", lazy="joined")
    
    __table_args__ = (
        # One application per applicant per job
        UniqueConstraint('job_id', 'applicant_id', name='uq_application_job_applicant'),
        
        Index('idx_applications_job_status', 'job_id', 'status'),
    )
