"""Hiring organization (lembaga) and its verification status."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, JSON
import uuid
import enum

from samit.database import Base
from samit.database_types import GUID


class VerificationStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class Organization(Base):
    __tablename__ = "organizations"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    # One organization per owning profile
    owner_id = Column(GUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    slug = Column(String, nullable=False, unique=True, index=True)
    
    display_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    website = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    employee_count = Column(String(50), nullable=True)
    
    # Verification (changed only through samit.services.verification)
    verification_status = Column(String, nullable=False, default=VerificationStatus.PENDING.value, index=True)
    verification_notes = Column(Text, nullable=True)
    verified_at = Column(DateTime, nullable=True)
    
    # Structure: {"npwp": {"url": "...", "filename": "npwp.pdf", "uploaded_at": "2026-01-01T00:00:00"}}
    legal_documents = Column(JSON, nullable=True, default=dict)
    
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    def is_verified(self) -> bool:
        return self.verification_status == VerificationStatus.VERIFIED.value
