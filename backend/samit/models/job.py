from datetime import datetime
from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, Date, ForeignKey, JSON
from sqlalchemy.orm import relationship
import uuid

from samit.database import Base
from samit.database_types import GUID


class Job(Base):
    __tablename__ = "jobs"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    org_id = Column(GUID, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    slug = Column(String, nullable=False, unique=True, index=True)
    
    # Job details
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    requirements = Column(Text, nullable=True)
    benefits = Column(Text, nullable=True)
    category = Column(String, nullable=True, index=True)  # dalam-negeri | luar-negeri
    employment_type = Column(String, nullable=True, index=True)  # fulltime | parttime | contract | internship
    location_type = Column(String, nullable=True)  # onsite | remote | hybrid
    location_city = Column(String(100), nullable=True)
    jlpt_required = Column(String(2), nullable=True, index=True)  # N1..N5
    
    # Salary
    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    salary_currency = Column(String(3), nullable=False, default="JPY")
    show_salary = Column(Boolean, nullable=False, default=True)
    
    tags = Column(JSON, nullable=True, default=list)
    application_deadline = Column(Date, nullable=True)
    
    # Publishing
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    published_at = Column(DateTime, nullable=True)
    
    # Denormalized counters, only ever incremented through samit.services.counters
    applications_count = Column(Integer, nullable=False, default=0)
    views_count = Column(Integer, nullable=False, default=0)
    
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    organization = relationship("Organization", lazy="joined")
