"""Language course offerings and enrollments."""
from datetime import date, datetime
from enum import Enum
from typing import Optional
from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid

from samit.database import Base
from samit.database_types import GUID


class ClassType(str, Enum):
    KAIWA = "kaiwa"
    INTENSIF = "intensif"
    JLPT = "jlpt"


class ClassStatus(str, Enum):
    """Derived from the class dates, never stored."""
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class EnrollmentStatus(str, Enum):
    REGISTERED = "registered"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class LanguageClass(Base):
    __tablename__ = "classes"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    slug = Column(String, nullable=False, unique=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    class_type = Column(String, nullable=False, default=ClassType.KAIWA.value, index=True)
    jlpt_level = Column(String(2), nullable=True, index=True)
    
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    schedule = Column(String(255), nullable=True)  # e.g. "Sat 09:00-11:00"
    
    is_online = Column(Boolean, nullable=False, default=True)
    meeting_link = Column(String(500), nullable=True)
    location = Column(String(255), nullable=True)
    
    max_students = Column(Integer, nullable=True)
    enrolled_count = Column(Integer, nullable=False, default=0)
    price = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    
    def status_on(self, today: Optional[date] = None) -> ClassStatus:
        """Class status for the given day (defaults to today)."""
        today = today or date.today()
        if today < self.start_date:
            return ClassStatus.UPCOMING
        if today > self.end_date:
            return ClassStatus.COMPLETED
        return ClassStatus.ONGOING
    
    def is_full(self) -> bool:
        return self.max_students is not None and self.enrolled_count >= self.max_students


class ClassEnrollment(Base):
    __tablename__ = "class_enrollments"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    class_id = Column(GUID, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    
    status = Column(String, nullable=False, default=EnrollmentStatus.REGISTERED.value)
    notes = Column(Text, nullable=True)
    
    enrolled_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    
    language_class = relationship("LanguageClass", lazy="joined")
    
    __table_args__ = (
        UniqueConstraint('user_id', 'class_id', name='uq_enrollment_user_class'),
    )
