from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON, Enum as SQLEnum

from samit.database import Base
from samit.database_types import GUID
from samit.models.user import UserRole


class Profile(Base):
    """Portal profile, 1:1 with the identity record (same primary key)."""
    __tablename__ = "profiles"
    
    id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    
    # Role is set once at sign-up; nothing in the portal changes it afterwards
    role = Column(
        SQLEnum(UserRole, name="user_role", create_type=True,
                values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=UserRole.USER,
        index=True
    )
    
    full_name = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    bio = Column(Text, nullable=True)
    
    # Structure: {"linkedin": "...", "instagram": "...", "website": "..."}
    socials = Column(JSON, nullable=True, default=dict)
    
    # Mirrors the resume flagged is_default
    default_cv_id = Column(
        GUID,
        ForeignKey("resumes.id", ondelete="SET NULL", use_alter=True, name="fk_profiles_default_cv_id"),
        nullable=True
    )
    
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
