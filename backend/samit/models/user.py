from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer
import uuid
import enum

from samit.database import Base
from samit.database_types import GUID


class UserRole(str, enum.Enum):
    """Closed set of portal roles. Stored on the profile, fixed at sign-up."""
    USER = "user"  # Job seeker - own profile, CVs, applications, class enrollments
    LEMBAGA = "lembaga"  # Hiring organization - own org, legal docs, jobs, applicants
    ADMIN = "admin"  # Admin team - verification, all jobs/classes/users


class User(Base):
    """Identity record owned by the magic-link sign-in flow."""
    __tablename__ = "users"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, nullable=False, index=True)
    
    # Magic link authentication
    magic_link_token = Column(String, nullable=True, index=True)
    magic_link_expires_at = Column(DateTime, nullable=True)
    
    # Security & audit fields
    last_login_at = Column(DateTime, nullable=True)
    last_login_ip = Column(String(45), nullable=True)  # IPv4 or IPv6
    failed_login_attempts = Column(Integer, default=0, nullable=False)
    account_locked_until = Column(DateTime, nullable=True)
    
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    
    def is_account_locked(self) -> bool:
        """Check if account is currently locked due to failed login attempts."""
        if not self.account_locked_until:
            return False
        return datetime.utcnow() < self.account_locked_until
