from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
import uuid

from samit.database import Base
from samit.database_types import GUID


class ActivityLog(Base):
    """Audit entry for admin actions (verification decisions, corrections)."""
    __tablename__ = "activity_logs"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    actor_id = Column(GUID, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True, index=True)
    
    action = Column(String, nullable=False)  # e.g. organization_verify
    target_type = Column(String, nullable=False)  # organization | application | enrollment
    target_id = Column(GUID, nullable=False, index=True)
    meta = Column(JSON, nullable=True, default=dict)
    
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
