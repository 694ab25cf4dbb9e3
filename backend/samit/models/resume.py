from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Index, text
import uuid

from samit.database import Base
from samit.database_types import GUID


class Resume(Base):
    __tablename__ = "resumes"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    user_id = Column(GUID, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    
    title = Column(String(255), nullable=False)  # Original filename
    file_url = Column(String, nullable=False)
    storage_path = Column(String, nullable=False)  # Path inside the "resumes" bucket
    file_size = Column(Integer, nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)
    
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    
    __table_args__ = (
        # At most one default resume per user
        Index(
            'uq_resumes_one_default_per_user',
            'user_id',
            unique=True,
            postgresql_where=text('is_default'),
            sqlite_where=text('is_default = 1'),
        ),
    )
