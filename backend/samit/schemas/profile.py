"""Profile-related Pydantic schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, HttpUrl


class SocialLinks(BaseModel):
    linkedin: Optional[HttpUrl] = None
    instagram: Optional[HttpUrl] = None
    website: Optional[HttpUrl] = None


class ProfileUpdateRequest(BaseModel):
    """Request body for updating a profile (partial update). Role is not editable."""
    full_name: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    bio: Optional[str] = None
    socials: Optional[SocialLinks] = None


class ProfileResponse(BaseModel):
    """Response with the signed-in user's profile."""
    user_id: str
    email: str
    role: str
    
    full_name: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    socials: Optional[dict] = None
    default_cv_id: Optional[str] = None
    
    # Timestamps
    created_at: datetime
    updated_at: datetime
    last_login_at: Optional[datetime] = None


class MenuItemResponse(BaseModel):
    label: str
    href: str


class MenuResponse(BaseModel):
    """Sidebar for the current role."""
    role: str
    home: str
    items: list[MenuItemResponse]
