"""Authentication-related Pydantic schemas."""
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field


class SignUpRequest(BaseModel):
    """New account. Admins are never self-registered."""
    email: EmailStr
    full_name: str = Field(min_length=1, max_length=255)
    role: Literal["user", "lembaga"] = "user"


class MagicLinkRequest(BaseModel):
    """Request to send magic link email."""
    email: EmailStr
    redirect_to: Optional[str] = None


class MagicLinkResponse(BaseModel):
    """Response after requesting magic link."""
    message: str
    email: str


class VerifyTokenRequest(BaseModel):
    """Request to verify magic link token."""
    token: str
    redirect_to: Optional[str] = None


class AuthResponse(BaseModel):
    """Response after successful authentication."""
    user_id: str
    email: str
    full_name: str | None
    role: str
    redirect_to: str
