"""
Authentication endpoints for passwordless (magic link) sign-up and login.

Dev mode prints the magic link to the log instead of emailing it.

Security features:
- Account lockout after 5 failed attempts (30 min cooldown)
- Magic link tokens expire after configured TTL
- One-time use tokens (invalidated after verification)
- IP address logging for audit trail
- Session cookie signed with the app secret
"""
import logging
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import urlencode
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from samit.config import settings
from samit.database import get_db
from samit.errors import ConflictError, DependencyError
from samit.models.profile import Profile
from samit.models.user import User, UserRole
from samit.schemas.auth import (
    AuthResponse,
    MagicLinkRequest,
    MagicLinkResponse,
    SignUpRequest,
    VerifyTokenRequest,
)
from samit.services.access_policy import is_safe_redirect
from samit.services.email import email_service
from samit.services.identity import SESSION_COOKIE, sign_session
from samit.services.role_router import home_route

logger = logging.getLogger(__name__)
router = APIRouter()
session_router = APIRouter()

# Security constants
MAX_FAILED_ATTEMPTS = 5
ACCOUNT_LOCK_MINUTES = 30

MAGIC_LINK_SENT = "Magic link sent! Check your email (or console in dev mode)."


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.
    
    Checks X-Forwarded-For header (for proxies/load balancers) first,
    falls back to direct client IP.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can be comma-separated list, take first IP
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _issue_magic_link(user: User, redirect_to: Optional[str] = None) -> str:
    """Give the user a fresh one-time token and return the link that redeems it."""
    user.magic_link_token = uuid4().hex
    user.magic_link_expires_at = datetime.utcnow() + timedelta(
        minutes=settings.magic_link_ttl_minutes
    )
    params = {"token": user.magic_link_token}
    if is_safe_redirect(redirect_to):
        params["redirectTo"] = redirect_to
    return f"{settings.get_site_url()}/auth/verify?{urlencode(params)}"


async def _deliver_magic_link(user: User, magic_link: str) -> None:
    if settings.email_mode == "dev":
        logger.info(
            f"Magic link generated for {user.email}: {magic_link} "
            f"(expires: {user.magic_link_expires_at})"
        )
    sent = await email_service.send_magic_link_email(user.email, magic_link)
    if not sent:
        # The token stays valid; the user can request another link
        logger.warning(f"Magic link email to {user.email} was not delivered")


@router.post("/sign-up", response_model=MagicLinkResponse, status_code=201)
async def sign_up(
    request: SignUpRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Create an account (identity record and profile together) and send its first magic link.
    
    Returns:
        201: Account created, magic link issued
        409: Email already registered
    """
    existing = await db.execute(select(User.id).where(User.email == request.email))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("An account with this email already exists")
    
    user = User(id=uuid4(), email=request.email)
    profile = Profile(
        id=user.id,
        role=UserRole(request.role),
        full_name=request.full_name.strip(),
        socials={},
    )
    magic_link = _issue_magic_link(user)
    db.add(user)
    db.add(profile)
    
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("An account with this email already exists")
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating account: {str(e)}", exc_info=True)
        raise DependencyError("Failed to create account. Please try again.")
    
    logger.info(f"New {profile.role.value} account: {user.email}")
    await _deliver_magic_link(user, magic_link)
    return MagicLinkResponse(message=MAGIC_LINK_SENT, email=user.email)


@router.post("/login", response_model=MagicLinkResponse)
async def request_magic_link(
    request: MagicLinkRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Request a magic link for an existing account.
    
    Unknown emails get the same answer so the endpoint does not reveal who
    has an account; nothing is created for them.
    """
    result = await db.execute(select(User).where(User.email == request.email))
    user = result.scalar_one_or_none()
    if user is None:
        logger.info(f"Magic link requested for unknown email {request.email}")
        return MagicLinkResponse(message=MAGIC_LINK_SENT, email=request.email)
    
    magic_link = _issue_magic_link(user, request.redirect_to)
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Error generating magic link: {str(e)}", exc_info=True)
        raise DependencyError("Failed to generate magic link. Please try again.")
    
    await _deliver_magic_link(user, magic_link)
    return MagicLinkResponse(message=MAGIC_LINK_SENT, email=user.email)


@router.post("/verify", response_model=AuthResponse)
async def verify_token(
    verify_request: VerifyTokenRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """
    Verify magic link token and start a session.
    
    Returns:
        200: Token valid, session cookie set
        401: Invalid or expired token
        403: Account locked due to failed attempts
    """
    result = await db.execute(
        select(User).where(User.magic_link_token == verify_request.token)
    )
    user = result.scalar_one_or_none()
    
    if not user:
        # Log potential brute force attempt
        logger.warning(f"Invalid token attempt from IP: {get_client_ip(request)}")
        raise HTTPException(
            status_code=401,
            detail="Invalid token. Please request a new magic link."
        )
    
    if user.is_account_locked():
        logger.warning(
            f"Login attempt on locked account: {user.email} from IP: {get_client_ip(request)}"
        )
        raise HTTPException(
            status_code=403,
            detail=f"Account temporarily locked. Try again after {user.account_locked_until.isoformat()}"
        )
    
    try:
        if user.magic_link_expires_at is None or user.magic_link_expires_at < datetime.utcnow():
            user.failed_login_attempts += 1
            
            # Lock account after too many failed attempts
            if user.failed_login_attempts >= MAX_FAILED_ATTEMPTS:
                user.account_locked_until = datetime.utcnow() + timedelta(minutes=ACCOUNT_LOCK_MINUTES)
                logger.warning(
                    f"Account locked due to {MAX_FAILED_ATTEMPTS} failed attempts: {user.email}"
                )
            
            # Clear expired token
            user.magic_link_token = None
            user.magic_link_expires_at = None
            await db.commit()
            
            raise HTTPException(
                status_code=401,
                detail="Token expired. Please request a new magic link."
            )
        
        user.magic_link_token = None  # One-time use
        user.magic_link_expires_at = None
        user.last_login_at = datetime.utcnow()
        user.last_login_ip = get_client_ip(request)
        user.failed_login_attempts = 0
        user.account_locked_until = None
        await db.commit()
    except HTTPException:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error verifying token: {str(e)}", exc_info=True)
        raise DependencyError("Authentication failed. Please try again.")
    
    profile = await db.get(Profile, user.id)
    if profile is None:
        logger.warning(f"Verified login for {user.email} but no profile exists")
        raise HTTPException(status_code=401, detail="Account setup is incomplete. Please sign up again.")
    
    logger.info(f"Successful login: {user.email} from IP: {user.last_login_ip}")
    
    # In production, set secure=True for HTTPS-only
    response.set_cookie(
        key=SESSION_COOKIE,
        value=sign_session(user.id),
        httponly=True,  # Prevents JavaScript access (XSS protection)
        samesite="lax",  # CSRF protection
        max_age=86400 * settings.session_max_age_days,
        secure=settings.get_site_url().startswith("https"),
    )
    
    redirect_to = verify_request.redirect_to
    if not is_safe_redirect(redirect_to):
        redirect_to = home_route(profile.role)
    
    return AuthResponse(
        user_id=str(user.id),
        email=user.email,
        full_name=profile.full_name,
        role=profile.role.value,
        redirect_to=redirect_to,
    )


@session_router.post("/logout")
async def logout(response: Response):
    """Sign out by clearing the session cookie."""
    response.delete_cookie(
        key=SESSION_COOKIE,
        httponly=True,
        samesite="lax"
    )
    return {"message": "Successfully logged out"}
