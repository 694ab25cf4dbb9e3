"""
Access policy evaluator.

Pure decision logic shared by the edge middleware and the page-level guards:
given a request path and the requester's role (None when unauthenticated),
decide whether to let the request through or where to redirect it.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlencode

from samit.models.user import UserRole
from samit.services.role_router import home_route

LOGIN_PATH = "/auth/login"
DASHBOARD_PATH = "/dashboard"
AUTH_PREFIX = "/auth"

PROTECTED_PREFIXES = ("/dashboard", "/apply", "/enroll")
ADMIN_PREFIXES = ("/dashboard/admin",)
ORGANIZATION_PREFIXES = (
    "/dashboard/org",
    "/dashboard/legal",
    "/dashboard/jobs",
    "/dashboard/applicants",
)

ORGANIZATION_ROLES = frozenset({UserRole.LEMBAGA, UserRole.ADMIN})


class RouteClass(str, Enum):
    """Every path falls into exactly one of these."""
    PUBLIC = "public"
    PROTECTED = "protected"
    ADMIN_ONLY = "admin_only"
    ORGANIZATION_ONLY = "organization_only"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    redirect_to: Optional[str] = None


ALLOW = AccessDecision(allowed=True)


def _normalize(path: str) -> str:
    if not path:
        return "/"
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def _under(path: str, prefix: str) -> bool:
    """Segment-aware prefix match: /dashboard/jobs covers /dashboard/jobs/new only."""
    return path == prefix or path.startswith(prefix + "/")


def classify_path(path: str) -> RouteClass:
    path = _normalize(path)
    if any(_under(path, prefix) for prefix in ADMIN_PREFIXES):
        return RouteClass.ADMIN_ONLY
    if any(_under(path, prefix) for prefix in ORGANIZATION_PREFIXES):
        return RouteClass.ORGANIZATION_ONLY
    if any(_under(path, prefix) for prefix in PROTECTED_PREFIXES):
        return RouteClass.PROTECTED
    return RouteClass.PUBLIC


def login_redirect(path: str) -> str:
    """Login URL that brings the user back to ``path`` afterwards."""
    return f"{LOGIN_PATH}?{urlencode({'redirectTo': path})}"


def is_safe_redirect(target: Optional[str]) -> bool:
    """Only same-site relative paths may be used as post-login targets."""
    return bool(target) and target.startswith("/") and not target.startswith("//") and "\\" not in target


def evaluate(path: str, role: Optional[UserRole]) -> AccessDecision:
    """
    Decide allow / redirect-to-login / redirect-to-dashboard for a request.
    
    Precedence:
    1. unauthenticated on a non-public path -> login with redirectTo
    2. authenticated on /auth/* -> /dashboard
    3. admin-only path and role is not admin -> /dashboard
    4. organization-only path and role not lembaga/admin -> /dashboard
    5. exactly /dashboard -> the role's home
    """
    path = _normalize(path)
    route_class = classify_path(path)
    
    if role is None:
        if route_class is RouteClass.PUBLIC:
            return ALLOW
        return AccessDecision(allowed=False, redirect_to=login_redirect(path))
    
    if _under(path, AUTH_PREFIX):
        return AccessDecision(allowed=False, redirect_to=DASHBOARD_PATH)
    
    if route_class is RouteClass.ADMIN_ONLY and role != UserRole.ADMIN:
        return AccessDecision(allowed=False, redirect_to=DASHBOARD_PATH)
    
    if route_class is RouteClass.ORGANIZATION_ONLY and role not in ORGANIZATION_ROLES:
        return AccessDecision(allowed=False, redirect_to=DASHBOARD_PATH)
    
    if path == DASHBOARD_PATH:
        return AccessDecision(allowed=False, redirect_to=home_route(role))
    
    return ALLOW
