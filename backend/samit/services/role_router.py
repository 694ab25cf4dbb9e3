"""
Role router.

Maps each role to its landing page, its sidebar menu and the capabilities
the dashboard exposes to it. The role set is closed: anything outside
UserRole is an error, never a silent default.
"""
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Union

from samit.models.user import UserRole

logger = logging.getLogger(__name__)


class UnknownRoleError(ValueError):
    """Raised when a stored or supplied role is not one of the portal roles"""
    pass


@dataclass(frozen=True)
class MenuItem:
    label: str
    href: str


HOME_ROUTES: Dict[UserRole, str] = {
    UserRole.ADMIN: "/dashboard/admin/overview",
    UserRole.LEMBAGA: "/dashboard/org",
    UserRole.USER: "/dashboard/profile",
}

MENUS: Dict[UserRole, List[MenuItem]] = {
    UserRole.USER: [
        MenuItem("My Profile", "/dashboard/profile"),
        MenuItem("My CVs", "/dashboard/cv"),
        MenuItem("My Applications", "/dashboard/applications"),
        MenuItem("My Classes", "/dashboard/classes"),
    ],
    UserRole.LEMBAGA: [
        MenuItem("Organization Profile", "/dashboard/org"),
        MenuItem("Legal Documents", "/dashboard/legal"),
        MenuItem("My Jobs", "/dashboard/jobs"),
        MenuItem("Post a Job", "/dashboard/jobs/new"),
        MenuItem("Applicants", "/dashboard/applicants"),
    ],
    UserRole.ADMIN: [
        MenuItem("Overview", "/dashboard/admin/overview"),
        MenuItem("Verify Organizations", "/dashboard/admin/verify-org"),
        MenuItem("Manage Jobs", "/dashboard/admin/jobs"),
        MenuItem("Manage Users", "/dashboard/admin/users"),
        MenuItem("Manage Classes", "/dashboard/admin/classes"),
        MenuItem("Settings", "/dashboard/admin/settings"),
    ],
}

CAPABILITIES: Dict[UserRole, FrozenSet[str]] = {
    UserRole.USER: frozenset({
        "manage_own_profile",
        "manage_own_resumes",
        "apply_to_jobs",
        "enroll_in_classes",
    }),
    UserRole.LEMBAGA: frozenset({
        "manage_own_profile",
        "manage_own_organization",
        "upload_legal_documents",
        "manage_own_jobs",
        "review_own_applicants",
    }),
    UserRole.ADMIN: frozenset({
        "manage_own_profile",
        "verify_organizations",
        "manage_all_jobs",
        "review_all_applicants",
        "manage_classes",
        "manage_users",
        "manage_settings",
    }),
}


def parse_role(value: Union[str, UserRole, None]) -> UserRole:
    """
    Turn a stored role value into a UserRole.
    
    Raises:
        UnknownRoleError: value is not one of user / lembaga / admin
    """
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(value)
    except ValueError:
        logger.error(f"Unknown role value {value!r}; refusing to route")
        raise UnknownRoleError(f"Unknown role: {value!r}")


def home_route(role: Union[str, UserRole]) -> str:
    """Landing page for a role."""
    return HOME_ROUTES[parse_role(role)]


def menu_for(role: Union[str, UserRole]) -> List[MenuItem]:
    return list(MENUS[parse_role(role)])


def capabilities_for(role: Union[str, UserRole]) -> FrozenSet[str]:
    return CAPABILITIES[parse_role(role)]


def has_capability(role: Union[str, UserRole], capability: str) -> bool:
    return capability in capabilities_for(role)
