"""
Error taxonomy for the portal.

Services raise these; ``samit.main`` turns them into redirects or JSON
responses so no workflow error escapes as an unhandled 500.
"""
from typing import Optional


class PortalError(Exception):
    """Base class for errors with a user-facing message."""
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthorizationError(PortalError):
    """Unauthenticated or wrong-role access. Always answered with a redirect."""
    status_code = 303
    default_message = "Not allowed"

    def __init__(self, redirect_to: str, message: Optional[str] = None):
        self.redirect_to = redirect_to
        super().__init__(message)


class NotFoundError(PortalError):
    """Missing entity, or one hidden by an activity/verification predicate."""
    status_code = 404
    default_message = "Not found"


class ValidationError(PortalError):
    """Input rejected before any store or storage call."""
    status_code = 400
    default_message = "Invalid input"


class ConflictError(PortalError):
    """The entity already exists (duplicate application, taken slug, ...)."""
    status_code = 409
    default_message = "Already exists"


class InvalidTransitionError(PortalError):
    """Raised when a status change is not in the transition table."""
    status_code = 409
    default_message = "Invalid status transition"


class VerificationRequiredError(PortalError):
    """Organization must be verified before it can publish jobs."""
    status_code = 403
    default_message = (
        "Your organization must be verified before it can post jobs. "
        "Complete the organization profile and upload the legal documents."
    )


class DependencyError(PortalError):
    """Entity store or object storage failure. Detail is logged, not shown."""
    status_code = 503
    default_message = "Service temporarily unavailable. Please try again."


class IdentityUnavailableError(Exception):
    """The session/profile lookup itself failed (misconfiguration, outage)."""
    pass
