"""Database models"""
from samit.models.user import User, UserRole
from samit.models.profile import Profile
from samit.models.organization import Organization, VerificationStatus
from samit.models.job import Job
from samit.models.application import Application, ApplicationStatus
from samit.models.resume import Resume
from samit.models.language_class import (
    LanguageClass,
    ClassEnrollment,
    ClassType,
    ClassStatus,
    EnrollmentStatus,
)
from samit.models.activity_log import ActivityLog

__all__ = [
    "User",
    "UserRole",
    "Profile",
    "Organization",
    "VerificationStatus",
    "Job",
    "Application",
    "ApplicationStatus",
    "Resume",
    "LanguageClass",
    "ClassEnrollment",
    "ClassType",
    "ClassStatus",
    "EnrollmentStatus",
    "ActivityLog",
]
