"""
Organization verification state machine.
ALL verification status changes must go through this module.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from samit.errors import (
    AuthorizationError,
    DependencyError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from samit.models.activity_log import ActivityLog
from samit.models.organization import Organization, VerificationStatus
from samit.services.access_policy import DASHBOARD_PATH
from samit.services.identity import Actor

logger = logging.getLogger(__name__)


# Define allowed state transitions
ALLOWED_TRANSITIONS: Dict[VerificationStatus, list[VerificationStatus]] = {
    VerificationStatus.PENDING: [VerificationStatus.VERIFIED, VerificationStatus.REJECTED],
    VerificationStatus.REJECTED: [VerificationStatus.VERIFIED],  # Re-verify
    VerificationStatus.VERIFIED: [],  # Never moves back automatically
}


class VerificationDecision(str, Enum):
    VERIFY = "verify"
    REJECT = "reject"


DECISION_TARGETS: Dict[VerificationDecision, VerificationStatus] = {
    VerificationDecision.VERIFY: VerificationStatus.VERIFIED,
    VerificationDecision.REJECT: VerificationStatus.REJECTED,
}


@dataclass(frozen=True)
class VerificationCommand:
    """An admin's verify/reject decision on one organization."""
    organization_id: UUID
    decision: VerificationDecision
    notes: Optional[str] = None

    def cleaned_notes(self) -> Optional[str]:
        notes = (self.notes or "").strip()
        return notes or None

    def validate(self) -> None:
        """
        Raises:
            ValidationError: rejecting without a reason
        """
        if self.decision == VerificationDecision.REJECT and not self.cleaned_notes():
            raise ValidationError("A reason is required to reject an organization")


def can_transition(from_status: VerificationStatus, to_status: VerificationStatus) -> bool:
    """Check if a transition is allowed without touching the database"""
    return to_status in ALLOWED_TRANSITIONS.get(from_status, [])


async def decide(db: AsyncSession, actor: Actor, command: VerificationCommand) -> Organization:
    """
    Apply an admin verification decision.
    
    Status, notes, verified_at and the audit entry are committed together or
    not at all.
    
    Raises:
        AuthorizationError: actor is not an admin
        ValidationError: reject without notes (checked before any store access)
        NotFoundError: organization does not exist
        InvalidTransitionError: e.g. verified -> rejected
        DependencyError: the store rejected the write
    """
    if not actor.is_admin:
        logger.warning(f"{actor.email} (role={actor.role.value}) attempted an organization verification")
        raise AuthorizationError(DASHBOARD_PATH)
    
    command.validate()
    
    organization = await db.get(Organization, command.organization_id)
    if organization is None:
        raise NotFoundError()
    
    current = VerificationStatus(organization.verification_status)
    target = DECISION_TARGETS[command.decision]
    
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Invalid transition from {current.value} to {target.value}"
        )
    
    notes = command.cleaned_notes()
    organization.verification_status = target.value
    organization.verification_notes = notes
    organization.verified_at = datetime.utcnow() if target == VerificationStatus.VERIFIED else None
    organization.updated_at = datetime.utcnow()
    
    db.add(ActivityLog(
        actor_id=actor.user_id,
        action=f"organization_{command.decision.value}",
        target_type="organization",
        target_id=organization.id,
        meta={"notes": notes, "from_status": current.value},
    ))
    
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Error applying verification decision: {str(e)}", exc_info=True)
        raise DependencyError()
    
    logger.info(
        f"Organization verification: {current.value} → {target.value}",
        extra={
            "organization_id": str(organization.id),
            "admin_id": str(actor.user_id),
            "decision": command.decision.value,
        },
    )
    return organization
