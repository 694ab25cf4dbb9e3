"""
Tests for the organization verification state machine.

Validates:
- Valid decisions (pending -> verified/rejected, rejected -> verified)
- Rejection needs a reason and touches nothing without one
- verified is never moved back
- Audit entry written in the same commit
- Only admins decide
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from samit.errors import AuthorizationError, InvalidTransitionError, ValidationError
from samit.models.activity_log import ActivityLog
from samit.models.organization import Organization, VerificationStatus
from samit.services.verification import (
    VerificationCommand,
    VerificationDecision,
    can_transition,
    decide,
)

from conftest import create_organization, login


@pytest_asyncio.fixture
async def pending_org(db: AsyncSession, lembaga) -> Organization:
    return await create_organization(db, lembaga, VerificationStatus.PENDING)


def test_transition_table():
    assert can_transition(VerificationStatus.PENDING, VerificationStatus.VERIFIED)
    assert can_transition(VerificationStatus.PENDING, VerificationStatus.REJECTED)
    assert can_transition(VerificationStatus.REJECTED, VerificationStatus.VERIFIED)
    assert not can_transition(VerificationStatus.VERIFIED, VerificationStatus.REJECTED)
    assert not can_transition(VerificationStatus.VERIFIED, VerificationStatus.PENDING)


@pytest.mark.parametrize("notes", [None, "", "   \n"])
def test_reject_command_needs_notes(notes):
    command = VerificationCommand(organization_id=None, decision=VerificationDecision.REJECT, notes=notes)
    with pytest.raises(ValidationError):
        command.validate()


@pytest.mark.asyncio
@pytest.mark.parametrize("notes", [None, "", "   "])
async def test_blank_rejection_changes_nothing(db: AsyncSession, admin, pending_org, notes):
    command = VerificationCommand(pending_org.id, VerificationDecision.REJECT, notes)
    
    with pytest.raises(ValidationError):
        await decide(db, admin, command)
    
    await db.refresh(pending_org)
    assert pending_org.verification_status == VerificationStatus.PENDING.value
    logs = await db.execute(select(ActivityLog))
    assert logs.scalars().all() == []


@pytest.mark.asyncio
async def test_reject_then_reverify(db: AsyncSession, admin, pending_org):
    """Reject with a reason, then verify again with no notes"""
    rejected = await decide(
        db, admin, VerificationCommand(pending_org.id, VerificationDecision.REJECT, "Missing NPWP")
    )
    assert rejected.verification_status == "rejected"
    assert rejected.verified_at is None
    assert rejected.verification_notes == "Missing NPWP"
    
    logs = (await db.execute(select(ActivityLog))).scalars().all()
    assert len(logs) == 1
    assert logs[0].action == "organization_reject"
    assert logs[0].target_type == "organization"
    assert logs[0].target_id == pending_org.id
    assert logs[0].meta["notes"] == "Missing NPWP"
    
    verified = await decide(
        db, admin, VerificationCommand(pending_org.id, VerificationDecision.VERIFY, "")
    )
    assert verified.verification_status == "verified"
    assert verified.verified_at is not None
    assert verified.verification_notes is None


@pytest.mark.asyncio
async def test_verified_cannot_be_rejected(db: AsyncSession, admin, verified_org):
    with pytest.raises(InvalidTransitionError):
        await decide(
            db, admin, VerificationCommand(verified_org.id, VerificationDecision.REJECT, "Changed my mind")
        )
    
    await db.refresh(verified_org)
    assert verified_org.verification_status == "verified"


@pytest.mark.asyncio
async def test_only_admins_decide(db: AsyncSession, lembaga, pending_org):
    with pytest.raises(AuthorizationError):
        await decide(db, lembaga, VerificationCommand(pending_org.id, VerificationDecision.VERIFY))


@pytest.mark.asyncio
async def test_verify_org_endpoint(async_client: AsyncClient, admin, pending_org):
    login(async_client, admin)
    
    response = await async_client.get("/dashboard/admin/verify-org", params={"status": "pending"})
    assert response.status_code == 200
    data = response.json()
    assert data["counts"]["pending"] == 1
    assert [org["id"] for org in data["organizations"]] == [str(pending_org.id)]
    
    response = await async_client.post(
        f"/dashboard/admin/verify-org/{pending_org.id}",
        json={"decision": "reject", "notes": "  "}
    )
    assert response.status_code == 400
    
    response = await async_client.post(
        f"/dashboard/admin/verify-org/{pending_org.id}",
        json={"decision": "verify"}
    )
    assert response.status_code == 200
    assert response.json()["verification_status"] == "verified"


@pytest.mark.asyncio
async def test_verify_missing_org_is_not_found(async_client: AsyncClient, admin, lembaga):
    login(async_client, admin)
    
    response = await async_client.post(
        f"/dashboard/admin/verify-org/{lembaga.user_id}",
        json={"decision": "verify"}
    )
    
    assert response.status_code == 404
    assert response.json() == {"detail": "Not found"}
