"""
Tests for job posting and the public job board.

Validates:
- Unverified organizations cannot post; admins post under the admin organization
- Public listing shows a job iff it is active and its organization verified
- Job detail counts views atomically
- Slugs are generated, validated and unique
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from samit.config import settings
from samit.errors import ConflictError, ValidationError, VerificationRequiredError
from samit.models.job import Job
from samit.models.organization import Organization, VerificationStatus
from samit.models.user import UserRole
from samit.schemas.job import JobCreate
from samit.services import jobs as job_service

from conftest import create_actor, create_job, create_organization, login


JOB_PAYLOAD = {
    "title": "Welder for Nagoya Plant",
    "description": "Welding work at an automotive plant.",
    "category": "luar-negeri",
    "jlpt_required": "N3",
    "salary_min": 180000,
    "salary_max": 220000,
}


@pytest.mark.asyncio
async def test_pending_organization_cannot_post(async_client: AsyncClient, db: AsyncSession, lembaga):
    await create_organization(db, lembaga, VerificationStatus.PENDING)
    login(async_client, lembaga)
    
    response = await async_client.post("/dashboard/jobs/new", json=JOB_PAYLOAD)
    
    assert response.status_code == 403
    assert "verified" in response.json()["detail"]
    assert (await db.execute(select(Job))).scalars().all() == []
    
    form = (await async_client.get("/dashboard/jobs/new")).json()
    assert form["can_post"] is False


@pytest.mark.asyncio
async def test_lembaga_without_organization_cannot_post(db: AsyncSession, lembaga):
    with pytest.raises(VerificationRequiredError):
        await job_service.create_job(db, lembaga, JobCreate(**JOB_PAYLOAD))


@pytest.mark.asyncio
async def test_verified_organization_posts(async_client: AsyncClient, db: AsyncSession, lembaga, verified_org):
    login(async_client, lembaga)
    
    response = await async_client.post("/dashboard/jobs/new", json=JOB_PAYLOAD)
    
    assert response.status_code == 201
    data = response.json()
    assert data["org_id"] == str(verified_org.id)
    assert data["slug"].startswith("welder-for-nagoya-plant-")
    assert data["published_at"] is not None
    assert data["applications_count"] == 0
    
    mine = (await async_client.get("/dashboard/jobs")).json()
    assert [job["id"] for job in mine] == [data["id"]]


@pytest.mark.asyncio
async def test_admin_bypasses_verification(db: AsyncSession, admin):
    job = await job_service.create_job(db, admin, JobCreate(**JOB_PAYLOAD, slug="official-welder"))
    
    organization = await db.get(Organization, job.org_id)
    assert organization.owner_id == admin.user_id
    assert organization.display_name == settings.admin_org_name
    assert organization.verification_status == "verified"
    
    # Second job reuses the same organization
    again = await job_service.create_job(db, admin, JobCreate(**JOB_PAYLOAD, slug="official-welder-2"))
    assert again.org_id == job.org_id


@pytest.mark.asyncio
async def test_bad_slug_and_salary_are_rejected(db: AsyncSession, lembaga, verified_org):
    with pytest.raises(ValidationError):
        await job_service.create_job(db, lembaga, JobCreate(**JOB_PAYLOAD, slug="Not A Slug"))
    
    bad_range = dict(JOB_PAYLOAD, salary_min=300000, salary_max=100000)
    with pytest.raises(ValidationError):
        await job_service.create_job(db, lembaga, JobCreate(**bad_range))


@pytest.mark.asyncio
async def test_duplicate_slug_is_a_conflict(db: AsyncSession, lembaga, verified_org, open_job):
    with pytest.raises(ConflictError):
        await job_service.create_job(db, lembaga, JobCreate(**JOB_PAYLOAD, slug=open_job.slug))


@pytest.mark.asyncio
async def test_public_listing_requires_active_and_verified(async_client: AsyncClient, db: AsyncSession, lembaga, verified_org):
    visible = await create_job(db, verified_org, slug="visible")
    await create_job(db, verified_org, slug="inactive", is_active=False)
    
    pending_owner = await create_actor(db, UserRole.LEMBAGA)
    pending = await create_organization(db, pending_owner, VerificationStatus.PENDING)
    await create_job(db, pending, slug="pending-org-job")
    
    rejected_owner = await create_actor(db, UserRole.LEMBAGA)
    rejected = await create_organization(db, rejected_owner, VerificationStatus.REJECTED)
    await create_job(db, rejected, slug="rejected-org-job")
    
    data = (await async_client.get("/jobs")).json()
    
    assert [job["slug"] for job in data["jobs"]] == [visible.slug]
    assert data["total"] == 1
    for slug in ("inactive", "pending-org-job", "rejected-org-job"):
        assert (await async_client.get(f"/jobs/{slug}")).status_code == 404


@pytest.mark.asyncio
async def test_public_listing_filters(async_client: AsyncClient, db: AsyncSession, verified_org):
    await create_job(db, verified_org, slug="n4-job")
    
    assert (await async_client.get("/jobs", params={"jlpt": "N4"})).json()["total"] == 1
    assert (await async_client.get("/jobs", params={"jlpt": "N1"})).json()["total"] == 0
    assert (await async_client.get("/jobs", params={"q": "caregiver"})).json()["total"] == 1


@pytest.mark.asyncio
async def test_job_detail_counts_views(async_client: AsyncClient, db: AsyncSession, open_job):
    first = await async_client.get(f"/jobs/{open_job.slug}")
    second = await async_client.get(f"/jobs/{open_job.slug}")
    
    assert first.json()["views_count"] == 1
    assert second.json()["views_count"] == 2
    await db.refresh(open_job)
    assert open_job.views_count == 2


@pytest.mark.asyncio
async def test_owner_updates_job_and_others_cannot(async_client: AsyncClient, db: AsyncSession, lembaga, open_job):
    login(async_client, lembaga)
    response = await async_client.put(f"/dashboard/jobs/{open_job.id}", json={"is_active": False})
    assert response.status_code == 200
    assert response.json()["is_active"] is False
    
    other = await create_actor(db, UserRole.LEMBAGA)
    await create_organization(db, other, VerificationStatus.VERIFIED)
    login(async_client, other)
    response = await async_client.put(f"/dashboard/jobs/{open_job.id}", json={"title": "Hijacked"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_company_pages_show_verified_organizations_only(async_client: AsyncClient, db: AsyncSession, verified_org, open_job):
    pending_owner = await create_actor(db, UserRole.LEMBAGA)
    pending = await create_organization(db, pending_owner, VerificationStatus.PENDING, slug="pending-co")
    
    directory = (await async_client.get("/companies")).json()
    assert [entry["organization"]["slug"] for entry in directory] == [verified_org.slug]
    assert directory[0]["active_jobs"] == 1
    
    page = (await async_client.get(f"/companies/{verified_org.slug}")).json()
    assert [job["slug"] for job in page["jobs"]] == [open_job.slug]
    assert (await async_client.get(f"/companies/{pending.slug}")).status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["title", "description", "is_active", "show_salary", "salary_currency"])
async def test_update_cannot_clear_required_fields(async_client: AsyncClient, db: AsyncSession, lembaga, open_job, field):
    login(async_client, lembaga)
    
    response = await async_client.put(f"/dashboard/jobs/{open_job.id}", json={field: None})
    
    assert response.status_code == 400
    assert field in response.json()["detail"]
    await db.refresh(open_job)
    assert open_job.title == "Caregiver in Osaka"
    assert open_job.is_active is True


@pytest.mark.asyncio
async def test_update_to_taken_slug_is_a_conflict(async_client: AsyncClient, db: AsyncSession, lembaga, verified_org, open_job):
    await create_job(db, verified_org, slug="other-job")
    login(async_client, lembaga)
    
    response = await async_client.put(f"/dashboard/jobs/{open_job.id}", json={"slug": "other-job"})
    
    assert response.status_code == 409
    
    # A null slug keeps the current one
    response = await async_client.put(f"/dashboard/jobs/{open_job.id}", json={"slug": None, "title": "Caregiver"})
    assert response.status_code == 200
    assert response.json()["slug"] == open_job.slug
