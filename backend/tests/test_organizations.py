"""
Tests for the organization dashboard.

Validates:
- First visit creates a pending organization, later visits reuse it
- Profile updates validate and deduplicate slugs
- Legal documents are type-checked, stored and summarized
- The admin organization is provisioned once
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from samit.models.organization import Organization, VerificationStatus
from samit.models.user import UserRole
from samit.services import organizations as organization_service

from conftest import PDF_BYTES, create_actor, create_organization, login


@pytest.mark.asyncio
async def test_first_visit_creates_pending_organization(async_client: AsyncClient, db: AsyncSession, lembaga):
    login(async_client, lembaga)
    
    first = (await async_client.get("/dashboard/org")).json()["organization"]
    second = (await async_client.get("/dashboard/org")).json()["organization"]
    
    assert first["verification_status"] == "pending"
    assert first["owner_id"] == str(lembaga.user_id)
    assert first["display_name"] == "LPK Maju"
    assert second["id"] == first["id"]
    assert len((await db.execute(select(Organization))).scalars().all()) == 1


@pytest.mark.asyncio
async def test_admin_without_organization_gets_none(async_client: AsyncClient, db: AsyncSession, admin):
    login(async_client, admin)
    
    response = await async_client.get("/dashboard/org")
    
    assert response.status_code == 200
    assert response.json()["organization"] is None


@pytest.mark.asyncio
async def test_job_seeker_cannot_open_org_dashboard(async_client: AsyncClient, db: AsyncSession, job_seeker):
    login(async_client, job_seeker)
    
    response = await async_client.get("/dashboard/org")
    
    assert response.status_code == 303
    assert (await db.execute(select(Organization))).scalars().all() == []


@pytest.mark.asyncio
async def test_update_profile(async_client: AsyncClient, db: AsyncSession, lembaga):
    login(async_client, lembaga)
    await async_client.get("/dashboard/org")
    
    response = await async_client.put("/dashboard/org", json={
        "slug": "lpk-maju",
        "city": "Bandung",
        "website": "https://lpk-maju.example.com",
        "verification_status": "verified",
    })
    
    assert response.status_code == 200
    data = response.json()
    assert data["slug"] == "lpk-maju"
    assert data["city"] == "Bandung"
    assert data["website"].startswith("https://lpk-maju.example.com")
    # Verification only changes through the admin decision
    assert data["verification_status"] == "pending"


@pytest.mark.asyncio
async def test_update_rejects_bad_and_taken_slugs(async_client: AsyncClient, db: AsyncSession, lembaga):
    other = await create_actor(db, UserRole.LEMBAGA)
    await create_organization(db, other, VerificationStatus.VERIFIED, slug="taken-slug")
    login(async_client, lembaga)
    await async_client.get("/dashboard/org")
    
    bad = await async_client.put("/dashboard/org", json={"slug": "Bad Slug!"})
    taken = await async_client.put("/dashboard/org", json={"slug": "taken-slug"})
    
    assert bad.status_code == 400
    assert taken.status_code == 409


@pytest.mark.asyncio
async def test_update_before_organization_exists_redirects(async_client: AsyncClient, lembaga):
    login(async_client, lembaga)
    
    response = await async_client.put("/dashboard/org", json={"city": "Bandung"})
    
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard/org"


@pytest.mark.asyncio
async def test_legal_document_upload(async_client: AsyncClient, db: AsyncSession, storage, lembaga):
    login(async_client, lembaga)
    await async_client.get("/dashboard/org")
    
    before = (await async_client.get("/dashboard/legal")).json()
    assert set(before["missing_required"]) == {"siup", "nib", "npwp"}
    
    response = await async_client.post(
        "/dashboard/legal/npwp",
        files={"file": ("npwp scan.pdf", PDF_BYTES, "application/pdf")},
    )
    
    assert response.status_code == 200
    data = response.json()
    assert set(data["missing_required"]) == {"siup", "nib"}
    document = data["documents"]["npwp"]
    assert document["filename"] == "npwp scan.pdf"
    assert document["url"].startswith("http://test/storage/legal-documents/")
    assert "npwp_" in document["url"]
    assert data["document_types"]["akta"]["required"] is False
    
    stored = list((storage.root / "legal-documents").rglob("*.pdf"))
    assert len(stored) == 1
    assert stored[0].read_bytes() == PDF_BYTES


@pytest.mark.asyncio
async def test_legal_document_rejects_unknown_type_and_bad_file(async_client: AsyncClient, storage, lembaga):
    login(async_client, lembaga)
    await async_client.get("/dashboard/org")
    
    unknown = await async_client.post(
        "/dashboard/legal/passport",
        files={"file": ("passport.pdf", PDF_BYTES, "application/pdf")},
    )
    wrong_type = await async_client.post(
        "/dashboard/legal/siup",
        files={"file": ("siup.exe", b"MZ", "application/octet-stream")},
    )
    
    assert unknown.status_code == 400
    assert wrong_type.status_code == 400
    assert not (storage.root / "legal-documents").exists()


@pytest.mark.asyncio
async def test_ensure_admin_organization_is_idempotent(async_client: AsyncClient, db: AsyncSession, admin):
    login(async_client, admin)
    
    first = (await async_client.post("/dashboard/admin/organization")).json()
    second = (await async_client.post("/dashboard/admin/organization")).json()
    
    assert first["id"] == second["id"]
    assert first["verification_status"] == "verified"
    assert len((await db.execute(select(Organization))).scalars().all()) == 1


@pytest.mark.asyncio
async def test_admin_organization_slug_avoids_collision(db: AsyncSession, admin, lembaga):
    await create_organization(db, lembaga, VerificationStatus.VERIFIED, slug="samit-official")
    
    organization = await organization_service.ensure_admin_organization(db, admin)
    
    assert organization.slug == f"samit-official-{admin.user_id.hex[:8]}"


@pytest.mark.asyncio
async def test_company_directory_search(async_client: AsyncClient, db: AsyncSession, verified_org):
    found = (await async_client.get("/companies", params={"q": "maju"})).json()
    missing = (await async_client.get("/companies", params={"q": "nothing"})).json()
    
    assert [entry["organization"]["id"] for entry in found] == [str(verified_org.id)]
    assert found[0]["active_jobs"] == 0
    assert missing == []
