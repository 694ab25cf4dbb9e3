"""
Tests for the CV library and the single-default rule.
"""
import io
from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import Headers, UploadFile

from samit.errors import DependencyError, NotFoundError
from samit.models.profile import Profile
from samit.models.resume import Resume
from samit.models.user import UserRole
from samit.services import resumes as resume_service
from samit.services.storage import StorageError

from conftest import PDF_BYTES, create_actor, login


async def _upload(client: AsyncClient, name: str = "cv.pdf") -> dict:
    response = await client.post(
        "/dashboard/cv", files={"file": (name, PDF_BYTES, "application/pdf")}
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _defaults(db: AsyncSession, user_id) -> list[Resume]:
    db.expire_all()
    result = await db.execute(
        select(Resume).where(Resume.user_id == user_id, Resume.is_default.is_(True))
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_first_upload_is_default(async_client: AsyncClient, db: AsyncSession, job_seeker):
    login(async_client, job_seeker)
    
    first = await _upload(async_client, "first.pdf")
    second = await _upload(async_client, "second.pdf")
    
    assert first["is_default"] is True
    assert second["is_default"] is False
    profile = await db.get(Profile, job_seeker.user_id)
    await db.refresh(profile)
    assert str(profile.default_cv_id) == first["id"]


@pytest.mark.asyncio
async def test_exactly_one_default_after_every_swap(async_client: AsyncClient, db: AsyncSession, job_seeker):
    login(async_client, job_seeker)
    ids = [(await _upload(async_client, f"cv{i}.pdf"))["id"] for i in range(3)]
    
    for resume_id in [ids[1], ids[2], ids[0], ids[2], ids[2]]:
        response = await async_client.post(f"/dashboard/cv/{resume_id}/default")
        assert response.status_code == 200
        
        defaults = await _defaults(db, job_seeker.user_id)
        assert [str(r.id) for r in defaults] == [resume_id]
        profile = await db.get(Profile, job_seeker.user_id)
        assert str(profile.default_cv_id) == resume_id


@pytest.mark.asyncio
async def test_store_refuses_a_second_default(db: AsyncSession, job_seeker):
    for name in ("a.pdf", "b.pdf"):
        db.add(Resume(
            user_id=job_seeker.user_id,
            title=name,
            file_url=f"http://test/{name}",
            storage_path=name,
            file_size=1,
            is_default=True,
        ))
    
    with pytest.raises(IntegrityError):
        await db.commit()
    await db.rollback()


@pytest.mark.asyncio
async def test_failed_swap_is_an_error_and_rolls_back(db: AsyncSession, job_seeker, monkeypatch):
    original = Resume(
        user_id=job_seeker.user_id, title="a.pdf", file_url="http://test/a.pdf",
        storage_path="a.pdf", file_size=1, is_default=True,
    )
    target = Resume(
        user_id=job_seeker.user_id, title="b.pdf", file_url="http://test/b.pdf",
        storage_path="b.pdf", file_size=1, is_default=False,
    )
    db.add_all([original, target])
    await db.commit()
    
    real_execute = db.execute
    calls = {"n": 0}
    
    async def flaky_execute(statement, *args, **kwargs):
        calls["n"] += 1
        result = await real_execute(statement, *args, **kwargs)
        if calls["n"] == 2:  # the update that sets the new default
            raise RuntimeError("connection dropped")
        return result
    
    monkeypatch.setattr(db, "execute", flaky_execute)
    
    with pytest.raises(DependencyError):
        await resume_service.set_default_resume(db, job_seeker, target.id)
    
    monkeypatch.undo()
    defaults = await _defaults(db, job_seeker.user_id)
    assert [r.id for r in defaults] == [original.id], "The old default survives a failed swap"


@pytest.mark.asyncio
async def test_cannot_touch_someone_elses_cv(async_client: AsyncClient, db: AsyncSession, job_seeker):
    other = await create_actor(db, UserRole.USER)
    login(async_client, other)
    other_cv = await _upload(async_client)
    
    login(async_client, job_seeker)
    assert (await async_client.post(f"/dashboard/cv/{other_cv['id']}/default")).status_code == 404
    assert (await async_client.delete(f"/dashboard/cv/{other_cv['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_default_clears_profile_and_blob(async_client: AsyncClient, db: AsyncSession, job_seeker, storage):
    login(async_client, job_seeker)
    cv = await _upload(async_client)
    resume = await db.get(Resume, UUID(cv["id"]))
    blob = storage.root / "resumes" / resume.storage_path
    assert blob.exists()
    
    response = await async_client.delete(f"/dashboard/cv/{cv['id']}")
    
    assert response.status_code == 204
    assert not blob.exists()
    profile = await db.get(Profile, job_seeker.user_id)
    await db.refresh(profile)
    assert profile.default_cv_id is None


@pytest.mark.asyncio
async def test_delete_survives_storage_failure(db: AsyncSession, job_seeker, storage, monkeypatch, caplog):
    resume = Resume(
        user_id=job_seeker.user_id, title="a.pdf", file_url="http://test/a.pdf",
        storage_path=f"{job_seeker.user_id}/a.pdf", file_size=1, is_default=False,
    )
    db.add(resume)
    await db.commit()
    
    async def broken_delete(bucket, path):
        raise StorageError("bucket offline")
    
    monkeypatch.setattr(storage, "delete", broken_delete)
    
    await resume_service.delete_resume(db, storage, job_seeker, resume.id)
    
    assert await db.get(Resume, resume.id) is None
    assert "Failed to delete resume file" in caplog.text


@pytest.mark.asyncio
async def test_oversized_cv_is_rejected(async_client: AsyncClient, job_seeker):
    login(async_client, job_seeker)
    
    response = await async_client.post(
        "/dashboard/cv",
        files={"file": ("big.pdf", b"0" * (5 * 1024 * 1024 + 1), "application/pdf")}
    )
    
    assert response.status_code == 400
    assert "5MB" in response.json()["detail"]


@pytest.mark.asyncio
async def test_missing_cv_is_not_found(db: AsyncSession, job_seeker):
    with pytest.raises(NotFoundError):
        await resume_service.get_own_resume(db, job_seeker, job_seeker.user_id)


@pytest.mark.asyncio
async def test_failed_save_removes_uploaded_file(db: AsyncSession, job_seeker, storage, monkeypatch):
    async def broken_commit():
        raise RuntimeError("database gone")
    
    monkeypatch.setattr(db, "commit", broken_commit)
    cv_file = UploadFile(
        io.BytesIO(PDF_BYTES),
        filename="cv.pdf",
        headers=Headers({"content-type": "application/pdf"}),
    )
    
    with pytest.raises(DependencyError):
        await resume_service.upload_resume(db, storage, job_seeker, cv_file)
    
    assert [p for p in (storage.root / "resumes").rglob("*") if p.is_file()] == []
