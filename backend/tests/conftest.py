"""
Pytest fixtures for testing.
"""
import os

# Settings are read at import time; give them test values first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SITE_URL", "http://test")

from datetime import date, datetime, timedelta
from typing import AsyncGenerator, Optional
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Import database module BEFORE app to allow override
import samit.database
from samit.database import Base
# Import ALL models so Base.metadata knows about all tables
from samit.models import (
    Job,
    LanguageClass,
    Organization,
    Profile,
    User,
    UserRole,
    VerificationStatus,
)
from samit.services.identity import Actor, sign_session
from samit.services.storage import ObjectStorage, get_storage

# Now import app (after we can override database)
from samit.main import app as fastapi_app


# Test database URL (use in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n%%EOF\n"


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database for each test.
    Ensures cleanup happens even if test fails.
    """
    # StaticPool keeps one connection so every session sees the same in-memory database
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    # Replace the app's engine and sessionmaker
    original_engine = samit.database.engine
    original_sessionmaker = samit.database.AsyncSessionLocal
    
    samit.database.engine = test_engine
    samit.database.AsyncSessionLocal = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    
    session = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)()
    
    try:
        yield session
    finally:
        try:
            await session.close()
        except Exception as e:
            print(f"Warning: Failed to close session: {e}")
        
        try:
            await test_engine.dispose()
        except Exception as e:
            print(f"Warning: Failed to dispose engine: {e}")
        
        samit.database.engine = original_engine
        samit.database.AsyncSessionLocal = original_sessionmaker


@pytest.fixture
def storage(tmp_path) -> ObjectStorage:
    """Object storage rooted in a temp dir, also used by the app."""
    test_storage = ObjectStorage(tmp_path / "storage", "http://test")
    fastapi_app.dependency_overrides[get_storage] = lambda: test_storage
    yield test_storage
    fastapi_app.dependency_overrides.pop(get_storage, None)


@pytest_asyncio.fixture
async def async_client(db: AsyncSession, storage: ObjectStorage) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for testing endpoints.
    
    Redirects are not followed so tests can assert on 303 + Location.
    """
    transport = ASGITransport(app=fastapi_app)
    
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        follow_redirects=False
    ) as client:
        yield client


async def create_actor(
    db: AsyncSession,
    role: UserRole,
    email: Optional[str] = None,
    full_name: str = "Test Person",
) -> Actor:
    """Identity record + profile for ``role``, returned as the Actor services expect."""
    user = User(id=uuid4(), email=email or f"{role.value}-{uuid4().hex[:8]}@example.com")
    db.add(user)
    db.add(Profile(id=user.id, role=role, full_name=full_name, socials={}))
    await db.commit()
    return Actor(user_id=user.id, email=user.email, role=role, full_name=full_name)


def login(client: AsyncClient, actor: Actor) -> AsyncClient:
    """Put a signed session cookie for ``actor`` on the client."""
    client.cookies.set("auth_token", sign_session(actor.user_id))
    return client


@pytest_asyncio.fixture
async def job_seeker(db: AsyncSession) -> Actor:
    return await create_actor(db, UserRole.USER, email="seeker@example.com", full_name="Siti Seeker")


@pytest_asyncio.fixture
async def lembaga(db: AsyncSession) -> Actor:
    return await create_actor(db, UserRole.LEMBAGA, email="hr@lpk.example.com", full_name="LPK Maju")


@pytest_asyncio.fixture
async def admin(db: AsyncSession) -> Actor:
    return await create_actor(db, UserRole.ADMIN, email="admin@samit.example.com", full_name="Admin")


async def create_organization(
    db: AsyncSession,
    owner: Actor,
    status: VerificationStatus = VerificationStatus.VERIFIED,
    slug: Optional[str] = None,
) -> Organization:
    organization = Organization(
        owner_id=owner.user_id,
        slug=slug or f"org-{owner.user_id.hex[:8]}",
        display_name=owner.full_name or "Org",
        verification_status=status.value,
        verified_at=datetime.utcnow() if status == VerificationStatus.VERIFIED else None,
        legal_documents={},
    )
    db.add(organization)
    await db.commit()
    await db.refresh(organization)
    return organization


async def create_job(
    db: AsyncSession,
    organization: Organization,
    slug: str = "caregiver-osaka",
    is_active: bool = True,
) -> Job:
    job = Job(
        org_id=organization.id,
        slug=slug,
        title="Caregiver in Osaka",
        description="Elderly care work in Osaka.",
        category="luar-negeri",
        employment_type="fulltime",
        jlpt_required="N4",
        tags=["kaigo"],
        is_active=is_active,
        published_at=datetime.utcnow(),
        applications_count=0,
        views_count=0,
    )
    db.add(job)
    await db.commit()
    await db.refresh(job)
    return job


async def create_class(
    db: AsyncSession,
    slug: str = "kaiwa-basic",
    max_students: Optional[int] = 20,
    enrolled_count: int = 0,
    start_in_days: int = 7,
    length_days: int = 60,
    is_online: bool = True,
) -> LanguageClass:
    start = date.today() + timedelta(days=start_in_days)
    language_class = LanguageClass(
        slug=slug,
        title="Kaiwa Basic",
        class_type="kaiwa",
        start_date=start,
        end_date=start + timedelta(days=length_days),
        is_online=is_online,
        meeting_link="https://meet.example.com/kaiwa" if is_online else None,
        max_students=max_students,
        enrolled_count=enrolled_count,
        is_active=True,
    )
    db.add(language_class)
    await db.commit()
    await db.refresh(language_class)
    return language_class


@pytest_asyncio.fixture
async def verified_org(db: AsyncSession, lembaga: Actor) -> Organization:
    return await create_organization(db, lembaga, VerificationStatus.VERIFIED)


@pytest_asyncio.fixture
async def open_job(db: AsyncSession, verified_org: Organization) -> Job:
    return await create_job(db, verified_org)
