"""Organization profile, legal documents and the explicit get-or-create operations."""
import logging
from datetime import datetime
from typing import Optional

from fastapi import UploadFile
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from samit.config import settings
from samit.errors import (
    AuthorizationError,
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
)
from samit.models.job import Job
from samit.models.organization import Organization, VerificationStatus
from samit.services.access_policy import DASHBOARD_PATH
from samit.services.identity import Actor
from samit.services.slugs import slugify, validate_slug
from samit.services.storage import (
    LEGAL_DOCUMENTS_BUCKET,
    ObjectStorage,
    StorageError,
    build_object_path,
)
from samit.services.uploads import LEGAL_DOCUMENT_RULES, read_upload

logger = logging.getLogger(__name__)

ORG_PROFILE_PATH = "/dashboard/org"

# doc type -> (label, required for verification)
LEGAL_DOCUMENT_TYPES = {
    "siup": ("Surat Izin Usaha Perdagangan", True),
    "nib": ("Nomor Induk Berusaha", True),
    "npwp": ("Nomor Pokok Wajib Pajak", True),
    "akta": ("Akta Pendirian atau Perubahan", False),
    "domisili": ("Surat Keterangan Domisili Usaha", False),
}

EDITABLE_FIELDS = {"slug", "display_name", "description", "website", "city", "employee_count"}


async def get_owner_organization(db: AsyncSession, actor: Actor) -> Optional[Organization]:
    result = await db.execute(
        select(Organization).where(Organization.owner_id == actor.user_id)
    )
    return result.scalar_one_or_none()


async def require_owner_organization(db: AsyncSession, actor: Actor) -> Organization:
    """Actor's organization; sends them to the org profile page if there is none yet."""
    organization = await get_owner_organization(db, actor)
    if organization is None:
        raise AuthorizationError(ORG_PROFILE_PATH)
    return organization


async def _create_organization(db: AsyncSession, organization: Organization, actor: Actor) -> Organization:
    db.add(organization)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request created it first
        await db.rollback()
        existing = await get_owner_organization(db, actor)
        if existing is None:
            raise ConflictError("Organization slug is already taken")
        return existing
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating organization: {str(e)}", exc_info=True)
        raise DependencyError()
    await db.refresh(organization)
    return organization


async def get_or_create_owner_organization(db: AsyncSession, actor: Actor) -> Optional[Organization]:
    """
    The lembaga's organization, created as ``pending`` on first call.
    
    Admins get their existing organization or None; theirs is created by
    ensure_admin_organization instead.
    """
    organization = await get_owner_organization(db, actor)
    if organization is not None or not actor.is_organization:
        return organization
    
    organization = Organization(
        owner_id=actor.user_id,
        slug=f"org-{actor.user_id.hex[:8]}",
        display_name=actor.full_name or "My Organization",
        verification_status=VerificationStatus.PENDING.value,
        legal_documents={},
    )
    organization = await _create_organization(db, organization, actor)
    logger.info(f"Created pending organization {organization.slug} for {actor.email}")
    return organization


async def ensure_admin_organization(db: AsyncSession, actor: Actor) -> Organization:
    """
    Idempotently provision the verified admin-owned organization that
    admin-posted jobs belong to.
    """
    if not actor.is_admin:
        raise AuthorizationError(DASHBOARD_PATH)
    
    organization = await get_owner_organization(db, actor)
    if organization is not None:
        return organization
    
    slug = slugify(settings.admin_org_name) or "official"
    taken = await db.execute(select(Organization.id).where(Organization.slug == slug))
    if taken.scalar_one_or_none() is not None:
        slug = f"{slug}-{actor.user_id.hex[:8]}"
    
    now = datetime.utcnow()
    organization = Organization(
        owner_id=actor.user_id,
        slug=slug,
        display_name=settings.admin_org_name,
        verification_status=VerificationStatus.VERIFIED.value,
        verified_at=now,
        legal_documents={},
    )
    organization = await _create_organization(db, organization, actor)
    logger.info(f"Provisioned admin organization {organization.slug} for {actor.email}")
    return organization


async def update_organization(db: AsyncSession, actor: Actor, update_data: dict) -> Organization:
    """Update the actor's organization profile. Verification fields are not editable here."""
    if "slug" in update_data:
        validate_slug(update_data["slug"])
    
    organization = await require_owner_organization(db, actor)
    
    for field, value in update_data.items():
        if field not in EDITABLE_FIELDS:
            continue
        if field == "website" and value is not None:
            value = str(value)
        setattr(organization, field, value)
    organization.updated_at = datetime.utcnow()
    
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Organization slug is already taken")
    except Exception as e:
        await db.rollback()
        logger.error(f"Error updating organization: {str(e)}", exc_info=True)
        raise DependencyError()
    
    await db.refresh(organization)
    return organization


def legal_document_summary(organization: Organization) -> dict:
    documents = organization.legal_documents or {}
    missing = [
        doc_type for doc_type, (_, required) in LEGAL_DOCUMENT_TYPES.items()
        if required and doc_type not in documents
    ]
    return {
        "organization_id": organization.id,
        "verification_status": organization.verification_status,
        "verification_notes": organization.verification_notes,
        "documents": documents,
        "missing_required": missing,
        "document_types": {
            doc_type: {"label": label, "required": required}
            for doc_type, (label, required) in LEGAL_DOCUMENT_TYPES.items()
        },
    }


async def upload_legal_document(
    db: AsyncSession,
    storage: ObjectStorage,
    actor: Actor,
    doc_type: str,
    file: UploadFile,
) -> Organization:
    """
    Store one legal document and record it on the organization.
    
    Raises:
        ValidationError: unknown document type, bad file type or size
        DependencyError: storage or store failure
    """
    if doc_type not in LEGAL_DOCUMENT_TYPES:
        raise ValidationError(f"Unknown document type {doc_type}")
    data = await read_upload(file, LEGAL_DOCUMENT_RULES)
    
    organization = await require_owner_organization(db, actor)
    
    path = build_object_path(organization.id, file.filename, prefix=f"{doc_type}_")
    try:
        url = await storage.upload(LEGAL_DOCUMENTS_BUCKET, path, data)
    except StorageError as e:
        logger.error(f"Legal document upload failed: {str(e)}", exc_info=True)
        raise DependencyError()
    
    documents = dict(organization.legal_documents or {})
    documents[doc_type] = {
        "url": url,
        "filename": file.filename,
        "uploaded_at": datetime.utcnow().isoformat(),
    }
    organization.legal_documents = documents
    # Flag the field as modified so SQLAlchemy detects the change
    flag_modified(organization, "legal_documents")
    organization.updated_at = datetime.utcnow()
    
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Error saving legal document: {str(e)}", exc_info=True)
        raise DependencyError()
    
    await db.refresh(organization)
    logger.info(f"Legal document {doc_type} uploaded for organization {organization.slug}")
    return organization


async def list_public_organizations(db: AsyncSession, q: Optional[str] = None) -> list[dict]:
    """Verified organizations with their number of active jobs."""
    active_jobs = (
        select(Job.org_id, func.count(Job.id).label("active_jobs"))
        .where(Job.is_active.is_(True))
        .group_by(Job.org_id)
        .subquery()
    )
    query = (
        select(Organization, func.coalesce(active_jobs.c.active_jobs, 0))
        .outerjoin(active_jobs, active_jobs.c.org_id == Organization.id)
        .where(Organization.verification_status == VerificationStatus.VERIFIED.value)
        .order_by(Organization.display_name)
    )
    if q:
        query = query.where(Organization.display_name.ilike(f"%{q}%"))
    result = await db.execute(query)
    return [
        {"organization": organization, "active_jobs": count}
        for organization, count in result.all()
    ]


async def get_public_organization(db: AsyncSession, slug: str) -> Organization:
    result = await db.execute(
        select(Organization).where(
            Organization.slug == slug,
            Organization.verification_status == VerificationStatus.VERIFIED.value,
        )
    )
    organization = result.scalar_one_or_none()
    if organization is None:
        raise NotFoundError()
    return organization
