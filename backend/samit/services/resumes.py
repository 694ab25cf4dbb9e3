"""
Resume (CV) management.

At most one resume per user has ``is_default``, and the profile's ``default_cv_id`` points at it.
"""
import logging
from datetime import datetime
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from samit.errors import DependencyError, NotFoundError
from samit.models.profile import Profile
from samit.models.resume import Resume
from samit.services.identity import Actor
from samit.services.storage import RESUMES_BUCKET, ObjectStorage, StorageError, build_object_path
from samit.services.uploads import RESUME_RULES, read_upload

logger = logging.getLogger(__name__)


async def list_resumes(db: AsyncSession, actor: Actor) -> list[Resume]:
    result = await db.execute(
        select(Resume)
        .where(Resume.user_id == actor.user_id)
        .order_by(Resume.uploaded_at.desc())
    )
    return list(result.scalars().all())


async def get_own_resume(db: AsyncSession, actor: Actor, resume_id: UUID) -> Resume:
    resume = await db.get(Resume, resume_id)
    if resume is None or resume.user_id != actor.user_id:
        raise NotFoundError()
    return resume


async def discard_stored_file(storage: ObjectStorage, path: str) -> None:
    """Best-effort removal of an uploaded file whose Resume row was never committed."""
    try:
        await storage.delete(RESUMES_BUCKET, path)
    except StorageError as e:
        logger.warning(f"Failed to remove orphaned resume file {path}: {str(e)}")


async def store_resume(
    db: AsyncSession,
    storage: ObjectStorage,
    actor: Actor,
    filename: str,
    data: bytes,
) -> Resume:
    """
    Upload already validated bytes and stage a Resume row without committing.
    
    The upload happens first; if it fails nothing is added to the session.
    The first resume a user uploads becomes their default.
    
    Raises:
        DependencyError: object storage failure
    """
    path = build_object_path(actor.user_id, filename)
    try:
        url = await storage.upload(RESUMES_BUCKET, path, data)
    except StorageError as e:
        logger.error(f"Resume upload failed for {actor.email}: {str(e)}", exc_info=True)
        raise DependencyError("Failed to upload CV. Please try again.")
    
    try:
        existing = await db.scalar(
            select(Resume.id).where(Resume.user_id == actor.user_id).limit(1)
        )
        resume = Resume(
            user_id=actor.user_id,
            title=filename,
            file_url=url,
            storage_path=path,
            file_size=len(data),
            is_default=existing is None,
            uploaded_at=datetime.utcnow(),
        )
        db.add(resume)
        await db.flush()
        
        if resume.is_default:
            await db.execute(
                update(Profile).where(Profile.id == actor.user_id).values(default_cv_id=resume.id)
            )
    except Exception as e:
        await db.rollback()
        logger.error(f"Error staging resume: {str(e)}", exc_info=True)
        await discard_stored_file(storage, path)
        raise DependencyError()
    return resume


async def upload_resume(
    db: AsyncSession,
    storage: ObjectStorage,
    actor: Actor,
    file: UploadFile,
) -> Resume:
    """
    Validate and store a CV for the actor.
    
    Raises:
        ValidationError: wrong type, empty or too large
        DependencyError: storage or store failure
    """
    data = await read_upload(file, RESUME_RULES)
    resume = await store_resume(db, storage, actor, file.filename, data)
    path = resume.storage_path
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Error saving resume: {str(e)}", exc_info=True)
        await discard_stored_file(storage, path)
        raise DependencyError()

    await db.refresh(resume)
    logger.info(f"Resume uploaded for {actor.email}: {resume.title}")
    return resume


async def set_default_resume(db: AsyncSession, actor: Actor, resume_id: UUID) -> Resume:
    """
    Make ``resume_id`` the caller's only default resume.
    
    Clear-all, set-target and the profile mirror commit as one transaction;
    if the target is not updated nothing is committed and the caller gets an
    error instead of a silently lost default.
    """
    resume = await get_own_resume(db, actor, resume_id)
    
    try:
        await db.execute(
            update(Resume)
            .where(Resume.user_id == actor.user_id, Resume.is_default.is_(True))
            .values(is_default=False)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(
            update(Resume)
            .where(Resume.id == resume.id, Resume.user_id == actor.user_id)
            .values(is_default=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise RuntimeError(f"Default flag not applied to resume {resume.id}")
        await db.execute(
            update(Profile)
            .where(Profile.id == actor.user_id)
            .values(default_cv_id=resume.id, updated_at=datetime.utcnow())
        )
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Error setting default resume: {str(e)}", exc_info=True)
        raise DependencyError("Failed to change the default CV. Please try again.")
    
    await db.refresh(resume)
    logger.info(f"Default resume for {actor.email} set to {resume.id}")
    return resume


async def delete_resume(
    db: AsyncSession,
    storage: ObjectStorage,
    actor: Actor,
    resume_id: UUID,
) -> None:
    """
    Delete the row, then the blob.
    
    Blob removal is best effort: a storage failure is logged and may leave an
    orphaned file, but never brings the row back.
    """
    resume = await get_own_resume(db, actor, resume_id)
    storage_path = resume.storage_path
    
    try:
        await db.execute(
            update(Profile)
            .where(Profile.id == actor.user_id, Profile.default_cv_id == resume.id)
            .values(default_cv_id=None)
        )
        await db.delete(resume)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Error deleting resume: {str(e)}", exc_info=True)
        raise DependencyError()
    
    try:
        await storage.delete(RESUMES_BUCKET, storage_path)
    except StorageError as e:
        logger.warning(f"Failed to delete resume file {storage_path}: {str(e)}")
    
    logger.info(f"Resume {resume_id} deleted for {actor.email}")
