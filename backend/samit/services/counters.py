"""
Atomic counter increments.

Each helper issues a single ``UPDATE ... SET n = n + 1 ... RETURNING n`` so
concurrent requests never lose an increment. They do not commit; the
caller's transaction decides.
"""
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from samit.errors import NotFoundError
from samit.models.job import Job
from samit.models.language_class import LanguageClass


async def _increment(db: AsyncSession, column, row_id: UUID) -> int:
    model = column.class_
    result = await db.execute(
        update(model)
        .where(model.id == row_id)
        .values({column: column + 1})
        .returning(column)
        .execution_options(synchronize_session=False)
    )
    value = result.scalar_one_or_none()
    if value is None:
        raise NotFoundError()
    return value


async def increment_applications_count(db: AsyncSession, job_id: UUID) -> int:
    return await _increment(db, Job.applications_count, job_id)


async def increment_views_count(db: AsyncSession, job_id: UUID) -> int:
    return await _increment(db, Job.views_count, job_id)


async def increment_enrolled_count(db: AsyncSession, class_id: UUID) -> int:
    return await _increment(db, LanguageClass.enrolled_count, class_id)
