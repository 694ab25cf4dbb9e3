"""
Language classes and the class enrollment state machine.
ALL enrollment status changes must go through this module.
"""
import logging
from datetime import date, datetime
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from samit.errors import (
    AuthorizationError,
    ConflictError,
    DependencyError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from samit.models.activity_log import ActivityLog
from samit.models.language_class import (
    ClassEnrollment,
    ClassStatus,
    EnrollmentStatus,
    LanguageClass,
)
from samit.models.user import UserRole
from samit.schemas.language_class import ClassCreate
from samit.services.access_policy import DASHBOARD_PATH
from samit.services.counters import increment_enrolled_count
from samit.services.identity import Actor
from samit.services.slugs import unique_slug, validate_slug

logger = logging.getLogger(__name__)


# Define allowed state transitions
ALLOWED_TRANSITIONS: Dict[EnrollmentStatus, list[EnrollmentStatus]] = {
    EnrollmentStatus.REGISTERED: [EnrollmentStatus.CONFIRMED, EnrollmentStatus.CANCELLED],
    EnrollmentStatus.CONFIRMED: [EnrollmentStatus.CANCELLED],
    EnrollmentStatus.CANCELLED: [],  # Terminal state
}


def can_transition(from_status: EnrollmentStatus, to_status: EnrollmentStatus) -> bool:
    """Check if a transition is allowed without modifying the database"""
    return to_status in ALLOWED_TRANSITIONS.get(from_status, [])


def class_view(language_class: LanguageClass, today: Optional[date] = None) -> dict:
    """Class fields plus the status derived from its dates."""
    return {
        column.name: getattr(language_class, column.name)
        for column in LanguageClass.__table__.columns
    } | {"status": language_class.status_on(today).value}


def enrollment_view(enrollment: ClassEnrollment, today: Optional[date] = None) -> dict:
    """Enrollment fields; the meeting link is only revealed once confirmed."""
    language_class = enrollment.language_class
    meeting_link = None
    if (
        enrollment.status == EnrollmentStatus.CONFIRMED.value
        and language_class is not None
        and language_class.is_online
    ):
        meeting_link = language_class.meeting_link
    return {
        "id": enrollment.id,
        "class_id": enrollment.class_id,
        "user_id": enrollment.user_id,
        "status": enrollment.status,
        "notes": enrollment.notes,
        "enrolled_at": enrollment.enrolled_at,
        "updated_at": enrollment.updated_at,
        "language_class": class_view(language_class, today) if language_class is not None else None,
        "meeting_link": meeting_link,
    }


async def list_public_classes(
    db: AsyncSession,
    class_type: Optional[str] = None,
    jlpt_level: Optional[str] = None,
) -> list[LanguageClass]:
    query = select(LanguageClass).where(LanguageClass.is_active.is_(True))
    if class_type:
        query = query.where(LanguageClass.class_type == class_type)
    if jlpt_level:
        query = query.where(LanguageClass.jlpt_level == jlpt_level)
    result = await db.execute(query.order_by(LanguageClass.start_date))
    return list(result.scalars().all())


async def find_public_class(db: AsyncSession, slug: str) -> LanguageClass:
    result = await db.execute(
        select(LanguageClass).where(LanguageClass.slug == slug, LanguageClass.is_active.is_(True))
    )
    language_class = result.scalar_one_or_none()
    if language_class is None:
        raise NotFoundError()
    return language_class


async def list_all_classes(db: AsyncSession) -> list[LanguageClass]:
    result = await db.execute(select(LanguageClass).order_by(LanguageClass.start_date.desc()))
    return list(result.scalars().all())


async def create_class(db: AsyncSession, actor: Actor, payload: ClassCreate) -> LanguageClass:
    if not actor.is_admin:
        raise AuthorizationError(DASHBOARD_PATH)
    data = payload.model_dump()
    slug = data.pop("slug") or unique_slug(payload.title)
    validate_slug(slug)
    data["class_type"] = payload.class_type.value
    
    language_class = LanguageClass(**data, slug=slug, enrolled_count=0)
    db.add(language_class)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("A class with this slug already exists")
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating class: {str(e)}", exc_info=True)
        raise DependencyError()
    await db.refresh(language_class)
    logger.info(f"Created class {language_class.slug}")
    return language_class


async def enroll(
    db: AsyncSession,
    actor: Actor,
    class_slug: str,
    notes: Optional[str] = None,
    today: Optional[date] = None,
) -> ClassEnrollment:
    """
    Register the caller for a class and count the seat.
    
    Raises:
        AuthorizationError: caller is not a job seeker
        NotFoundError: class missing or inactive
        ValidationError: class completed or full
        ConflictError: already enrolled
    """
    if actor.role != UserRole.USER:
        raise AuthorizationError(DASHBOARD_PATH)
    
    language_class = await find_public_class(db, class_slug)
    if language_class.status_on(today) == ClassStatus.COMPLETED:
        raise ValidationError("This class has already finished")
    if language_class.is_full():
        raise ValidationError("This class is full")
    
    existing = await db.execute(
        select(ClassEnrollment.id).where(
            ClassEnrollment.user_id == actor.user_id,
            ClassEnrollment.class_id == language_class.id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("You are already enrolled in this class")
    
    now = datetime.utcnow()
    enrollment = ClassEnrollment(
        user_id=actor.user_id,
        class_id=language_class.id,
        status=EnrollmentStatus.REGISTERED.value,
        notes=(notes or "").strip() or None,
        enrolled_at=now,
        updated_at=now,
    )
    db.add(enrollment)
    
    try:
        await db.flush()
        count = await increment_enrolled_count(db, language_class.id)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("You are already enrolled in this class")
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating enrollment: {str(e)}", exc_info=True)
        raise DependencyError()
    
    await db.refresh(enrollment)
    logger.info(
        f"Enrollment registered for class {language_class.slug}",
        extra={"enrollment_id": str(enrollment.id), "enrolled_count": count},
    )
    return enrollment


async def _transition(
    db: AsyncSession,
    actor: Actor,
    enrollment: ClassEnrollment,
    to_status: EnrollmentStatus,
    notes: Optional[str] = None,
) -> ClassEnrollment:
    current = EnrollmentStatus(enrollment.status)
    if not can_transition(current, to_status):
        raise InvalidTransitionError(
            f"Invalid transition from {current.value} to {to_status.value}"
        )
    
    enrollment.status = to_status.value
    if notes is not None:
        enrollment.notes = notes.strip() or None
    enrollment.updated_at = datetime.utcnow()
    
    if actor.is_admin:
        db.add(ActivityLog(
            actor_id=actor.user_id,
            action=f"enrollment_{to_status.value}",
            target_type="enrollment",
            target_id=enrollment.id,
            meta={"from_status": current.value},
        ))
    
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Error updating enrollment: {str(e)}", exc_info=True)
        raise DependencyError()
    
    await db.refresh(enrollment)
    logger.info(
        f"Enrollment state transition: {current.value} → {to_status.value}",
        extra={"enrollment_id": str(enrollment.id), "actor_id": str(actor.user_id)},
    )
    return enrollment


async def update_enrollment_status(
    db: AsyncSession,
    actor: Actor,
    enrollment_id: UUID,
    to_status: EnrollmentStatus,
    notes: Optional[str] = None,
) -> ClassEnrollment:
    """
    Admin moves an enrollment along the state machine.
    
    Raises:
        AuthorizationError: caller is not an admin
        NotFoundError: enrollment missing
        InvalidTransitionError: transition not in ALLOWED_TRANSITIONS
    """
    if not actor.is_admin:
        raise AuthorizationError(DASHBOARD_PATH)
    enrollment = await db.get(ClassEnrollment, enrollment_id)
    if enrollment is None:
        raise NotFoundError()
    return await _transition(db, actor, enrollment, to_status, notes)


async def cancel_enrollment(db: AsyncSession, actor: Actor, enrollment_id: UUID) -> ClassEnrollment:
    """Student cancels their own enrollment. Seats are not given back."""
    enrollment = await db.get(ClassEnrollment, enrollment_id)
    if enrollment is None or enrollment.user_id != actor.user_id:
        raise NotFoundError()
    return await _transition(db, actor, enrollment, EnrollmentStatus.CANCELLED)


async def list_my_enrollments(db: AsyncSession, actor: Actor) -> list[ClassEnrollment]:
    result = await db.execute(
        select(ClassEnrollment)
        .where(ClassEnrollment.user_id == actor.user_id)
        .order_by(ClassEnrollment.enrolled_at.desc())
    )
    return list(result.scalars().all())


async def list_class_enrollments(db: AsyncSession, class_id: UUID) -> list[ClassEnrollment]:
    """Admin view of everyone enrolled in one class."""
    if await db.get(LanguageClass, class_id) is None:
        raise NotFoundError()
    result = await db.execute(
        select(ClassEnrollment)
        .where(ClassEnrollment.class_id == class_id)
        .order_by(ClassEnrollment.enrolled_at)
    )
    return list(result.scalars().all())
