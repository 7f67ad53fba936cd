import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from models.courses import CourseEnrollment, CourseModule, CourseLesson, ModuleProgress, UserLessonProgress
from models.study_materials import StudyMaterial
from models.audit_mixin import now_ist
from schemas.courses import LessonProgressUpsert
from crud import study_materials as crud_materials

logger = logging.getLogger(__name__)


def get_my_learning(db: Session, user_id: int, tenant_id: str) -> dict:
    """Owned non-course materials and course enrollments with their progress."""
    owned_ids = crud_materials.owned_material_ids(db, user_id, tenant_id)
    materials = []
    if owned_ids:
        materials = db.query(StudyMaterial).filter(
            StudyMaterial.id.in_(owned_ids),
            StudyMaterial.tenant_id == tenant_id,
            StudyMaterial.type != crud_materials.COURSE
        ).order_by(StudyMaterial.title).all()
    enrollments = db.query(CourseEnrollment).options(joinedload(CourseEnrollment.course)).filter(
        CourseEnrollment.user_id == user_id,
        CourseEnrollment.tenant_id == tenant_id
    ).order_by(CourseEnrollment.enrolled_at.desc()).all()
    return {"materials": materials, "enrollments": enrollments}


def get_enrollment(db: Session, user_id: int, course_id: int, tenant_id: str) -> Optional[CourseEnrollment]:
    return db.query(CourseEnrollment).filter(
        CourseEnrollment.user_id == user_id,
        CourseEnrollment.course_id == course_id,
        CourseEnrollment.tenant_id == tenant_id
    ).first()


def _lesson_in_course(db: Session, lesson_id: int, course_id: int) -> Optional[CourseLesson]:
    return db.query(CourseLesson).join(CourseModule).filter(
        CourseLesson.id == lesson_id,
        CourseModule.course_id == course_id
    ).first()


def upsert_lesson_progress(db: Session, enrollment: CourseEnrollment, lesson_id: int, progress: LessonProgressUpsert):
    if not _lesson_in_course(db, lesson_id, enrollment.course_id):
        raise ValueError(f"Lesson {lesson_id} is not part of this course")

    db_progress = db.query(UserLessonProgress).filter(
        UserLessonProgress.enrollment_id == enrollment.id,
        UserLessonProgress.lesson_id == lesson_id
    ).first()
    if not db_progress:
        db_progress = UserLessonProgress(enrollment_id=enrollment.id, lesson_id=lesson_id)
        db.add(db_progress)

    db_progress.progress_percentage = progress.progress_percentage
    db_progress.watch_time_seconds = progress.watch_time_seconds
    db_progress.is_completed = progress.is_completed
    if progress.is_completed and not db_progress.completed_at:
        db_progress.completed_at = now_ist()
    elif not progress.is_completed:
        db_progress.completed_at = None
    db_progress.last_watched_at = now_ist()

    enrollment.last_accessed_lesson_id = lesson_id
    db.commit()
    db.refresh(db_progress)
    return db_progress


def course_progress_percentage(db: Session, enrollment: CourseEnrollment) -> Decimal:
    """Completed active modules / active modules * 100; 0 for a course without modules."""
    active_modules = db.query(func.count(CourseModule.id)).filter(
        CourseModule.course_id == enrollment.course_id,
        CourseModule.is_active == True
    ).scalar() or 0
    if not active_modules:
        return Decimal("0")
    completed = db.query(func.count(ModuleProgress.id)).join(
        CourseModule, CourseModule.id == ModuleProgress.module_id
    ).filter(
        ModuleProgress.enrollment_id == enrollment.id,
        ModuleProgress.completed_at.isnot(None),
        CourseModule.is_active == True
    ).scalar() or 0
    return (Decimal(completed) / Decimal(active_modules) * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def complete_module(db: Session, enrollment: CourseEnrollment, module_id: int, last_lesson_id: int = None) -> CourseEnrollment:
    module = db.query(CourseModule).filter(
        CourseModule.id == module_id,
        CourseModule.course_id == enrollment.course_id
    ).first()
    if not module:
        raise ValueError(f"Module {module_id} is not part of this course")
    if last_lesson_id and not _lesson_in_course(db, last_lesson_id, enrollment.course_id):
        raise ValueError(f"Lesson {last_lesson_id} is not part of this course")

    db_progress = db.query(ModuleProgress).filter(
        ModuleProgress.enrollment_id == enrollment.id,
        ModuleProgress.module_id == module_id
    ).first()
    if not db_progress:
        db_progress = ModuleProgress(enrollment_id=enrollment.id, module_id=module_id)
        db.add(db_progress)
    if not db_progress.completed_at:
        db_progress.completed_at = now_ist()
    db.flush()

    enrollment.progress_percentage = course_progress_percentage(db, enrollment)
    if last_lesson_id:
        enrollment.last_accessed_lesson_id = last_lesson_id
    if enrollment.progress_percentage >= 100 and not enrollment.completed_at:
        enrollment.completed_at = now_ist()
        logger.info(f"Enrollment {enrollment.id} completed course {enrollment.course_id}")
    db.commit()
    db.refresh(enrollment)
    return enrollment
