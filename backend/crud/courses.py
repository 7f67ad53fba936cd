from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload
from models.courses import CourseModule, CourseLesson
from models.study_materials import StudyMaterial
from schemas.courses import CourseModuleCreate, CourseModuleUpdate, CourseLessonCreate, CourseLessonUpdate
from crud import study_materials as crud_materials
from utils.video_embed import detect_video_type, format_duration
import logging

logger = logging.getLogger(__name__)

def get_course(db: Session, course_id: int, tenant_id: str) -> Optional[StudyMaterial]:
    material = crud_materials.get_material(db, course_id, tenant_id)
    if material and material.type == crud_materials.COURSE:
        return material
    return None

def get_module(db: Session, module_id: int, tenant_id: str) -> Optional[CourseModule]:
    return db.query(CourseModule).filter(CourseModule.id == module_id, CourseModule.tenant_id == tenant_id).first()

def get_lesson(db: Session, lesson_id: int, tenant_id: str) -> Optional[CourseLesson]:
    return db.query(CourseLesson).filter(CourseLesson.id == lesson_id, CourseLesson.tenant_id == tenant_id).first()

def get_modules(db: Session, course_id: int, tenant_id: str, active_only: bool = False):
    query = db.query(CourseModule).options(selectinload(CourseModule.lessons)).filter(
        CourseModule.course_id == course_id,
        CourseModule.tenant_id == tenant_id
    )
    if active_only:
        query = query.filter(CourseModule.is_active == True)
    return query.order_by(CourseModule.order_index, CourseModule.id).all()

def _next_index(db: Session, column, *criteria) -> int:
    current = db.query(func.max(column)).filter(*criteria).scalar()
    return 0 if current is None else current + 1

def create_module(db: Session, course_id: int, module: CourseModuleCreate, tenant_id: str, user_id: str = None):
    if not get_course(db, course_id, tenant_id):
        return None
    data = module.model_dump()
    if data['order_index'] is None:
        data['order_index'] = _next_index(db, CourseModule.order_index, CourseModule.course_id == course_id)
    db_module = CourseModule(**data, course_id=course_id, tenant_id=tenant_id, created_by=user_id)
    db.add(db_module)
    db.commit()
    db.refresh(db_module)
    return db_module

def update_module(db: Session, module_id: int, module: CourseModuleUpdate, tenant_id: str, user_id: str):
    db_module = get_module(db, module_id, tenant_id)
    if not db_module:
        return None
    for key, value in module.model_dump(exclude_unset=True).items():
        setattr(db_module, key, value)
    db_module.updated_by = user_id
    db.commit()
    db.refresh(db_module)
    return db_module

def delete_module(db: Session, module_id: int, tenant_id: str) -> bool:
    db_module = get_module(db, module_id, tenant_id)
    if not db_module:
        return False
    db.delete(db_module)
    db.commit()
    return True

def create_lesson(db: Session, module_id: int, lesson: CourseLessonCreate, tenant_id: str, user_id: str = None):
    if not get_module(db, module_id, tenant_id):
        return None
    data = lesson.model_dump()
    data['video_type'] = data['video_type'] or detect_video_type(data['video_url'])
    if data['order_index'] is None:
        data['order_index'] = _next_index(db, CourseLesson.order_index, CourseLesson.module_id == module_id)
    db_lesson = CourseLesson(**data, module_id=module_id, tenant_id=tenant_id, created_by=user_id)
    db.add(db_lesson)
    db.commit()
    db.refresh(db_lesson)
    logger.info(f"Lesson '{db_lesson.title}' added to module {module_id} at position {db_lesson.order_index}")
    return db_lesson

def update_lesson(db: Session, lesson_id: int, lesson: CourseLessonUpdate, tenant_id: str, user_id: str):
    db_lesson = get_lesson(db, lesson_id, tenant_id)
    if not db_lesson:
        return None
    update_data = lesson.model_dump(exclude_unset=True)
    if update_data.get('video_url') and 'video_type' not in update_data:
        update_data['video_type'] = detect_video_type(update_data['video_url'])
    for key, value in update_data.items():
        setattr(db_lesson, key, value)
    db_lesson.updated_by = user_id
    db.commit()
    db.refresh(db_lesson)
    return db_lesson

def delete_lesson(db: Session, lesson_id: int, tenant_id: str) -> bool:
    db_lesson = get_lesson(db, lesson_id, tenant_id)
    if not db_lesson:
        return False
    db.delete(db_lesson)
    db.commit()
    return True

def get_course_tree(db: Session, course: StudyMaterial, active_only: bool = False) -> dict:
    modules = get_modules(db, course.id, course.tenant_id, active_only)
    total_seconds = 0
    lesson_count = 0
    tree = []
    for module in modules:
        lessons = [l for l in module.lessons if l.is_active or not active_only]
        total_seconds += sum(l.video_duration_seconds or 0 for l in lessons)
        lesson_count += len(lessons)
        tree.append({
            "id": module.id,
            "course_id": module.course_id,
            "title": module.title,
            "description": module.description,
            "order_index": module.order_index,
            "is_active": module.is_active,
            "lessons": lessons,
        })
    return {
        "course_id": course.id,
        "title": course.title,
        "total_duration": format_duration(total_seconds),
        "lesson_count": lesson_count,
        "modules": tree,
    }
