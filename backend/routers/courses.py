from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.courses import (
    CourseModule, CourseModuleCreate, CourseModuleUpdate, CourseLesson, CourseLessonCreate, CourseLessonUpdate, CourseTree
)
from crud import courses as crud_courses
from crud import study_materials as crud_materials
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_current_user, get_user_identifier, get_user_id

router = APIRouter(prefix="/courses", tags=["Gurukul"])
logger = logging.getLogger(__name__)

COURSE_NOT_FOUND = "Course not found"
MODULE_NOT_FOUND = "Module not found"
LESSON_NOT_FOUND = "Lesson not found"

@router.get("/{course_id}/tree", response_model=CourseTree)
def read_course_tree(
    course_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    """Modules and lessons in order. Admins see inactive content; learners need to own the course."""
    course = crud_courses.get_course(db, course_id, tenant_id)
    if not course:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=COURSE_NOT_FOUND)
    is_admin = "admin" in (user.get("groups") or [])
    if not is_admin and not crud_materials.user_owns_material(db, get_user_id(user), course):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Enroll in this course to view its lessons")
    return crud_courses.get_course_tree(db, course, active_only=not is_admin)

@router.get("/{course_id}/modules", response_model=List[CourseModule])
def read_modules(
    course_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    if not crud_courses.get_course(db, course_id, tenant_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=COURSE_NOT_FOUND)
    return crud_courses.get_modules(db, course_id, tenant_id)

@router.post("/{course_id}/modules", response_model=CourseModule, status_code=status.HTTP_201_CREATED)
def create_module(
    course_id: int,
    module: CourseModuleCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_module = crud_courses.create_module(db, course_id, module, tenant_id, get_user_identifier(user))
    if not db_module:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=COURSE_NOT_FOUND)
    return db_module

@router.patch("/modules/{module_id}", response_model=CourseModule)
def update_module(
    module_id: int,
    module: CourseModuleUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_module = crud_courses.update_module(db, module_id, module, tenant_id, get_user_identifier(user))
    if not db_module:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MODULE_NOT_FOUND)
    return db_module

@router.delete("/modules/{module_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_module(
    module_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    if not crud_courses.delete_module(db, module_id, tenant_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MODULE_NOT_FOUND)
    logger.info(f"Module {module_id} deleted by {get_user_identifier(user)}")
    return None

@router.post("/modules/{module_id}/lessons", response_model=CourseLesson, status_code=status.HTTP_201_CREATED)
def create_lesson(
    module_id: int,
    lesson: CourseLessonCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_lesson = crud_courses.create_lesson(db, module_id, lesson, tenant_id, get_user_identifier(user))
    if not db_lesson:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MODULE_NOT_FOUND)
    return db_lesson

@router.patch("/lessons/{lesson_id}", response_model=CourseLesson)
def update_lesson(
    lesson_id: int,
    lesson: CourseLessonUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_lesson = crud_courses.update_lesson(db, lesson_id, lesson, tenant_id, get_user_identifier(user))
    if not db_lesson:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=LESSON_NOT_FOUND)
    return db_lesson

@router.delete("/lessons/{lesson_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lesson(
    lesson_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    if not crud_courses.delete_lesson(db, lesson_id, tenant_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=LESSON_NOT_FOUND)
    return None
