from typing import Optional
from sqlalchemy.orm import Session
from models.study_materials import StudyMaterial, StudyMaterialOrder, OrderItem
from models.courses import CourseEnrollment
from models.audit_mixin import now_ist
from schemas.study_materials import StudyMaterialCreate, StudyMaterialUpdate
from crud.audit_log import log_change
from utils import sqlalchemy_to_dict
import logging

logger = logging.getLogger(__name__)

COURSE = "Course"
PAID = "Paid"

def get_material(db: Session, material_id: int, tenant_id: str) -> Optional[StudyMaterial]:
    return db.query(StudyMaterial).filter(StudyMaterial.id == material_id, StudyMaterial.tenant_id == tenant_id).first()

def get_materials(db: Session, tenant_id: str, material_type: str = None, published_only: bool = False,
                  search: str = None, skip: int = 0, limit: int = 100):
    query = db.query(StudyMaterial).filter(StudyMaterial.tenant_id == tenant_id)
    if material_type:
        query = query.filter(StudyMaterial.type == material_type)
    if published_only:
        query = query.filter(StudyMaterial.is_published == True)
    if search:
        pattern = f"%{search}%"
        query = query.filter(StudyMaterial.title.ilike(pattern) | StudyMaterial.author.ilike(pattern))
    return query.order_by(StudyMaterial.title).offset(skip).limit(limit).all()

def create_material(db: Session, material: StudyMaterialCreate, tenant_id: str, user_id: str = None) -> StudyMaterial:
    db_material = StudyMaterial(**material.model_dump(), tenant_id=tenant_id, created_by=user_id)
    db.add(db_material)
    db.commit()
    db.refresh(db_material)
    logger.info(f"Study material '{db_material.title}' ({db_material.type}) created by {user_id}")
    return db_material

def update_material(db: Session, material_id: int, material: StudyMaterialUpdate, tenant_id: str, user_id: str):
    db_material = get_material(db, material_id, tenant_id)
    if not db_material:
        return None
    old_values = sqlalchemy_to_dict(db_material)
    for key, value in material.model_dump(exclude_unset=True).items():
        setattr(db_material, key, value)
    if db_material.is_free:
        db_material.price = 0
    db_material.updated_by = user_id
    log_change(db, tenant_id, 'study_materials', db_material, user_id, 'UPDATE', old_values)
    db.commit()
    db.refresh(db_material)
    return db_material

def add_file(db: Session, db_material: StudyMaterial, s3_path: str, kind: str, user_id: str):
    """Record an uploaded object against the material."""
    if kind == "cover":
        db_material.cover_image_url = s3_path
    else:
        # Reassign so the JSON column is flagged dirty
        db_material.file_urls = list(db_material.file_urls or []) + [s3_path]
    db_material.updated_by = user_id
    db.commit()
    db.refresh(db_material)
    return db_material

def delete_material(db: Session, material_id: int, tenant_id: str, user_id: str) -> bool:
    db_material = get_material(db, material_id, tenant_id)
    if not db_material:
        return False
    old_values = sqlalchemy_to_dict(db_material)
    db_material.deleted_at = now_ist()
    db_material.deleted_by = user_id
    log_change(db, tenant_id, 'study_materials', db_material, user_id, 'DELETE', old_values)
    db.commit()
    return True

def owned_material_ids(db: Session, user_id: int, tenant_id: str) -> set:
    """Materials bought in a paid order plus courses the user is enrolled in."""
    purchased = db.query(OrderItem.material_id).join(StudyMaterialOrder).filter(
        StudyMaterialOrder.user_id == user_id,
        StudyMaterialOrder.tenant_id == tenant_id,
        StudyMaterialOrder.payment_status == PAID
    )
    enrolled = db.query(CourseEnrollment.course_id).filter(
        CourseEnrollment.user_id == user_id,
        CourseEnrollment.tenant_id == tenant_id
    )
    return {material_id for (material_id,) in purchased} | {course_id for (course_id,) in enrolled}

def user_owns_material(db: Session, user_id: int, material: StudyMaterial) -> bool:
    return material.is_free or material.id in owned_material_ids(db, user_id, material.tenant_id)
