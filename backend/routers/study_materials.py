from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.study_materials import (
    StudyMaterial, StudyMaterialCreate, StudyMaterialUpdate, MaterialUploadRequest, MaterialDownloadUrls
)
from schemas.uploads import UploadUrlResponse
from crud import study_materials as crud_materials
from utils.s3_utils import generate_presigned_upload_url, generate_presigned_download_url
from utils.tenancy import get_tenant_id
from utils.auth_utils import require_group, get_current_user, get_user_identifier, get_user_id

router = APIRouter(prefix="/study-materials", tags=["Gurukul"])
logger = logging.getLogger(__name__)

MATERIAL_NOT_FOUND = "Study material not found"

@router.post("/", response_model=StudyMaterial, status_code=status.HTTP_201_CREATED)
def create_material(
    material: StudyMaterialCreate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    return crud_materials.create_material(db, material, tenant_id, get_user_identifier(user))

@router.get("/", response_model=List[StudyMaterial])
def read_materials(
    type: Optional[str] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """All materials, published or not."""
    return crud_materials.get_materials(db, tenant_id, type, False, search, skip, limit)

@router.get("/catalog", response_model=List[StudyMaterial])
def read_catalog(
    type: Optional[str] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    """Published materials, as shown in the store."""
    return crud_materials.get_materials(db, tenant_id, type, True, search, skip, limit)

@router.get("/{material_id}", response_model=StudyMaterial)
def read_material(
    material_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    db_material = crud_materials.get_material(db, material_id, tenant_id)
    is_admin = "admin" in (user.get("groups") or [])
    if not db_material or (not db_material.is_published and not is_admin):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MATERIAL_NOT_FOUND)
    return db_material

@router.patch("/{material_id}", response_model=StudyMaterial)
def update_material(
    material_id: int,
    material: StudyMaterialUpdate,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    db_material = crud_materials.update_material(db, material_id, material, tenant_id, get_user_identifier(user))
    if not db_material:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MATERIAL_NOT_FOUND)
    return db_material

@router.delete("/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_material(
    material_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    if not crud_materials.delete_material(db, material_id, tenant_id, get_user_identifier(user)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MATERIAL_NOT_FOUND)
    return None

@router.post("/{material_id}/upload-url", response_model=UploadUrlResponse)
def get_material_upload_url(
    material_id: int,
    request: MaterialUploadRequest,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(require_group(["admin"]))
):
    """Presigned PUT URL for a material file or cover image. The returned s3_path is recorded on the material."""
    db_material = crud_materials.get_material(db, material_id, tenant_id)
    if not db_material:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MATERIAL_NOT_FOUND)
    folder = "covers" if request.kind == "cover" else "study-materials"
    try:
        result = generate_presigned_upload_url(tenant_id, folder, material_id, request.filename)
    except RuntimeError as e:
        logger.exception(f"Could not create upload URL for study material {material_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    crud_materials.add_file(db, db_material, result["s3_path"], request.kind, get_user_identifier(user))
    return result

@router.get("/{material_id}/download-urls", response_model=MaterialDownloadUrls)
def get_material_download_urls(
    material_id: int,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id),
    user: dict = Depends(get_current_user)
):
    db_material = crud_materials.get_material(db, material_id, tenant_id)
    if not db_material:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=MATERIAL_NOT_FOUND)
    if not crud_materials.user_owns_material(db, get_user_id(user), db_material):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Purchase this material to download it")
    try:
        urls = [generate_presigned_download_url(path) for path in db_material.file_urls or []]
    except (ValueError, FileNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except RuntimeError as e:
        logger.exception(f"Could not create download URLs for study material {material_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return {"material_id": material_id, "download_urls": urls}
