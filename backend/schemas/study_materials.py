from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from decimal import Decimal
from datetime import datetime

MATERIAL_TYPES = ["Book", "PDF", "Video", "Audio", "Course"]

def check_material_type(v):
    if v is not None and v not in MATERIAL_TYPES:
        raise ValueError(f"type must be one of {MATERIAL_TYPES}")
    return v

class StudyMaterialBase(BaseModel):
    title: str = Field(..., min_length=2)
    description: Optional[str] = None
    type: str
    author: Optional[str] = None
    language: str = "English"
    price: Decimal = Field(Decimal("0"), ge=0)
    is_free: bool = False
    is_published: bool = False
    is_digital: bool = True
    stock_quantity: int = Field(0, ge=0)
    file_urls: List[str] = []
    cover_image_url: Optional[str] = None

    @field_validator('type')
    @classmethod
    def validate_type(cls, v):
        return check_material_type(v)

class StudyMaterialCreate(StudyMaterialBase):
    @model_validator(mode='after')
    def free_means_zero_price(self):
        if self.is_free:
            self.price = Decimal("0")
        return self

class StudyMaterialUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = None
    type: Optional[str] = None
    author: Optional[str] = None
    language: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    is_free: Optional[bool] = None
    is_published: Optional[bool] = None
    is_digital: Optional[bool] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    file_urls: Optional[List[str]] = None
    cover_image_url: Optional[str] = None

    @field_validator('type')
    @classmethod
    def validate_type(cls, v):
        return check_material_type(v)

class StudyMaterial(StudyMaterialBase):
    id: int
    tenant_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class MaterialUploadRequest(BaseModel):
    filename: str = Field(..., min_length=1)
    kind: str = "file"  # "file" or "cover"

    @field_validator('kind')
    @classmethod
    def validate_kind(cls, v):
        if v not in ("file", "cover"):
            raise ValueError("kind must be 'file' or 'cover'")
        return v

class MaterialDownloadUrls(BaseModel):
    material_id: int
    download_urls: List[str]
