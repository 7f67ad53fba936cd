from pydantic import BaseModel, Field
from typing import Optional

class AppConfigBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    value: str = Field(..., max_length=500)

class AppConfigCreate(AppConfigBase):
    pass

class AppConfigUpdate(BaseModel):
    value: Optional[str] = Field(None, max_length=500)

class AppConfigOut(AppConfigBase):
    id: int
    tenant_id: str

    class Config:
        from_attributes = True
