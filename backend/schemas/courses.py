from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from decimal import Decimal
from datetime import datetime
from utils.video_embed import VIDEO_TYPES

def check_video_type(v):
    if v is not None and v not in VIDEO_TYPES:
        raise ValueError(f"video_type must be one of {VIDEO_TYPES}")
    return v

class CourseModuleCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    order_index: Optional[int] = Field(None, ge=0)
    is_active: bool = True

class CourseModuleUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    order_index: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

class CourseLessonCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    video_url: str = Field(..., min_length=1)
    video_type: Optional[str] = None  # detected from the URL when omitted
    video_duration_seconds: Optional[int] = Field(None, ge=0)
    order_index: Optional[int] = Field(None, ge=0)  # appended after the last lesson when omitted

    @field_validator('video_type')
    @classmethod
    def validate_video_type(cls, v):
        return check_video_type(v)

class CourseLessonUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    video_url: Optional[str] = None
    video_type: Optional[str] = None
    video_duration_seconds: Optional[int] = Field(None, ge=0)
    order_index: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @field_validator('video_type')
    @classmethod
    def validate_video_type(cls, v):
        return check_video_type(v)

class CourseLesson(BaseModel):
    id: int
    module_id: int
    title: str
    description: Optional[str] = None
    video_url: str
    video_type: str
    video_duration_seconds: Optional[int] = None
    order_index: int
    is_active: bool
    embed_url: Optional[str] = None
    duration_display: Optional[str] = None

    class Config:
        from_attributes = True

class CourseModule(BaseModel):
    id: int
    course_id: int
    title: str
    description: Optional[str] = None
    order_index: int
    is_active: bool
    lessons: List[CourseLesson] = []

    class Config:
        from_attributes = True

class CourseTree(BaseModel):
    course_id: int
    title: str
    total_duration: str
    lesson_count: int
    modules: List[CourseModule]

class LessonProgressUpsert(BaseModel):
    progress_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    watch_time_seconds: int = Field(0, ge=0)
    is_completed: bool = False

class LessonProgress(BaseModel):
    id: int
    enrollment_id: int
    lesson_id: int
    progress_percentage: Decimal
    watch_time_seconds: int
    is_completed: bool
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ModuleCompletionRequest(BaseModel):
    last_lesson_id: Optional[int] = None

class CourseEnrollment(BaseModel):
    id: int
    course_id: int
    order_id: Optional[int] = None
    enrolled_at: Optional[datetime] = None
    progress_percentage: Decimal
    last_accessed_lesson_id: Optional[int] = None
    completed_at: Optional[datetime] = None
    course_title: Optional[str] = None

    class Config:
        from_attributes = True
