from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin, now_ist
from utils.video_embed import get_video_embed_url, format_duration

class CourseModule(Base, TimestampMixin):
    __tablename__ = "course_modules"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    course_id = Column(Integer, ForeignKey("study_materials.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)

    course = relationship("StudyMaterial", back_populates="modules")
    lessons = relationship("CourseLesson", back_populates="module", order_by="CourseLesson.order_index", cascade="all, delete-orphan")


class CourseLesson(Base, TimestampMixin):
    __tablename__ = "course_lessons"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    module_id = Column(Integer, ForeignKey("course_modules.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    video_url = Column(String(500), nullable=False)
    video_type = Column(String(10), nullable=False, default="youtube")  # youtube, vimeo, loom, custom
    video_duration_seconds = Column(Integer, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)

    module = relationship("CourseModule", back_populates="lessons")

    @property
    def embed_url(self):
        return get_video_embed_url(self.video_url, self.video_type)

    @property
    def duration_display(self):
        return format_duration(self.video_duration_seconds)


class CourseEnrollment(Base, TimestampMixin):
    __tablename__ = "course_enrollments"
    __table_args__ = (UniqueConstraint('user_id', 'course_id', name='_user_course_enrollment_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("study_materials.id"), nullable=False)
    order_id = Column(Integer, ForeignKey("study_material_orders.id"), nullable=True)
    enrolled_at = Column(DateTime(timezone=True), default=now_ist)
    progress_percentage = Column(Numeric(5, 2), default=0, nullable=False)
    last_accessed_lesson_id = Column(Integer, ForeignKey("course_lessons.id"), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    course = relationship("StudyMaterial")

    @property
    def course_title(self):
        return self.course.title if self.course else None


class ModuleProgress(Base):
    __tablename__ = "module_progress"
    __table_args__ = (UniqueConstraint('enrollment_id', 'module_id', name='_enrollment_module_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    enrollment_id = Column(Integer, ForeignKey("course_enrollments.id"), nullable=False, index=True)
    module_id = Column(Integer, ForeignKey("course_modules.id"), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)


class UserLessonProgress(Base):
    __tablename__ = "user_lesson_progress"
    __table_args__ = (UniqueConstraint('enrollment_id', 'lesson_id', name='_enrollment_lesson_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    enrollment_id = Column(Integer, ForeignKey("course_enrollments.id"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("course_lessons.id"), nullable=False)
    progress_percentage = Column(Numeric(5, 2), default=0, nullable=False)
    watch_time_seconds = Column(Integer, default=0, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    last_watched_at = Column(DateTime(timezone=True), default=now_ist, onupdate=now_ist)
