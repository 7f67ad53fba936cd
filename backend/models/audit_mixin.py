from sqlalchemy import Column, DateTime, String
from datetime import datetime
import pytz


def now_ist():
    return datetime.now(pytz.timezone('Asia/Kolkata'))


class TimestampMixin:
    """Created/updated timestamps plus the user who made the change.

    Used by master data (nakshatras, pujas, staff, inventory) that can be hard
    deleted and recreated without tripping unique constraints.
    """
    # Timezone-aware so every row is stored in temple local time (Asia/Kolkata).
    created_at = Column(DateTime(timezone=True), default=now_ist)
    updated_at = Column(DateTime(timezone=True), onupdate=now_ist)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)


class SoftDeleteMixin:
    """deleted_at / deleted_by columns picked up by the soft-delete filter in database.py.

    Only for records that must survive deletion: devotees, donations and
    the accounting documents.
    """
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(String, nullable=True)


class AuditMixin(TimestampMixin, SoftDeleteMixin):
    """Timestamps + soft delete."""
    pass
