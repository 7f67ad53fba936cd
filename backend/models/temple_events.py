from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin, now_ist

class TempleEvent(Base, TimestampMixin):
    __tablename__ = "temple_events"
    __table_args__ = (UniqueConstraint('tenant_id', 'slug', name='_tenant_event_slug_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    location = Column(String, nullable=True)
    status = Column(String(20), nullable=False, default="Planned")  # Planned, Confirmed, In Progress, Completed, Cancelled
    is_published = Column(Boolean, default=False, nullable=False)

    analytics = relationship("EventRegistrationAnalytics", back_populates="event")


class EventRegistrationAnalytics(Base):
    """One row per QR scan session; form_submitted_at is stamped when that session registers."""
    __tablename__ = "event_registration_analytics"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    event_id = Column(Integer, ForeignKey("temple_events.id"), nullable=False, index=True)
    session_id = Column(String, nullable=False, index=True)
    scanned_at = Column(DateTime(timezone=True), default=now_ist)
    user_agent = Column(String, nullable=True)
    ip_address = Column(String, nullable=True)
    form_submitted_at = Column(DateTime(timezone=True), nullable=True)
    devotee_id = Column(Integer, ForeignKey("devotees.id"), nullable=True)

    event = relationship("TempleEvent", back_populates="analytics")
