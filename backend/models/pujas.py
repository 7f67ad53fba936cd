from sqlalchemy import Column, Integer, String, Text, Numeric, Date, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin

class PujaBooking(Base, AuditMixin):
    __tablename__ = "puja_bookings"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    devotee_id = Column(Integer, ForeignKey("devotees.id"), nullable=False)
    puja_id = Column(Integer, ForeignKey("master_pujas.id"), nullable=False)
    booking_date = Column(Date, nullable=False)
    puja_date = Column(Date, nullable=False, index=True)
    time_slot = Column(String, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    amount_paid = Column(Numeric(12, 2), default=0, nullable=False)
    status = Column(String(20), nullable=False, default="Pending")  # Pending, Confirmed, Completed, Cancelled
    payment_status = Column(String(20), nullable=False, default="Pending")  # Pending, Partial, Paid, Refunded
    special_instructions = Column(Text, nullable=True)

    # Relationships
    devotee = relationship("Devotee", back_populates="puja_bookings")
    puja = relationship("MasterPuja")
