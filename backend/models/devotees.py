from sqlalchemy import Column, Integer, String, Text, Date, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import AuditMixin

class Devotee(Base, AuditMixin):
    __tablename__ = "devotees"
    __table_args__ = (UniqueConstraint('tenant_id', 'devotee_code', name='_tenant_devotee_code_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    devotee_code = Column(String(20), nullable=False, index=True)  # DEV-2024-0001
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=True)
    mobile_number = Column(String(15), nullable=False, index=True)
    email = Column(String, nullable=True)
    gender = Column(String(10), nullable=True)  # Male, Female, Other
    date_of_birth = Column(Date, nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    country = Column(String, nullable=False, default="India")
    pincode = Column(String(10), nullable=True)
    gotra = Column(String, nullable=True)
    nakshatra = Column(String, nullable=True)
    rashi = Column(String, nullable=True)
    occupation = Column(String, nullable=True)
    membership_type = Column(String(30), nullable=False, default="General")
    membership_status = Column(String(20), nullable=False, default="Active")
    event_source = Column(String, nullable=True, index=True)  # slug of the event the devotee registered through
    notes = Column(Text, nullable=True)

    # Relationships
    donations = relationship("Donation", back_populates="devotee")
    puja_bookings = relationship("PujaBooking", back_populates="devotee")

    @property
    def full_name(self):
        return " ".join(part for part in [self.first_name, self.last_name] if part)
