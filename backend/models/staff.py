from sqlalchemy import Column, Integer, String, Text, Numeric, Date, Boolean
from database import Base
from models.audit_mixin import TimestampMixin

class Staff(Base, TimestampMixin):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="Pandit ji")
    mobile_number = Column(String(15), nullable=True)
    email = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    joining_date = Column(Date, nullable=True)
    monthly_salary = Column(Numeric(12, 2), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
