from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, UniqueConstraint
from database import Base
from models.audit_mixin import TimestampMixin

class MasterNakshatra(Base, TimestampMixin):
    __tablename__ = "master_nakshatras"
    __table_args__ = (UniqueConstraint('tenant_id', 'name', name='_tenant_nakshatra_name_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    name = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class MasterRashi(Base, TimestampMixin):
    __tablename__ = "master_rashis"
    __table_args__ = (UniqueConstraint('tenant_id', 'name', name='_tenant_rashi_name_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    name = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class MasterGotra(Base, TimestampMixin):
    __tablename__ = "master_gotras"
    __table_args__ = (UniqueConstraint('tenant_id', 'name', name='_tenant_gotra_name_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    name = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class MasterDonationCategory(Base, TimestampMixin):
    __tablename__ = "master_donation_categories"
    __table_args__ = (UniqueConstraint('tenant_id', 'name', name='_tenant_donation_category_name_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    is_80g_eligible = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class MasterPuja(Base, TimestampMixin):
    __tablename__ = "master_pujas"
    __table_args__ = (UniqueConstraint('tenant_id', 'name', name='_tenant_puja_name_uc'),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    base_amount = Column(Numeric(12, 2), default=0, nullable=False)
    duration_minutes = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
