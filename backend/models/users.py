from database import Base
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from models.audit_mixin import TimestampMixin

class User(Base, TimestampMixin):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    tenant_id = Column(String, index=True, nullable=False)
    is_active = Column(Boolean, default=True)

    profile = relationship("UserProfile", back_populates="user", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, tenant_id={self.tenant_id}, is_active={self.is_active})>"


class UserProfile(Base, TimestampMixin):
    __tablename__ = 'user_profiles'

    id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    role = Column(String(20), nullable=False, default="user")  # admin, user
    devotee_id = Column(Integer, ForeignKey("devotees.id"), nullable=True)

    user = relationship("User", back_populates="profile")
    devotee = relationship("Devotee")
