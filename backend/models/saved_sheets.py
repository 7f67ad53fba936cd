from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Text
from database import Base
from models.audit_mixin import TimestampMixin

class SavedSheet(Base, TimestampMixin):
    __tablename__ = "saved_sheets"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    sheet_name = Column(String, nullable=False)
    spreadsheet_id = Column(String, nullable=False)
    tab_name = Column(String, nullable=False)  # "ALL_TABS" for bulk saves
    data_json = Column(JSON, nullable=False)
    # "metadata" is reserved on declarative classes
    sheet_metadata = Column("metadata", JSON, nullable=True)


class GoogleToken(Base, TimestampMixin):
    """OAuth tokens granted by the user when connecting their Google account."""
    __tablename__ = "google_tokens"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    provider_token = Column(Text, nullable=False)
    provider_refresh_token = Column(Text, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
