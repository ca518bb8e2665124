# localcooks/models/platform_setting.py
"""Key/value platform settings editable by admins."""

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func
import ulid

from ..database import Base


class PlatformSetting(Base):
    __tablename__ = "platform_settings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    key = Column(String(128), unique=True, nullable=False, index=True)
    value = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    updated_by = Column(String(26), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
