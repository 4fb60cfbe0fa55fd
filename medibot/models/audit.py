"""Admin activity log model."""
from sqlalchemy import Column, String, DateTime, Integer, Text
from medibot.core.database import Base
from datetime import datetime


class AdminActivityLog(Base):
    __tablename__ = "admin_activity_logs"

    id = Column(Integer, primary_key=True)
    admin_id = Column(String, nullable=False)
    activity = Column(String, nullable=False)  # "<entity>:<id>:<action>"
    details = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
