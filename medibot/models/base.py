"""Base SQLAlchemy model utilities."""
from datetime import datetime
from sqlalchemy import Column, DateTime, Integer


class TimestampMixin:
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class IDMixin:
    id = Column(Integer, primary_key=True, index=True)
