"""Super admin profile model."""
from sqlalchemy import Column, Integer, String, ForeignKey, JSON
from sqlalchemy.orm import relationship
from medibot.core.database import Base
from medibot.models.base import IDMixin, TimestampMixin


class SuperAdminProfile(IDMixin, TimestampMixin, Base):
    __tablename__ = "super_admin_profiles"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    permissions = Column(JSON, default=lambda: ["all"])

    user = relationship("User", back_populates="super_admin_profile")
