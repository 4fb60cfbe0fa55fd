"""Healthcare provider profile model."""
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from medibot.core.database import Base
from medibot.models.base import IDMixin, TimestampMixin


class HealthcareProviderProfile(IDMixin, TimestampMixin, Base):
    __tablename__ = "healthcare_provider_profiles"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    specialty = Column(String(100), default="General Practice")
    license_number = Column(String(100), default="")

    user = relationship("User", back_populates="provider_profile")
