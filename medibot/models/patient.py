"""Patient profile model."""
from sqlalchemy import Column, Integer, String, ForeignKey, Text
from sqlalchemy.orm import relationship
from medibot.core.database import Base
from medibot.models.base import IDMixin, TimestampMixin


class PatientProfile(IDMixin, TimestampMixin, Base):
    __tablename__ = "patient_profiles"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(200), nullable=True)
    medical_history = Column(Text, default="")
    symptoms = Column(Text, default="")

    user = relationship("User", back_populates="patient_profile")
