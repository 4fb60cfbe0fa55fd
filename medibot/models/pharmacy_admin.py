"""Pharmacy admin profile model."""
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from medibot.core.database import Base
from medibot.models.base import IDMixin, TimestampMixin


class PharmacyAdminProfile(IDMixin, TimestampMixin, Base):
    __tablename__ = "pharmacy_admin_profiles"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String(200), nullable=False)

    user = relationship("User", back_populates="pharmacy_admin_profile")
    pharmacy = relationship("Pharmacy", back_populates="admins")
