"""Pharmacy and staff models."""
from datetime import datetime
from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, Float, Text
from sqlalchemy.orm import relationship
from medibot.core.database import Base


class Pharmacy(Base):
    __tablename__ = "pharmacies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    location = Column(Text, nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # pending -> approved | rejected, decided by a super admin
    status = Column(String(20), default="pending", nullable=False, index=True)
    status_changed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    status_changed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    admins = relationship("PharmacyAdminProfile", back_populates="pharmacy")
    medicines = relationship("Medicine", back_populates="pharmacy", cascade="all, delete-orphan")
    staff = relationship("Staff", back_populates="pharmacy", cascade="all, delete-orphan")
    sales = relationship("Sale", back_populates="pharmacy", cascade="all, delete-orphan")

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class Staff(Base):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, index=True)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    role = Column(String(100), nullable=True)  # e.g. pharmacist, cashier
    status = Column(String(20), default="active")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    pharmacy = relationship("Pharmacy", back_populates="staff")
