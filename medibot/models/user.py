from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import relationship, validates
from datetime import datetime
from medibot.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=True)

    # Role is stored verbatim; unrecognised values are handled by the role router
    role = Column(String(50), index=True, nullable=True)
    status = Column(String(50), default="active", index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    is_deleted = Column(Boolean, default=False)

    # Relationships
    patient_profile = relationship(
        "PatientProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    pharmacy_admin_profile = relationship(
        "PharmacyAdminProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    super_admin_profile = relationship(
        "SuperAdminProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    provider_profile = relationship(
        "HealthcareProviderProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email}>"

    @validates("email")
    def normalize_email(self, key, value):
        return value.strip().lower() if value else value
