"""Patient-scoped health records: vitals, appointments, emergency contacts, prescriptions."""
from sqlalchemy import Column, Integer, String, Date, Time, Float, Text, ForeignKey
from sqlalchemy.orm import relationship
from medibot.core.database import Base
from medibot.models.base import IDMixin, TimestampMixin


class Vital(IDMixin, TimestampMixin, Base):
    __tablename__ = "vitals"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    blood_pressure = Column(String(20), nullable=True)  # "120/80"
    heart_rate = Column(Integer, nullable=True)
    temperature = Column(Float, nullable=True)
    weight = Column(Float, nullable=True)


class Appointment(IDMixin, TimestampMixin, Base):
    __tablename__ = "appointments"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(Time, nullable=True)
    status = Column(String(20), default="scheduled", index=True)
    notes = Column(Text, nullable=True)


class EmergencyContact(IDMixin, TimestampMixin, Base):
    __tablename__ = "emergency_contacts"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(20), nullable=False)
    relationship_to_patient = Column("relationship", String(50), nullable=True)


class Prescription(IDMixin, TimestampMixin, Base):
    __tablename__ = "prescriptions"

    patient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    provider_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    medication = Column(String(255), nullable=False)
    dosage = Column(String(100), nullable=True)
    instructions = Column(Text, nullable=True)
    status = Column(String(20), default="active")

    patient = relationship("User", foreign_keys=[patient_id])
    provider = relationship("User", foreign_keys=[provider_id])
