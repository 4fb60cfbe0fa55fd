"""Patient portal schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import date, time, datetime


class PatientProfileUpdate(BaseModel):
    name: Optional[str] = None
    medical_history: Optional[str] = None
    symptoms: Optional[str] = None


class PatientProfileRead(PatientProfileUpdate):
    id: int
    user_id: int

    model_config = ConfigDict(from_attributes=True)


class VitalCreate(BaseModel):
    blood_pressure: Optional[str] = Field(None, pattern=r"^\d{2,3}/\d{2,3}$")
    heart_rate: Optional[int] = Field(None, ge=20, le=250)
    temperature: Optional[float] = Field(None, ge=25, le=45)
    weight: Optional[float] = Field(None, gt=0)


class VitalRead(VitalCreate):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AppointmentCreate(BaseModel):
    appointment_date: date
    appointment_time: Optional[time] = None
    notes: Optional[str] = None


class AppointmentRead(AppointmentCreate):
    id: int
    status: str

    model_config = ConfigDict(from_attributes=True)


class EmergencyContactIn(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None


class EmergencyContactsSave(BaseModel):
    contacts: List[EmergencyContactIn]


class EmergencyContactRead(BaseModel):
    id: int
    name: str
    phone: str
    relationship: Optional[str] = Field(None, validation_alias="relationship_to_patient")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class PrescriptionCreate(BaseModel):
    patient_id: int
    medication: str = Field(..., min_length=1)
    dosage: Optional[str] = None
    instructions: Optional[str] = None


class PrescriptionRead(PrescriptionCreate):
    id: int
    provider_id: Optional[int] = None
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProviderProfileRead(BaseModel):
    id: int
    user_id: int
    name: str
    specialty: Optional[str] = None
    license_number: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
