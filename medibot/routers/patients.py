"""Patient portal endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from medibot.cache.invalidation import invalidate
from medibot.core.database import get_db
from medibot.dependencies.auth import get_current_patient
from medibot.models.user import User
from medibot.schemas.patient import (
    PatientProfileUpdate, PatientProfileRead, VitalCreate, VitalRead,
    AppointmentCreate, AppointmentRead, EmergencyContactsSave, EmergencyContactRead,
    PrescriptionRead,
)
from medibot.services.patient_service import PatientService

router = APIRouter(prefix="/patients/me", tags=["patients"])


@router.get("/profile")
async def get_profile(
    user: User = Depends(get_current_patient),
    db: Session = Depends(get_db),
):
    profile = PatientService.get_profile(db, user)
    return {"success": True, "data": PatientProfileRead.model_validate(profile) if profile else None}


@router.put("/profile")
async def update_profile(
    payload: PatientProfileUpdate,
    user: User = Depends(get_current_patient),
    db: Session = Depends(get_db),
):
    profile = PatientService.upsert_profile(db, user, payload.model_dump(exclude_unset=True))
    return {
        "success": True,
        "data": PatientProfileRead.model_validate(profile),
        "invalidates": await invalidate("update_patient_profile"),
    }


@router.get("/vitals", response_model=list[VitalRead])
async def list_vitals(
    user: User = Depends(get_current_patient),
    db: Session = Depends(get_db),
):
    return PatientService.recent_vitals(db, user)


@router.post("/vitals", status_code=201)
async def record_vitals(
    payload: VitalCreate,
    user: User = Depends(get_current_patient),
    db: Session = Depends(get_db),
):
    vital = PatientService.record_vitals(db, user, payload.model_dump())
    return {
        "success": True,
        "data": VitalRead.model_validate(vital),
        "invalidates": await invalidate("record_vitals"),
    }


@router.get("/appointments", response_model=list[AppointmentRead])
async def list_appointments(
    user: User = Depends(get_current_patient),
    db: Session = Depends(get_db),
):
    return PatientService.recent_appointments(db, user)


@router.post("/appointments", status_code=201)
async def schedule_appointment(
    payload: AppointmentCreate,
    user: User = Depends(get_current_patient),
    db: Session = Depends(get_db),
):
    appointment = PatientService.schedule_appointment(db, user, payload.model_dump())
    return {
        "success": True,
        "data": AppointmentRead.model_validate(appointment),
        "invalidates": await invalidate("schedule_appointment"),
    }


@router.get("/emergency-contacts", response_model=list[EmergencyContactRead])
async def list_emergency_contacts(
    user: User = Depends(get_current_patient),
    db: Session = Depends(get_db),
):
    return PatientService.emergency_contacts(db, user)


@router.put("/emergency-contacts")
async def save_emergency_contacts(
    payload: EmergencyContactsSave,
    user: User = Depends(get_current_patient),
    db: Session = Depends(get_db),
):
    """Replace the saved contacts with the submitted list."""
    contacts = PatientService.save_emergency_contacts(
        db, user, [c.model_dump() for c in payload.contacts]
    )
    return {
        "success": True,
        "data": [EmergencyContactRead.model_validate(c) for c in contacts],
        "invalidates": await invalidate("save_emergency_contacts"),
    }


@router.get("/prescriptions", response_model=list[PrescriptionRead])
async def list_prescriptions(
    user: User = Depends(get_current_patient),
    db: Session = Depends(get_db),
):
    return PatientService.prescriptions(db, user)
