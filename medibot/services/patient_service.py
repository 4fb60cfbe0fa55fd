from sqlalchemy.orm import Session

from medibot.core.constants import AppointmentStatus
from medibot.models.health_record import Vital, Appointment, EmergencyContact, Prescription
from medibot.models.patient import PatientProfile
from medibot.models.user import User
from medibot.services.profile_service import default_profile_name

RECENT_LIMIT = 5


class PatientService:

    @staticmethod
    def get_profile(db: Session, user: User) -> PatientProfile | None:
        return db.query(PatientProfile).filter(PatientProfile.user_id == user.id).first()

    @staticmethod
    def upsert_profile(db: Session, user: User, data: dict) -> PatientProfile:
        """Create the profile on first save, otherwise update the given fields."""
        profile = PatientService.get_profile(db, user)
        if profile is None:
            profile = PatientProfile(
                user_id=user.id,
                name=data.get("name") or default_profile_name(user.email),
            )
            db.add(profile)

        for field in ("name", "medical_history", "symptoms"):
            if data.get(field) is not None:
                setattr(profile, field, data[field])

        db.commit()
        db.refresh(profile)
        return profile

    # ---- vitals ----

    @staticmethod
    def record_vitals(db: Session, user: User, data: dict) -> Vital:
        vital = Vital(user_id=user.id, **data)
        db.add(vital)
        db.commit()
        db.refresh(vital)
        return vital

    @staticmethod
    def recent_vitals(db: Session, user: User, limit: int = RECENT_LIMIT):
        return (
            db.query(Vital)
            .filter(Vital.user_id == user.id)
            .order_by(Vital.created_at.desc(), Vital.id.desc())
            .limit(limit)
            .all()
        )

    # ---- appointments ----

    @staticmethod
    def schedule_appointment(db: Session, user: User, data: dict) -> Appointment:
        appointment = Appointment(
            user_id=user.id,
            appointment_date=data["appointment_date"],
            appointment_time=data.get("appointment_time"),
            notes=data.get("notes"),
            status=AppointmentStatus.SCHEDULED.value,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def recent_appointments(db: Session, user: User, limit: int = RECENT_LIMIT):
        return (
            db.query(Appointment)
            .filter(Appointment.user_id == user.id)
            .order_by(Appointment.appointment_date.desc(), Appointment.id.desc())
            .limit(limit)
            .all()
        )

    # ---- emergency contacts ----

    @staticmethod
    def save_emergency_contacts(db: Session, user: User, contacts: list[dict]):
        """Replace all of the user's contacts. Entries without a name or phone are dropped."""
        db.query(EmergencyContact).filter(EmergencyContact.user_id == user.id).delete(
            synchronize_session=False
        )
        for contact in contacts:
            name = (contact.get("name") or "").strip()
            phone = (contact.get("phone") or "").strip()
            if not name or not phone:
                continue
            db.add(EmergencyContact(
                user_id=user.id,
                name=name,
                phone=phone,
                relationship_to_patient=contact.get("relationship"),
            ))
        db.commit()
        return PatientService.emergency_contacts(db, user)

    @staticmethod
    def emergency_contacts(db: Session, user: User):
        return (
            db.query(EmergencyContact)
            .filter(EmergencyContact.user_id == user.id)
            .order_by(EmergencyContact.id.asc())
            .all()
        )

    # ---- prescriptions ----

    @staticmethod
    def prescriptions(db: Session, user: User):
        return (
            db.query(Prescription)
            .filter(Prescription.patient_id == user.id)
            .order_by(Prescription.created_at.desc(), Prescription.id.desc())
            .all()
        )
