from sqlalchemy.orm import Session

from medibot.core.constants import UserRole
from medibot.models.health_record import Prescription
from medibot.models.user import User
from medibot.utils.errors import NotFoundError


class ProviderService:

    @staticmethod
    def issue_prescription(db: Session, provider: User, data: dict) -> Prescription:
        patient = (
            db.query(User)
            .filter(User.id == data["patient_id"], User.role == UserRole.PATIENT.value, User.is_deleted == False)
            .first()
        )
        if not patient:
            raise NotFoundError("Patient not found")

        prescription = Prescription(
            patient_id=patient.id,
            provider_id=provider.id,
            medication=data["medication"],
            dosage=data.get("dosage"),
            instructions=data.get("instructions"),
        )
        db.add(prescription)
        db.commit()
        db.refresh(prescription)
        return prescription

    @staticmethod
    def issued_prescriptions(db: Session, provider: User):
        return (
            db.query(Prescription)
            .filter(Prescription.provider_id == provider.id)
            .order_by(Prescription.created_at.desc(), Prescription.id.desc())
            .all()
        )
