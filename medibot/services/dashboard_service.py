"""Per-role dashboard views.

Each builder gathers everything its view shows in one call. The role router
picks the builder; no view reaches into another role's data.
"""
from sqlalchemy.orm import Session

from medibot.core.constants import UserRole
from medibot.models.user import User
from medibot.schemas.admin import ActivityLogRead
from medibot.schemas.patient import (
    PatientProfileRead, VitalRead, AppointmentRead, EmergencyContactRead,
    PrescriptionRead, ProviderProfileRead,
)
from medibot.schemas.pharmacy import PharmacyRead, MedicineRead, StaffRead, SaleRead
from medibot.services.admin_service import AdminService
from medibot.services.medicine_service import MedicineService
from medibot.services.patient_service import PatientService
from medibot.services.pharmacy_service import PharmacyService
from medibot.services.provider_service import ProviderService
from medibot.services.sale_service import SaleService
from medibot.services.role_router import dispatch

RECENT_ACTIVITY = 20


def _dump(schema, rows):
    return [schema.model_validate(row).model_dump(mode="json") for row in rows]


def patient_view(db: Session, user: User) -> dict:
    profile = PatientService.get_profile(db, user)
    return {
        "profile": PatientProfileRead.model_validate(profile).model_dump(mode="json") if profile else None,
        "vitals": _dump(VitalRead, PatientService.recent_vitals(db, user)),
        "appointments": _dump(AppointmentRead, PatientService.recent_appointments(db, user)),
        "emergency_contacts": _dump(EmergencyContactRead, PatientService.emergency_contacts(db, user)),
        "prescriptions": _dump(PrescriptionRead, PatientService.prescriptions(db, user)),
    }


def pharmacy_admin_view(db: Session, user: User) -> dict:
    """An admin without a pharmacy gets an empty view prompting registration."""
    pharmacy = PharmacyService.find_admin_pharmacy(db, user)
    if pharmacy is None:
        return {"pharmacy": None, "needs_registration": True}

    return {
        "pharmacy": PharmacyRead.model_validate(pharmacy).model_dump(mode="json"),
        "needs_registration": False,
        "medicines": _dump(MedicineRead, MedicineService.list_for_pharmacy(db, pharmacy.id)),
        "staff": _dump(StaffRead, PharmacyService.list_staff(db, pharmacy.id)),
        "sales": _dump(SaleRead, SaleService.list_for_pharmacy(db, pharmacy.id)),
        "stats": MedicineService.inventory_stats(db, pharmacy.id),
    }


def super_admin_view(db: Session, user: User) -> dict:
    return {
        "pharmacies": _dump(PharmacyRead, PharmacyService.list_all(db)),
        "users": AdminService.list_users(db),
        "medicines": _dump(MedicineRead, MedicineService.list_all(db)),
        "analytics": AdminService.analytics(db),
        "activity": _dump(ActivityLogRead, AdminService.activity_logs(db, RECENT_ACTIVITY)),
    }


def provider_view(db: Session, user: User) -> dict:
    profile = user.provider_profile
    return {
        "profile": ProviderProfileRead.model_validate(profile).model_dump(mode="json") if profile else None,
        "prescriptions": _dump(PrescriptionRead, ProviderService.issued_prescriptions(db, user)),
    }


VIEW_BUILDERS = {
    UserRole.PATIENT: patient_view,
    UserRole.PHARMACY_ADMIN: pharmacy_admin_view,
    UserRole.SUPER_ADMIN: super_admin_view,
    UserRole.HEALTHCARE_PROVIDER: provider_view,
}


class DashboardService:

    @staticmethod
    def for_user(db: Session, user: User, policy: str | None = None) -> dict:
        role, build = dispatch(user.role, VIEW_BUILDERS, policy)
        return {"role": role.value, "view": build.__name__, "data": build(db, user)}
