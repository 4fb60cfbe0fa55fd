"""Role profiles: one per user, created on sign-up for the user's role."""
from sqlalchemy.orm import Session

from medibot.core.constants import UserRole
from medibot.models.user import User
from medibot.models.patient import PatientProfile
from medibot.models.pharmacy_admin import PharmacyAdminProfile
from medibot.models.admin import SuperAdminProfile
from medibot.models.provider import HealthcareProviderProfile

PROFILE_MODELS = {
    UserRole.PATIENT: PatientProfile,
    UserRole.PHARMACY_ADMIN: PharmacyAdminProfile,
    UserRole.SUPER_ADMIN: SuperAdminProfile,
    UserRole.HEALTHCARE_PROVIDER: HealthcareProviderProfile,
}

PROFILE_ATTRS = {
    UserRole.PATIENT: "patient_profile",
    UserRole.PHARMACY_ADMIN: "pharmacy_admin_profile",
    UserRole.SUPER_ADMIN: "super_admin_profile",
    UserRole.HEALTHCARE_PROVIDER: "provider_profile",
}


def default_profile_name(email: str) -> str:
    return email.split("@", 1)[0] or "User"


class ProfileService:
    @staticmethod
    def create_for_role(
        db: Session,
        user: User,
        role: UserRole,
        name: str | None = None,
        pharmacy_id: int | None = None,
    ):
        """Add the profile row for ``role``. The caller commits."""
        name = name or default_profile_name(user.email)
        if role is UserRole.PATIENT:
            profile = PatientProfile(user_id=user.id, name=name, medical_history="", symptoms="")
        elif role is UserRole.PHARMACY_ADMIN:
            profile = PharmacyAdminProfile(user_id=user.id, name=name, pharmacy_id=pharmacy_id)
        elif role is UserRole.SUPER_ADMIN:
            profile = SuperAdminProfile(user_id=user.id, name=name, permissions=["all"])
        elif role is UserRole.HEALTHCARE_PROVIDER:
            profile = HealthcareProviderProfile(
                user_id=user.id, name=name, specialty="General Practice", license_number=""
            )
        else:
            raise ValueError(f"Unsupported role: {role}")
        db.add(profile)
        return profile

    @staticmethod
    def get_profile(user: User):
        """Return the profile for the user's current role, if any."""
        try:
            role = UserRole(user.role)
        except ValueError:
            return None
        return getattr(user, PROFILE_ATTRS[role])

    @staticmethod
    def drop_profiles(db: Session, user: User) -> None:
        for attr in PROFILE_ATTRS.values():
            profile = getattr(user, attr)
            if profile is not None:
                db.delete(profile)
                setattr(user, attr, None)

    @staticmethod
    def profile_name(user: User) -> str | None:
        profile = ProfileService.get_profile(user)
        return getattr(profile, "name", None) if profile else None
