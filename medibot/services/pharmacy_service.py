from datetime import datetime
import logging

from sqlalchemy.orm import Session

from medibot.core.constants import PharmacyStatus, StaffStatus
from medibot.models.audit import AdminActivityLog
from medibot.models.pharmacy import Pharmacy, Staff
from medibot.models.pharmacy_admin import PharmacyAdminProfile
from medibot.models.user import User
from medibot.utils.errors import (
    NotFoundError, PharmacyNotAssignedError, InvalidStatusTransition,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "location", "email", "phone", "latitude", "longitude")
STAFF_FIELDS = ("name", "email", "phone", "role", "status")


def log_activity(db: Session, admin: User, entity: str, entity_id, action: str, details: str | None = None):
    """Add an admin activity entry. The caller commits."""
    entry = AdminActivityLog(
        admin_id=str(admin.id),
        activity=f"{entity}:{entity_id}:{action}",
        details=details,
    )
    db.add(entry)
    return entry


class PharmacyService:

    # ---- pharmacy admin ----

    @staticmethod
    def admin_profile(user: User) -> PharmacyAdminProfile:
        profile = user.pharmacy_admin_profile
        if profile is None:
            raise PharmacyNotAssignedError("No pharmacy admin profile for this account")
        return profile

    @staticmethod
    def get_admin_pharmacy(db: Session, user: User) -> Pharmacy:
        """The pharmacy assigned to a pharmacy admin, required for scoped operations."""
        profile = PharmacyService.admin_profile(user)
        if profile.pharmacy_id is None:
            raise PharmacyNotAssignedError()
        pharmacy = db.query(Pharmacy).filter(Pharmacy.id == profile.pharmacy_id).first()
        if not pharmacy:
            raise PharmacyNotAssignedError()
        return pharmacy

    @staticmethod
    def find_admin_pharmacy(db: Session, user: User) -> Pharmacy | None:
        profile = user.pharmacy_admin_profile
        if profile is None or profile.pharmacy_id is None:
            return None
        return db.query(Pharmacy).filter(Pharmacy.id == profile.pharmacy_id).first()

    @staticmethod
    def register_for_admin(db: Session, user: User, data: dict) -> Pharmacy:
        """Self-registration: the new pharmacy awaits approval and is assigned to the admin."""
        profile = PharmacyService.admin_profile(user)
        if profile.pharmacy_id is not None:
            raise ValueError("A pharmacy is already assigned to this account")

        pharmacy = Pharmacy(**_pick(data, EDITABLE_FIELDS), status=PharmacyStatus.PENDING.value)
        db.add(pharmacy)
        db.flush()
        profile.pharmacy_id = pharmacy.id
        db.commit()
        db.refresh(pharmacy)

        logger.info("Pharmacy %s registered by user %s", pharmacy.id, user.id)
        return pharmacy

    @staticmethod
    def update_admin_pharmacy(db: Session, user: User, data: dict) -> Pharmacy:
        pharmacy = PharmacyService.get_admin_pharmacy(db, user)
        for field, value in _pick(data, EDITABLE_FIELDS).items():
            setattr(pharmacy, field, value)
        db.commit()
        db.refresh(pharmacy)
        return pharmacy

    # ---- super admin ----

    @staticmethod
    def list_all(db: Session):
        return db.query(Pharmacy).order_by(Pharmacy.created_at.desc(), Pharmacy.id.desc()).all()

    @staticmethod
    def get(db: Session, pharmacy_id: int) -> Pharmacy:
        pharmacy = db.query(Pharmacy).filter(Pharmacy.id == pharmacy_id).first()
        if not pharmacy:
            raise NotFoundError("Pharmacy not found")
        return pharmacy

    @staticmethod
    def create(db: Session, admin: User, data: dict) -> Pharmacy:
        pharmacy = Pharmacy(**_pick(data, EDITABLE_FIELDS), status=PharmacyStatus.PENDING.value)
        db.add(pharmacy)
        db.flush()
        log_activity(db, admin, "pharmacy", pharmacy.id, "create", pharmacy.name)
        db.commit()
        db.refresh(pharmacy)
        return pharmacy

    @staticmethod
    def update(db: Session, admin: User, pharmacy_id: int, data: dict) -> Pharmacy:
        pharmacy = PharmacyService.get(db, pharmacy_id)
        changes = _pick(data, EDITABLE_FIELDS)
        for field, value in changes.items():
            setattr(pharmacy, field, value)
        log_activity(db, admin, "pharmacy", pharmacy.id, "update", ", ".join(sorted(changes)))
        db.commit()
        db.refresh(pharmacy)
        return pharmacy

    @staticmethod
    def delete(db: Session, admin: User, pharmacy_id: int) -> None:
        pharmacy = PharmacyService.get(db, pharmacy_id)
        for profile in list(pharmacy.admins):
            profile.pharmacy_id = None
        log_activity(db, admin, "pharmacy", pharmacy.id, "delete", pharmacy.name)
        db.delete(pharmacy)
        db.commit()

    @staticmethod
    def set_status(db: Session, admin: User, pharmacy_id: int, target: PharmacyStatus, notes: str | None = None) -> Pharmacy:
        """Decide a pending pharmacy. Only ``pending`` may move to approved or rejected."""
        pharmacy = PharmacyService.get(db, pharmacy_id)
        if pharmacy.status != PharmacyStatus.PENDING.value or target is PharmacyStatus.PENDING:
            raise InvalidStatusTransition(pharmacy.status, target.value)

        pharmacy.status = target.value
        pharmacy.status_changed_by = admin.id
        pharmacy.status_changed_at = datetime.utcnow()
        action = "approve" if target is PharmacyStatus.APPROVED else "reject"
        log_activity(db, admin, "pharmacy", pharmacy.id, action, notes)
        db.commit()
        db.refresh(pharmacy)

        logger.info("Pharmacy %s %s by admin %s", pharmacy.id, target.value, admin.id)
        return pharmacy

    @staticmethod
    def approve(db: Session, admin: User, pharmacy_id: int, notes: str | None = None) -> Pharmacy:
        return PharmacyService.set_status(db, admin, pharmacy_id, PharmacyStatus.APPROVED, notes)

    @staticmethod
    def reject(db: Session, admin: User, pharmacy_id: int, notes: str | None = None) -> Pharmacy:
        return PharmacyService.set_status(db, admin, pharmacy_id, PharmacyStatus.REJECTED, notes)

    # ---- staff ----

    @staticmethod
    def list_staff(db: Session, pharmacy_id: int):
        return (
            db.query(Staff)
            .filter(Staff.pharmacy_id == pharmacy_id)
            .order_by(Staff.name.asc())
            .all()
        )

    @staticmethod
    def add_staff(db: Session, admin: User, pharmacy_id: int, data: dict) -> Staff:
        PharmacyService.get(db, pharmacy_id)
        fields = _pick(data, STAFF_FIELDS)
        fields["status"] = StaffStatus.ACTIVE.value
        staff = Staff(pharmacy_id=pharmacy_id, **fields)
        db.add(staff)
        db.flush()
        log_activity(db, admin, "staff", staff.id, "create", staff.name)
        db.commit()
        db.refresh(staff)
        return staff

    @staticmethod
    def get_staff(db: Session, pharmacy_id: int, staff_id: int) -> Staff:
        staff = db.query(Staff).filter(Staff.id == staff_id, Staff.pharmacy_id == pharmacy_id).first()
        if not staff:
            raise NotFoundError("Staff member not found")
        return staff

    @staticmethod
    def update_staff(db: Session, admin: User, pharmacy_id: int, staff_id: int, data: dict) -> Staff:
        staff = PharmacyService.get_staff(db, pharmacy_id, staff_id)
        for field, value in _pick(data, STAFF_FIELDS).items():
            setattr(staff, field, value)
        log_activity(db, admin, "staff", staff.id, "update")
        db.commit()
        db.refresh(staff)
        return staff

    @staticmethod
    def delete_staff(db: Session, admin: User, pharmacy_id: int, staff_id: int) -> None:
        staff = PharmacyService.get_staff(db, pharmacy_id, staff_id)
        log_activity(db, admin, "staff", staff.id, "delete", staff.name)
        db.delete(staff)
        db.commit()


def _pick(data: dict, fields) -> dict:
    return {k: v for k, v in data.items() if k in fields}
