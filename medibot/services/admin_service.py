"""Super admin user management, analytics and activity log."""
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from medibot.core.constants import UserRole, PharmacyStatus
from medibot.models.audit import AdminActivityLog
from medibot.models.medicine import Medicine
from medibot.models.pharmacy import Pharmacy
from medibot.models.sale import Sale
from medibot.models.user import User
from medibot.services.auth_service import AuthService
from medibot.services.pharmacy_service import log_activity
from medibot.services.profile_service import ProfileService
from medibot.utils.errors import NotFoundError, UserNotFoundError

logger = logging.getLogger(__name__)

TOP_MEDICINES = 10
CHART_LABEL_LENGTH = 15


def chart_label(name: str) -> str:
    return name[:CHART_LABEL_LENGTH] + "..." if len(name) > CHART_LABEL_LENGTH else name


class AdminService:

    @staticmethod
    def list_users(db: Session) -> list[dict]:
        users = (
            db.query(User)
            .filter(User.is_deleted == False)
            .order_by(User.created_at.desc(), User.id.desc())
            .all()
        )
        return [AdminService.user_row(user) for user in users]

    @staticmethod
    def user_row(user: User) -> dict:
        admin_profile = user.pharmacy_admin_profile
        pharmacy = admin_profile.pharmacy if admin_profile else None
        return {
            "user_id": user.id,
            "email": user.email,
            "role": user.role,
            "name": ProfileService.profile_name(user),
            "pharmacy_id": pharmacy.id if pharmacy else None,
            "pharmacy_name": pharmacy.name if pharmacy else None,
            "created_at": user.created_at,
        }

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id, User.is_deleted == False).first()
        if not user:
            raise UserNotFoundError("User not found")
        return user

    @staticmethod
    def _check_pharmacy(db: Session, pharmacy_id: int | None):
        if pharmacy_id is not None and not db.query(Pharmacy.id).filter(Pharmacy.id == pharmacy_id).first():
            raise NotFoundError("Pharmacy not found")

    @staticmethod
    def create_user(db: Session, admin: User, data: dict) -> User:
        role = UserRole(data["role"])
        pharmacy_id = data.get("pharmacy_id") if role is UserRole.PHARMACY_ADMIN else None
        AdminService._check_pharmacy(db, pharmacy_id)

        user = AuthService.sign_up(
            db,
            email=data["email"],
            password=data["password"],
            role=role.value,
            name=data.get("name"),
            pharmacy_id=pharmacy_id,
        )
        log_activity(db, admin, "user", user.id, "create", role.value)
        db.commit()
        return user

    @staticmethod
    def update_user(db: Session, admin: User, user_id: int, data: dict) -> User:
        """Change role, name or pharmacy.

        A role change replaces the profile (the name carries over); leaving
        ``pharmacy_admin`` drops the pharmacy assignment with the old profile.
        """
        user = AdminService.get_user(db, user_id)
        name = data.get("name") or ProfileService.profile_name(user)

        new_role = data.get("role")
        if new_role and new_role != user.role:
            role = UserRole(new_role)
            pharmacy_id = data.get("pharmacy_id") if role is UserRole.PHARMACY_ADMIN else None
            AdminService._check_pharmacy(db, pharmacy_id)

            ProfileService.drop_profiles(db, user)
            db.flush()
            user.role = role.value
            ProfileService.create_for_role(db, user, role, name=name, pharmacy_id=pharmacy_id)
            log_activity(db, admin, "user", user.id, "role", role.value)
        else:
            profile = ProfileService.get_profile(user)
            if profile is not None and data.get("name"):
                profile.name = data["name"]
            if "pharmacy_id" in data and user.role == UserRole.PHARMACY_ADMIN.value:
                AdminService._check_pharmacy(db, data["pharmacy_id"])
                user.pharmacy_admin_profile.pharmacy_id = data["pharmacy_id"]
            log_activity(db, admin, "user", user.id, "update")

        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def delete_user(db: Session, admin: User, user_id: int) -> None:
        if int(user_id) == admin.id:
            raise ValueError("You cannot delete your own account")
        user = AdminService.get_user(db, user_id)
        log_activity(db, admin, "user", user.id, "delete", user.email)
        db.delete(user)
        db.commit()

    @staticmethod
    def bulk_delete(db: Session, admin: User, user_ids: list[int]) -> int:
        ids = {int(uid) for uid in user_ids} - {admin.id}
        users = db.query(User).filter(User.id.in_(ids)).all()
        for user in users:
            log_activity(db, admin, "user", user.id, "delete", user.email)
            db.delete(user)
        db.commit()
        logger.info("Admin %s deleted %d user(s)", admin.id, len(users))
        return len(users)

    @staticmethod
    def bulk_update_role(db: Session, admin: User, user_ids: list[int], role: str) -> int:
        updated = 0
        for user_id in user_ids:
            user = db.query(User).filter(User.id == user_id, User.is_deleted == False).first()
            if not user or user.role == role:
                continue
            AdminService.update_user(db, admin, user.id, {"role": role})
            updated += 1
        return updated

    @staticmethod
    def send_password_reset(db: Session, admin: User, user_id: int) -> dict:
        user = AdminService.get_user(db, user_id)
        result = AuthService.send_password_reset(db, user.email)
        log_activity(db, admin, "user", user.id, "reset_password")
        db.commit()
        return result

    @staticmethod
    def analytics(db: Session) -> dict:
        users_by_role = {role.value: 0 for role in UserRole}
        for role, count in (
            db.query(User.role, func.count(User.id))
            .filter(User.is_deleted == False)
            .group_by(User.role)
            .all()
        ):
            users_by_role[role or "unassigned"] = count

        pharmacy_status = {status.value: 0 for status in PharmacyStatus}
        for status, count in db.query(Pharmacy.status, func.count(Pharmacy.id)).group_by(Pharmacy.status).all():
            pharmacy_status[status] = count

        top = (
            db.query(Medicine)
            .order_by(Medicine.stock.desc(), Medicine.name.asc())
            .limit(TOP_MEDICINES)
            .all()
        )
        sales_count, sales_amount = db.query(
            func.count(Sale.id), func.coalesce(func.sum(Sale.total_amount), 0)
        ).one()

        return {
            "users_by_role": users_by_role,
            "pharmacy_status": pharmacy_status,
            "top_medicines": [{"name": chart_label(m.name), "stock": m.stock} for m in top],
            "totals": {
                "users": sum(users_by_role.values()),
                "pharmacies": sum(pharmacy_status.values()),
                "medicines": db.query(func.count(Medicine.id)).scalar(),
                "sales": int(sales_count),
                "sales_amount": round(float(sales_amount), 2),
            },
        }

    @staticmethod
    def activity_logs(db: Session, limit: int = 50):
        return (
            db.query(AdminActivityLog)
            .order_by(AdminActivityLog.created_at.desc(), AdminActivityLog.id.desc())
            .limit(limit)
            .all()
        )
