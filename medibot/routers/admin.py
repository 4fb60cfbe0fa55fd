"""Super admin console endpoints."""
import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from medibot.cache.invalidation import invalidate
from medibot.core.database import get_db
from medibot.dependencies.auth import get_current_super_admin
from medibot.dependencies.rate_limit import rate_limit
from medibot.models.user import User
from medibot.schemas.admin import (
    AdminUserCreate, AdminUserUpdate, BulkDeleteRequest, BulkRoleUpdateRequest,
    UserListItem, ActivityLogRead, StatusDecision,
)
from medibot.schemas.pharmacy import (
    PharmacyCreate, PharmacyUpdate, PharmacyRead, StaffCreate, StaffUpdate, StaffRead,
    MedicineRead, StockUpdate,
)
from medibot.services.admin_service import AdminService
from medibot.services.medicine_service import MedicineService
from medibot.services.pharmacy_service import PharmacyService
from medibot.services.report_service import export_users_csv
from medibot.utils.helpers import attachment_headers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


# ---- pharmacies ----

@router.get("/pharmacies", response_model=list[PharmacyRead])
async def list_pharmacies(
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    return PharmacyService.list_all(db)


@router.post("/pharmacies", status_code=201)
async def create_pharmacy(
    payload: PharmacyCreate,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.create(db, admin, payload.model_dump())
    return {
        "success": True,
        "data": PharmacyRead.model_validate(pharmacy),
        "invalidates": await invalidate("create_pharmacy"),
    }


@router.put("/pharmacies/{pharmacy_id}")
async def update_pharmacy(
    pharmacy_id: int,
    payload: PharmacyUpdate,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.update(db, admin, pharmacy_id, payload.model_dump(exclude_unset=True))
    return {
        "success": True,
        "data": PharmacyRead.model_validate(pharmacy),
        "invalidates": await invalidate("update_pharmacy"),
    }


@router.delete("/pharmacies/{pharmacy_id}")
async def delete_pharmacy(
    pharmacy_id: int,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    PharmacyService.delete(db, admin, pharmacy_id)
    return {"success": True, "data": None, "invalidates": await invalidate("delete_pharmacy")}


@router.post("/pharmacies/{pharmacy_id}/approve")
async def approve_pharmacy(
    pharmacy_id: int,
    payload: StatusDecision | None = None,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.approve(db, admin, pharmacy_id, payload.notes if payload else None)
    return {
        "success": True,
        "data": PharmacyRead.model_validate(pharmacy),
        "invalidates": await invalidate("approve_pharmacy"),
    }


@router.post("/pharmacies/{pharmacy_id}/reject")
async def reject_pharmacy(
    pharmacy_id: int,
    payload: StatusDecision | None = None,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.reject(db, admin, pharmacy_id, payload.notes if payload else None)
    return {
        "success": True,
        "data": PharmacyRead.model_validate(pharmacy),
        "invalidates": await invalidate("reject_pharmacy"),
    }


# ---- staff ----

@router.get("/pharmacies/{pharmacy_id}/staff", response_model=list[StaffRead])
async def list_staff(
    pharmacy_id: int,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    PharmacyService.get(db, pharmacy_id)
    return PharmacyService.list_staff(db, pharmacy_id)


@router.post("/pharmacies/{pharmacy_id}/staff", status_code=201)
async def add_staff(
    pharmacy_id: int,
    payload: StaffCreate,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    staff = PharmacyService.add_staff(db, admin, pharmacy_id, payload.model_dump())
    return {
        "success": True,
        "data": StaffRead.model_validate(staff),
        "invalidates": await invalidate("add_staff"),
    }


@router.put("/pharmacies/{pharmacy_id}/staff/{staff_id}")
async def update_staff(
    pharmacy_id: int,
    staff_id: int,
    payload: StaffUpdate,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    staff = PharmacyService.update_staff(db, admin, pharmacy_id, staff_id, payload.model_dump(exclude_unset=True))
    return {
        "success": True,
        "data": StaffRead.model_validate(staff),
        "invalidates": await invalidate("update_staff"),
    }


@router.delete("/pharmacies/{pharmacy_id}/staff/{staff_id}")
async def delete_staff(
    pharmacy_id: int,
    staff_id: int,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    PharmacyService.delete_staff(db, admin, pharmacy_id, staff_id)
    return {"success": True, "data": None, "invalidates": await invalidate("delete_staff")}


# ---- medicines ----

@router.get("/medicines", response_model=list[MedicineRead])
async def list_medicines(
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    return MedicineService.list_all(db)


@router.put("/medicines/{medicine_id}/stock")
async def set_stock(
    medicine_id: int,
    payload: StockUpdate,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    medicine = MedicineService.set_stock(db, medicine_id, payload.stock)
    return {
        "success": True,
        "data": MedicineRead.model_validate(medicine),
        "invalidates": await invalidate("set_stock"),
    }


# ---- users ----

@router.get("/users", response_model=list[UserListItem])
async def list_users(
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    return AdminService.list_users(db)


@router.get("/users/export", response_class=PlainTextResponse)
async def export_users(
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    body = export_users_csv(AdminService.list_users(db))
    return PlainTextResponse(
        body,
        media_type="text/csv",
        headers=attachment_headers(f"users-{date.today().isoformat()}.csv"),
    )


@router.post("/users", status_code=201)
async def create_user(
    payload: AdminUserCreate,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    user = AdminService.create_user(db, admin, payload.model_dump())
    return {
        "success": True,
        "data": AdminService.user_row(user),
        "invalidates": await invalidate("create_user"),
    }


@router.put("/users/{user_id}")
async def update_user(
    user_id: int,
    payload: AdminUserUpdate,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    user = AdminService.update_user(db, admin, user_id, payload.model_dump(exclude_unset=True))
    return {
        "success": True,
        "data": AdminService.user_row(user),
        "invalidates": await invalidate("update_user"),
    }


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    try:
        AdminService.delete_user(db, admin, user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "data": None, "invalidates": await invalidate("delete_user")}


@router.post("/users/bulk-delete")
async def bulk_delete_users(
    payload: BulkDeleteRequest,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    deleted = AdminService.bulk_delete(db, admin, payload.user_ids)
    return {
        "success": True,
        "data": {"deleted": deleted},
        "invalidates": await invalidate("bulk_delete_users"),
    }


@router.post("/users/bulk-role")
async def bulk_update_role(
    payload: BulkRoleUpdateRequest,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    updated = AdminService.bulk_update_role(db, admin, payload.user_ids, payload.role)
    return {
        "success": True,
        "data": {"updated": updated},
        "invalidates": await invalidate("bulk_update_role"),
    }


@router.post("/users/{user_id}/reset-password")
async def reset_user_password(
    user_id: int,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit),
):
    try:
        result = AdminService.send_password_reset(db, admin, user_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Password reset for user %s failed", user_id, exc_info=e)
        raise HTTPException(status_code=502, detail="Could not send the password reset email")
    return {"success": True, "data": result}


# ---- analytics ----

@router.get("/analytics")
async def analytics(
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    return {"success": True, "data": AdminService.analytics(db)}


@router.get("/activity", response_model=list[ActivityLogRead])
async def activity_log(
    limit: int = 50,
    admin: User = Depends(get_current_super_admin),
    db: Session = Depends(get_db),
):
    return AdminService.activity_logs(db, min(max(limit, 1), 200))
