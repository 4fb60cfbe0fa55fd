"""Pharmacy admin endpoints, scoped to the caller's assigned pharmacy."""
from datetime import date
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from medibot.cache.invalidation import invalidate
from medibot.core.database import get_db
from medibot.dependencies.auth import get_current_pharmacy_admin
from medibot.models.user import User
from medibot.schemas.pharmacy import (
    PharmacyCreate, PharmacyUpdate, PharmacyRead, StaffRead,
    MedicineCreate, MedicineUpdate, MedicineRead,
    SaleCreate, SaleUpdate, SaleRead, PharmacyStats,
)
from medibot.services.medicine_service import MedicineService
from medibot.services.pharmacy_service import PharmacyService
from medibot.services.report_service import (
    render_invoice, render_pharmacy_report, invoice_filename, report_filename,
)
from medibot.services.sale_service import SaleService
from medibot.utils.helpers import attachment_headers

router = APIRouter(prefix="/pharmacy", tags=["pharmacy"])


@router.get("")
async def my_pharmacy(
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.find_admin_pharmacy(db, user)
    return {"success": True, "data": PharmacyRead.model_validate(pharmacy) if pharmacy else None}


@router.post("", status_code=201)
async def register_pharmacy(
    payload: PharmacyCreate,
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    """Register the caller's pharmacy. It stays pending until a super admin approves it."""
    try:
        pharmacy = PharmacyService.register_for_admin(db, user, payload.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "success": True,
        "data": PharmacyRead.model_validate(pharmacy),
        "invalidates": await invalidate("register_pharmacy"),
    }


@router.put("")
async def update_pharmacy(
    payload: PharmacyUpdate,
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.update_admin_pharmacy(db, user, payload.model_dump(exclude_unset=True))
    return {
        "success": True,
        "data": PharmacyRead.model_validate(pharmacy),
        "invalidates": await invalidate("update_pharmacy"),
    }


@router.get("/stats", response_model=PharmacyStats)
async def stats(
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.get_admin_pharmacy(db, user)
    return MedicineService.inventory_stats(db, pharmacy.id)


@router.get("/staff", response_model=list[StaffRead])
async def list_staff(
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.get_admin_pharmacy(db, user)
    return PharmacyService.list_staff(db, pharmacy.id)


# ---- medicines ----

@router.get("/medicines", response_model=list[MedicineRead])
async def list_medicines(
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.get_admin_pharmacy(db, user)
    return MedicineService.list_for_pharmacy(db, pharmacy.id)


@router.post("/medicines", status_code=201)
async def add_medicine(
    payload: MedicineCreate,
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.get_admin_pharmacy(db, user)
    medicine = MedicineService.add(db, pharmacy.id, payload.model_dump())
    return {
        "success": True,
        "data": MedicineRead.model_validate(medicine),
        "invalidates": await invalidate("add_medicine"),
    }


@router.put("/medicines/{medicine_id}")
async def update_medicine(
    medicine_id: int,
    payload: MedicineUpdate,
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.get_admin_pharmacy(db, user)
    medicine = MedicineService.update(db, pharmacy.id, medicine_id, payload.model_dump(exclude_unset=True))
    return {
        "success": True,
        "data": MedicineRead.model_validate(medicine),
        "invalidates": await invalidate("update_medicine"),
    }


@router.delete("/medicines/{medicine_id}")
async def delete_medicine(
    medicine_id: int,
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.get_admin_pharmacy(db, user)
    try:
        MedicineService.delete(db, pharmacy.id, medicine_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "data": None, "invalidates": await invalidate("delete_medicine")}


# ---- sales ----

@router.get("/sales", response_model=list[SaleRead])
async def list_sales(
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.get_admin_pharmacy(db, user)
    return SaleService.list_for_pharmacy(db, pharmacy.id)


@router.post("/sales", status_code=201)
async def record_sale(
    payload: SaleCreate,
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    """Record a sale of one or more medicines; stock is deducted atomically."""
    pharmacy = PharmacyService.get_admin_pharmacy(db, user)
    try:
        sales = SaleService.record_sale(
            db,
            pharmacy.id,
            [item.model_dump() for item in payload.items],
            customer_name=payload.customer_name,
            customer_phone=payload.customer_phone,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "success": True,
        "data": [SaleRead.model_validate(s) for s in sales],
        "invalidates": await invalidate("record_sale"),
    }


@router.put("/sales/{sale_id}")
async def edit_sale(
    sale_id: int,
    payload: SaleUpdate,
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.get_admin_pharmacy(db, user)
    try:
        sale = SaleService.edit_sale(db, pharmacy.id, sale_id, payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "success": True,
        "data": SaleRead.model_validate(sale),
        "invalidates": await invalidate("edit_sale"),
    }


@router.delete("/sales/{sale_id}")
async def delete_sale(
    sale_id: int,
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.get_admin_pharmacy(db, user)
    SaleService.delete_sale(db, pharmacy.id, sale_id)
    return {"success": True, "data": None, "invalidates": await invalidate("delete_sale")}


# ---- documents ----

@router.get("/sales/{sale_id}/invoice", response_class=PlainTextResponse)
async def download_invoice(
    sale_id: int,
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.get_admin_pharmacy(db, user)
    sale = SaleService.get(db, pharmacy.id, sale_id)
    return PlainTextResponse(
        render_invoice(sale, pharmacy),
        headers=attachment_headers(invoice_filename(sale)),
    )


@router.get("/report", response_class=PlainTextResponse)
async def download_report(
    user: User = Depends(get_current_pharmacy_admin),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.get_admin_pharmacy(db, user)
    today = date.today()
    body = render_pharmacy_report(
        pharmacy,
        MedicineService.list_for_pharmacy(db, pharmacy.id),
        SaleService.list_for_pharmacy(db, pharmacy.id),
        MedicineService.inventory_stats(db, pharmacy.id),
        day=today,
    )
    return PlainTextResponse(body, headers=attachment_headers(report_filename(today)))
