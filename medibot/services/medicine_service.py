from sqlalchemy import func
from sqlalchemy.orm import Session

from medibot.core.config import settings
from medibot.models.medicine import Medicine
from medibot.models.sale import Sale
from medibot.utils.errors import NotFoundError

MEDICINE_FIELDS = ("name", "description", "price", "stock")


class MedicineService:

    @staticmethod
    def list_for_pharmacy(db: Session, pharmacy_id: int):
        return (
            db.query(Medicine)
            .filter(Medicine.pharmacy_id == pharmacy_id)
            .order_by(Medicine.name.asc())
            .all()
        )

    @staticmethod
    def list_all(db: Session):
        return db.query(Medicine).order_by(Medicine.name.asc()).all()

    @staticmethod
    def get(db: Session, medicine_id: int, pharmacy_id: int | None = None) -> Medicine:
        query = db.query(Medicine).filter(Medicine.id == medicine_id)
        if pharmacy_id is not None:
            query = query.filter(Medicine.pharmacy_id == pharmacy_id)
        medicine = query.first()
        if not medicine:
            raise NotFoundError("Medicine not found")
        return medicine

    @staticmethod
    def add(db: Session, pharmacy_id: int, data: dict) -> Medicine:
        medicine = Medicine(
            pharmacy_id=pharmacy_id,
            **{k: v for k, v in data.items() if k in MEDICINE_FIELDS},
        )
        db.add(medicine)
        db.commit()
        db.refresh(medicine)
        return medicine

    @staticmethod
    def update(db: Session, pharmacy_id: int, medicine_id: int, data: dict) -> Medicine:
        medicine = MedicineService.get(db, medicine_id, pharmacy_id)
        for field, value in data.items():
            if field in MEDICINE_FIELDS and value is not None:
                setattr(medicine, field, value)
        db.commit()
        db.refresh(medicine)
        return medicine

    @staticmethod
    def delete(db: Session, pharmacy_id: int, medicine_id: int) -> None:
        medicine = MedicineService.get(db, medicine_id, pharmacy_id)
        has_sales = db.query(Sale.id).filter(Sale.medicine_id == medicine.id).first()
        if has_sales:
            raise ValueError("Medicine has recorded sales; delete the sales first")
        db.delete(medicine)
        db.commit()

    @staticmethod
    def set_stock(db: Session, medicine_id: int, stock: int) -> Medicine:
        if stock < 0:
            raise ValueError("Stock cannot be negative")
        medicine = MedicineService.get(db, medicine_id)
        medicine.stock = stock
        db.commit()
        db.refresh(medicine)
        return medicine

    @staticmethod
    def inventory_stats(db: Session, pharmacy_id: int) -> dict:
        """Inventory value, low-stock count and stock buckets for one pharmacy."""
        medicines = MedicineService.list_for_pharmacy(db, pharmacy_id)
        threshold = settings.LOW_STOCK_THRESHOLD
        distribution = {"low": 0, "medium": 0, "high": 0}
        for medicine in medicines:
            if medicine.stock <= 5:
                distribution["low"] += 1
            elif medicine.stock <= 20:
                distribution["medium"] += 1
            else:
                distribution["high"] += 1

        sales_count, sales_amount = (
            db.query(func.count(Sale.id), func.coalesce(func.sum(Sale.total_amount), 0))
            .filter(Sale.pharmacy_id == pharmacy_id)
            .one()
        )
        return {
            "total_medicines": len(medicines),
            "inventory_value": round(sum(m.inventory_value for m in medicines), 2),
            "low_stock_count": sum(1 for m in medicines if m.stock <= threshold),
            "stock_distribution": distribution,
            "total_sales": int(sales_count),
            "sales_amount": round(float(sales_amount), 2),
        }
