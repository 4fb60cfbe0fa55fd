"""Sales and the stock movements they cause.

Every public operation here runs in a single transaction: the sale rows and
the stock changes commit together or are rolled back together. Stock is only
ever decremented conditionally (``WHERE stock >= quantity``) so concurrent
sales cannot drive it negative.
"""
import logging

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from medibot.models.medicine import Medicine
from medibot.models.sale import Sale
from medibot.services.medicine_service import MedicineService
from medibot.utils.errors import InsufficientStockError, NotFoundError

logger = logging.getLogger(__name__)


class SaleService:

    @staticmethod
    def _deduct(db: Session, medicine_id: int, quantity: int) -> None:
        result = db.execute(
            update(Medicine)
            .where(Medicine.id == medicine_id, Medicine.stock >= quantity)
            .values(stock=Medicine.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InsufficientStockError(medicine_id, quantity)

    @staticmethod
    def _restore(db: Session, medicine_id: int, quantity: int) -> None:
        db.execute(
            update(Medicine)
            .where(Medicine.id == medicine_id)
            .values(stock=Medicine.stock + quantity)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def list_for_pharmacy(db: Session, pharmacy_id: int, limit: int | None = None):
        query = (
            db.query(Sale)
            .filter(Sale.pharmacy_id == pharmacy_id)
            .order_by(Sale.created_at.desc(), Sale.id.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get(db: Session, pharmacy_id: int, sale_id: int, for_update: bool = False) -> Sale:
        """Load a sale of ``pharmacy_id``. ``for_update`` locks the row until commit."""
        query = db.query(Sale).filter(Sale.id == sale_id, Sale.pharmacy_id == pharmacy_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        sale = query.first()
        if not sale:
            raise NotFoundError("Sale not found")
        return sale

    @staticmethod
    def record_sale(
        db: Session,
        pharmacy_id: int,
        items: list[dict],
        customer_name: str | None = None,
        customer_phone: str | None = None,
    ) -> list[Sale]:
        """Record one sale row per item and deduct stock, all or nothing."""
        sales = []
        try:
            for item in items:
                medicine = MedicineService.get(db, item["medicine_id"], pharmacy_id)
                quantity = int(item["quantity"])
                if quantity <= 0:
                    raise ValueError("Quantity must be positive")

                SaleService._deduct(db, medicine.id, quantity)
                sale = Sale(
                    pharmacy_id=pharmacy_id,
                    medicine_id=medicine.id,
                    quantity=quantity,
                    unit_price=medicine.price,
                    total_amount=round(medicine.price * quantity, 2),
                    customer_name=customer_name,
                    customer_phone=customer_phone,
                )
                db.add(sale)
                sales.append(sale)
            db.commit()
        except Exception:
            db.rollback()
            raise

        for sale in sales:
            db.refresh(sale)
            db.refresh(sale.medicine)
        logger.info("Recorded %d sale line(s) for pharmacy %s", len(sales), pharmacy_id)
        return sales

    @staticmethod
    def edit_sale(db: Session, pharmacy_id: int, sale_id: int, data: dict) -> Sale:
        """Move a sale to a new medicine/quantity.

        The old quantity goes back to the old medicine and the new quantity is
        taken from the new medicine in the same transaction, so the net effect
        is a single deduction of the new quantity. The recorded unit price is
        kept unless the medicine changes.
        """
        try:
            sale = SaleService.get(db, pharmacy_id, sale_id, for_update=True)
            medicine = MedicineService.get(db, data.get("medicine_id", sale.medicine_id), pharmacy_id)
            quantity = int(data.get("quantity", sale.quantity))
            if quantity <= 0:
                raise ValueError("Quantity must be positive")
            old_medicine_id = sale.medicine_id

            SaleService._restore(db, old_medicine_id, sale.quantity)
            SaleService._deduct(db, medicine.id, quantity)

            if medicine.id != old_medicine_id:
                sale.unit_price = medicine.price
            sale.medicine_id = medicine.id
            sale.quantity = quantity
            sale.total_amount = round(sale.unit_price * quantity, 2)
            if "customer_name" in data:
                sale.customer_name = data["customer_name"]
            if "customer_phone" in data:
                sale.customer_phone = data["customer_phone"]
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(sale)
        for medicine_id in {old_medicine_id, medicine.id}:
            db.refresh(MedicineService.get(db, medicine_id))
        return sale

    @staticmethod
    def delete_sale(db: Session, pharmacy_id: int, sale_id: int) -> None:
        try:
            sale = SaleService.get(db, pharmacy_id, sale_id, for_update=True)
            medicine_id, quantity = sale.medicine_id, sale.quantity
            result = db.execute(
                delete(Sale)
                .where(Sale.id == sale.id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise NotFoundError("Sale not found")
            SaleService._restore(db, medicine_id, quantity)
            db.expunge(sale)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(MedicineService.get(db, medicine_id))
