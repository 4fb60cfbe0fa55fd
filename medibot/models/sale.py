from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from medibot.core.database import Base


class Sale(Base):
    __tablename__ = "sales"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    pharmacy_id = Column(Integer, ForeignKey("pharmacies.id", ondelete="CASCADE"), nullable=False, index=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id", ondelete="RESTRICT"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_amount = Column(Float, nullable=False)

    customer_name = Column(String(200), nullable=True)
    customer_phone = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    pharmacy = relationship("Pharmacy", back_populates="sales")
    medicine = relationship("Medicine", back_populates="sales")

    @property
    def medicine_name(self):
        return self.medicine.name if self.medicine else None

    @property
    def invoice_number(self) -> str:
        return str(self.id).zfill(6)
