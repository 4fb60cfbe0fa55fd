"""Pharmacy, staff, medicine and sale schemas."""
from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from typing import Optional, List
from datetime import datetime


class PharmacyBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    location: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @model_validator(mode="after")
    def coordinates_together(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self


class PharmacyCreate(PharmacyBase):
    pass


class PharmacyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    location: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class PharmacyRead(PharmacyBase):
    id: int
    status: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class StaffCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    role: Optional[str] = None


class StaffUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = Field(None, pattern="^(active|inactive)$")


class StaffRead(StaffCreate):
    id: int
    pharmacy_id: int
    status: str

    model_config = ConfigDict(from_attributes=True)


class MedicineCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    stock: int = Field(0, ge=0)


class MedicineUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)


class StockUpdate(BaseModel):
    stock: int = Field(..., ge=0)


class MedicineRead(MedicineCreate):
    id: int
    pharmacy_id: int

    model_config = ConfigDict(from_attributes=True)


class SaleItem(BaseModel):
    medicine_id: int
    quantity: int = Field(..., gt=0)


class SaleCreate(BaseModel):
    items: List[SaleItem] = Field(..., min_length=1)
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None

    @model_validator(mode="after")
    def distinct_medicines(self):
        ids = [item.medicine_id for item in self.items]
        if len(ids) != len(set(ids)):
            raise ValueError("each medicine may appear only once per sale")
        return self


class SaleUpdate(BaseModel):
    medicine_id: int
    quantity: int = Field(..., gt=0)
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None


class SaleRead(BaseModel):
    id: int
    pharmacy_id: int
    medicine_id: int
    medicine_name: Optional[str] = None
    quantity: int
    unit_price: float
    total_amount: float
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PharmacyStats(BaseModel):
    total_medicines: int
    inventory_value: float
    low_stock_count: int
    stock_distribution: dict
    total_sales: int
    sales_amount: float
