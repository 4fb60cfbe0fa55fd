"""Pharmacy locator schemas."""
from pydantic import BaseModel
from typing import Optional, List


class LocatorMedicine(BaseModel):
    id: int
    name: str
    price: float
    stock: int


class LocatorResult(BaseModel):
    id: int
    name: str
    location: Optional[str] = None
    phone: Optional[str] = None
    latitude: float
    longitude: float
    distance_km: float
    medicines: List[LocatorMedicine]


class LocatorResponse(BaseModel):
    origin: dict
    used_default_origin: bool
    results: List[LocatorResult]
