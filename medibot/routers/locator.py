"""Public pharmacy locator. No authentication required."""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from medibot.core.constants import LocatorSort, PharmacyStatus
from medibot.core.database import get_db
from medibot.schemas.locator import LocatorResponse
from medibot.schemas.pharmacy import PharmacyRead
from medibot.services.locator_service import (
    LocatorFilters, LocatorService, TILE_PROVIDERS, directions_url, tile_url,
)
from medibot.services.pharmacy_service import PharmacyService

router = APIRouter(prefix="/locator", tags=["locator"])


@router.get("/search", response_model=LocatorResponse)
async def search(
    term: str = Query(..., min_length=1),
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    radius_km: float | None = Query(None, gt=0),
    min_stock: int | None = Query(None, ge=0),
    sort_by: LocatorSort = LocatorSort.DISTANCE,
    db: Session = Depends(get_db),
):
    """Approved pharmacies near the caller that stock a matching medicine."""
    term = term.strip()
    if not term:
        raise HTTPException(status_code=400, detail="term must not be blank")
    if (lat is None) != (lng is None):
        raise HTTPException(status_code=400, detail="lat and lng must be provided together")

    filters = LocatorFilters(term=term, sort_by=sort_by)
    if radius_km is not None:
        filters.radius_km = radius_km
    if min_stock is not None:
        filters.min_stock = min_stock
    location = (lat, lng) if lat is not None else None
    return LocatorService.search(db, filters, location)


@router.get("/pharmacies", response_model=list[PharmacyRead])
async def public_pharmacies(db: Session = Depends(get_db)):
    return LocatorService.list_public_pharmacies(db)


@router.get("/suggestions")
async def suggestions(q: str = "", db: Session = Depends(get_db)):
    return {"success": True, "data": await LocatorService.suggest(db, q)}


@router.get("/tiles")
async def tile_providers():
    return {
        "success": True,
        "data": {mode.value: provider for mode, provider in TILE_PROVIDERS.items()},
    }


@router.get("/tiles/{mode}/{z}/{x}/{y}")
async def resolve_tile(mode: str, z: int, x: int, y: int, s: str = "a"):
    try:
        return {"success": True, "data": {"url": tile_url(mode, z, x, y, s)}}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/pharmacies/{pharmacy_id}/directions")
async def directions(
    pharmacy_id: int,
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    db: Session = Depends(get_db),
):
    pharmacy = PharmacyService.get(db, pharmacy_id)
    if pharmacy.status != PharmacyStatus.APPROVED.value:
        raise HTTPException(status_code=404, detail="Pharmacy not found")
    origin = (lat, lng) if lat is not None and lng is not None else None
    try:
        return {"success": True, "data": {"url": directions_url(pharmacy, origin)}}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
