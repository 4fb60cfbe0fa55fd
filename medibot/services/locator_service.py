"""Public pharmacy locator: find approved pharmacies stocking a medicine near a point."""
import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Optional
from urllib.parse import urlencode

from sqlalchemy.orm import Session, joinedload

from medibot.cache.cache_service import redis_cache
from medibot.cache.invalidation import CACHE_PREFIX
from medibot.core.config import settings
from medibot.core.constants import LocatorSort, MapMode, PharmacyStatus
from medibot.models.medicine import Medicine
from medibot.models.pharmacy import Pharmacy

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
SUGGESTION_LIMIT = 5

TILE_PROVIDERS = {
    MapMode.STANDARD: {
        "url": "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png",
        "attribution": "&copy; OpenStreetMap contributors",
    },
    MapMode.SATELLITE: {
        "url": "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        "attribution": "Tiles &copy; Esri",
    },
    MapMode.TERRAIN: {
        "url": "https://{s}.tile.opentopomap.org/{z}/{x}/{y}.png",
        "attribution": "Map data: &copy; OpenStreetMap contributors, SRTM | Map style: &copy; OpenTopoMap",
    },
}


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


@dataclass
class LocatorFilters:
    term: str = ""
    radius_km: float = field(default_factory=lambda: settings.LOCATOR_DEFAULT_RADIUS_KM)
    min_stock: int = field(default_factory=lambda: settings.LOCATOR_DEFAULT_MIN_STOCK)
    sort_by: LocatorSort = LocatorSort.DISTANCE


def default_origin() -> tuple[float, float]:
    return settings.LOCATOR_DEFAULT_LAT, settings.LOCATOR_DEFAULT_LNG


def locate_pharmacies(
    medicines: Iterable,
    user_location: Optional[tuple[float, float]],
    filters: LocatorFilters,
) -> list[dict]:
    """Group matching medicines by pharmacy and rank the pharmacies.

    Each medicine must expose ``pharmacy``. Only approved pharmacies with
    coordinates are considered, and only those within ``radius_km``.
    """
    origin = user_location or default_origin()
    term = filters.term.strip().lower()
    if not term:
        return []

    grouped: dict[int, dict] = {}
    for medicine in medicines:
        pharmacy = medicine.pharmacy
        if pharmacy is None or pharmacy.status != PharmacyStatus.APPROVED.value:
            continue
        if pharmacy.latitude is None or pharmacy.longitude is None:
            continue
        if term not in (medicine.name or "").lower() or medicine.stock < filters.min_stock:
            continue

        entry = grouped.get(pharmacy.id)
        if entry is None:
            entry = grouped[pharmacy.id] = {
                "id": pharmacy.id,
                "name": pharmacy.name,
                "location": pharmacy.location,
                "phone": pharmacy.phone,
                "latitude": pharmacy.latitude,
                "longitude": pharmacy.longitude,
                "distance_km": round(
                    haversine_km(origin[0], origin[1], pharmacy.latitude, pharmacy.longitude), 3
                ),
                "medicines": [],
            }
        entry["medicines"].append(
            {"id": medicine.id, "name": medicine.name, "price": medicine.price, "stock": medicine.stock}
        )

    results = [r for r in grouped.values() if r["distance_km"] <= filters.radius_km]
    if filters.sort_by == LocatorSort.AVAILABILITY:
        results.sort(key=lambda r: (-len(r["medicines"]), r["distance_km"]))
    else:
        results.sort(key=lambda r: r["distance_km"])
    return results


class LocatorService:

    @staticmethod
    def search(
        db: Session,
        filters: LocatorFilters,
        user_location: Optional[tuple[float, float]] = None,
    ) -> dict:
        medicines = (
            db.query(Medicine)
            .join(Medicine.pharmacy)
            .options(joinedload(Medicine.pharmacy))
            .filter(
                Medicine.name.icontains(filters.term.strip(), autoescape=True),
                Medicine.stock >= filters.min_stock,
                Pharmacy.status == PharmacyStatus.APPROVED.value,
            )
            .all()
        )
        origin = user_location or default_origin()
        results = locate_pharmacies(medicines, origin, filters)
        return {
            "origin": {"lat": origin[0], "lng": origin[1]},
            "used_default_origin": user_location is None,
            "results": results,
        }

    @staticmethod
    def list_public_pharmacies(db: Session):
        return (
            db.query(Pharmacy)
            .filter(Pharmacy.status == PharmacyStatus.APPROVED.value)
            .order_by(Pharmacy.name.asc())
            .all()
        )

    @staticmethod
    async def suggest(db: Session, prefix: str) -> list[str]:
        """Distinct in-stock medicine names containing ``prefix``; nothing for one character."""
        prefix = (prefix or "").strip()
        if len(prefix) <= 1:
            return []

        key = f"{CACHE_PREFIX}:suggest:{prefix.lower()}"
        cached = await redis_cache.get_json(key)
        if cached is not None:
            return cached

        rows = (
            db.query(Medicine.name)
            .join(Medicine.pharmacy)
            .filter(
                Medicine.name.icontains(prefix, autoescape=True),
                Medicine.stock > 0,
                Pharmacy.status == PharmacyStatus.APPROVED.value,
            )
            .distinct()
            .order_by(Medicine.name.asc())
            .limit(SUGGESTION_LIMIT)
            .all()
        )
        names = [row[0] for row in rows]
        await redis_cache.set_json(key, names)
        return names


def tile_url(mode: str, z: int, x: int, y: int, subdomain: str = "a") -> str:
    try:
        provider = TILE_PROVIDERS[MapMode(mode)]
    except ValueError:
        raise ValueError(f"Unknown map mode: {mode}")
    return provider["url"].format(s=subdomain, z=z, x=x, y=y)


def directions_url(pharmacy, origin: Optional[tuple[float, float]] = None) -> str:
    """Google Maps driving directions from ``origin`` (or the default centre) to the pharmacy."""
    if pharmacy.latitude is None or pharmacy.longitude is None:
        raise ValueError("Pharmacy has no coordinates")
    origin = origin or default_origin()
    query = urlencode(
        {
            "api": 1,
            "origin": f"{origin[0]},{origin[1]}",
            "destination": f"{pharmacy.latitude},{pharmacy.longitude}",
            "travelmode": "driving",
        },
        safe=",",
    )
    return f"https://www.google.com/maps/dir/?{query}"
