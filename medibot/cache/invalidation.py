"""Which entity collections each mutation invalidates.

Every mutation endpoint reports the collections it touched in its response
(``invalidates``) so clients re-fetch exactly those, and server-side cached
collections are cleared here.
"""
import logging

from medibot.cache.cache_service import redis_cache

logger = logging.getLogger(__name__)

CACHE_PREFIX = "medibot"

_INVENTORY = frozenset({"medicines", "medicine_suggestions", "pharmacy_stats", "locator"})
_SALES = _INVENTORY | {"sales"}
_PHARMACY_LISTING = frozenset({"pharmacies", "locator", "medicine_suggestions", "analytics"})
_USERS = frozenset({"users", "analytics"})

INVALIDATIONS: dict[str, frozenset[str]] = {
    # patient portal
    "update_patient_profile": frozenset({"patient_profile"}),
    "record_vitals": frozenset({"vitals"}),
    "schedule_appointment": frozenset({"appointments"}),
    "save_emergency_contacts": frozenset({"emergency_contacts"}),
    # healthcare provider
    "issue_prescription": frozenset({"prescriptions"}),
    # pharmacies
    "register_pharmacy": _PHARMACY_LISTING | {"pharmacy"},
    "create_pharmacy": _PHARMACY_LISTING,
    "update_pharmacy": _PHARMACY_LISTING | {"pharmacy"},
    "delete_pharmacy": _PHARMACY_LISTING | _SALES | {"staff", "users"},
    "approve_pharmacy": _PHARMACY_LISTING,
    "reject_pharmacy": _PHARMACY_LISTING,
    # inventory
    "add_medicine": _INVENTORY,
    "update_medicine": _INVENTORY,
    "delete_medicine": _INVENTORY,
    "set_stock": _INVENTORY,
    # sales
    "record_sale": _SALES,
    "edit_sale": _SALES,
    "delete_sale": _SALES,
    # staff
    "add_staff": frozenset({"staff"}),
    "update_staff": frozenset({"staff"}),
    "delete_staff": frozenset({"staff"}),
    # users
    "create_user": _USERS,
    "update_user": _USERS | {"pharmacies"},
    "delete_user": _USERS,
    "bulk_delete_users": _USERS,
    "bulk_update_role": _USERS,
}

# Collections that are held in the shared cache, keyed by pattern
CACHED_COLLECTIONS: dict[str, str] = {
    "medicine_suggestions": f"{CACHE_PREFIX}:suggest:*",
}


def invalidated_by(mutation: str) -> list[str]:
    try:
        return sorted(INVALIDATIONS[mutation])
    except KeyError:
        raise ValueError(f"Unknown mutation: {mutation}")


async def invalidate(mutation: str) -> list[str]:
    """Clear cached collections touched by ``mutation`` and return their names."""
    collections = invalidated_by(mutation)
    for name in collections:
        pattern = CACHED_COLLECTIONS.get(name)
        if pattern:
            await redis_cache.delete_pattern(pattern)
    logger.debug("%s invalidated %s", mutation, ", ".join(collections))
    return collections
