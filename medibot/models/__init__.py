"""ORM models."""

__all__ = [
    "base",
    "user",
    "session",
    "patient",
    "pharmacy_admin",
    "admin",
    "provider",
    "pharmacy",
    "medicine",
    "sale",
    "health_record",
    "audit",
]
