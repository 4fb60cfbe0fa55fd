"""Application constants such as user roles and record statuses."""
from enum import Enum


class UserRole(str, Enum):
    PATIENT = "patient"
    PHARMACY_ADMIN = "pharmacy_admin"
    SUPER_ADMIN = "super_admin"
    HEALTHCARE_PROVIDER = "healthcare_provider"


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class PharmacyStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class StaffStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class LocatorSort(str, Enum):
    DISTANCE = "distance"
    AVAILABILITY = "availability"


class MapMode(str, Enum):
    STANDARD = "standard"
    SATELLITE = "satellite"
    TERRAIN = "terrain"


ROLE_PATTERN = "^(patient|pharmacy_admin|super_admin|healthcare_provider)$"
