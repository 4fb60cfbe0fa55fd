"""Service layer package."""

__all__ = [
    "auth_service",
    "profile_service",
    "role_router",
    "dashboard_service",
    "patient_service",
    "provider_service",
    "pharmacy_service",
    "medicine_service",
    "sale_service",
    "locator_service",
    "admin_service",
    "report_service",
    "migration_service",
    "email_service",
]
