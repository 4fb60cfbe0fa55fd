from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import HTTPException as FastAPIHTTPException
from sqlalchemy.exc import IntegrityError

from medibot.cache.cache_service import redis_cache
from medibot.core.config import settings
from medibot.core.logger import setup_logging
from medibot.middleware.cors import configure_cors
from medibot.middleware.logging import RequestLoggerMiddleware
from medibot.middleware.auth import JWTMiddleware
from medibot.middleware import error_handler
from medibot.services.report_service import ReportRenderError

# Routers
from medibot.routers import auth as auth_router
from medibot.routers import users as users_router
from medibot.routers import patients as patients_router
from medibot.routers import providers as providers_router
from medibot.routers import pharmacy as pharmacy_router
from medibot.routers import admin as admin_router
from medibot.routers import locator as locator_router
from medibot.routers import health as health_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await redis_cache.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    setup_logging()
    description = (
        f"{settings.APP_NAME} API.\n\n"
        "Patient portal, pharmacy administration, super admin console "
        "and a public pharmacy locator."
    )

    openapi_tags = [
        {"name": "authentication", "description": "Sign up, sign in, token refresh and password reset."},
        {"name": "users", "description": "Current user and the role dashboard."},
        {"name": "patients", "description": "Patient profile, vitals, appointments, contacts and prescriptions."},
        {"name": "providers", "description": "Prescriptions issued by healthcare providers."},
        {"name": "pharmacy", "description": "Pharmacy admin inventory, sales, staff and reports."},
        {"name": "admin", "description": "Super admin management of pharmacies, users and analytics."},
        {"name": "locator", "description": "Public search for pharmacies stocking a medicine."},
        {"name": "health", "description": "Health checks and service status endpoints."},
    ]

    app = FastAPI(
        title=f"{settings.APP_NAME} Backend API",
        version="0.1.0",
        description=description,
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    # Middleware
    configure_cors(app)
    app.add_middleware(RequestLoggerMiddleware)
    app.add_middleware(JWTMiddleware)

    # Exception handlers
    app.add_exception_handler(FastAPIHTTPException, error_handler.http_exception_handler)
    app.add_exception_handler(IntegrityError, error_handler.integrity_error_handler)
    app.add_exception_handler(ReportRenderError, error_handler.report_error_handler)

    # Include routers
    app.include_router(health_router.router)
    app.include_router(auth_router.router)
    app.include_router(users_router.router)
    app.include_router(patients_router.router)
    app.include_router(providers_router.router)
    app.include_router(pharmacy_router.router)
    app.include_router(admin_router.router)
    app.include_router(locator_router.router)

    return app


app = create_app()
