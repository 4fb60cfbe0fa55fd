import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

class Settings:
    ENV: str = os.getenv("ENV", "local")
    EMAIL_BACKEND: str = os.getenv("EMAIL_BACKEND", "console")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")
    DATABASE_ECHO: bool = os.getenv("DATABASE_ECHO", "False").lower() == "true"
    DATABASE_POOL_SIZE: int = int(os.getenv("DATABASE_POOL_SIZE", 20))
    DATABASE_MAX_OVERFLOW: int = int(os.getenv("DATABASE_MAX_OVERFLOW", 10))

    # JWT / Security
    SECRET_KEY: str = os.getenv("SECRET_KEY")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 15))
    REFRESH_TOKEN_EXPIRE_DAYS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", 7))
    PASSWORD_RESET_EXPIRE_MINUTES: int = int(os.getenv("PASSWORD_RESET_EXPIRE_MINUTES", 30))

    # App identity / email
    APP_NAME: str = os.getenv("APP_NAME", "MediBot")
    SENDER_NAME: str = os.getenv("SENDER_NAME", "MediBot Team")

    SMTP_HOST: Optional[str] = os.getenv("SMTP_HOST")
    SMTP_PORT: Optional[int] = int(os.getenv("SMTP_PORT", 587))
    SMTP_USER: Optional[str] = os.getenv("SMTP_USER")
    SMTP_PASSWORD: Optional[str] = os.getenv("SMTP_PASSWORD")

    # Frontend URLs
    FRONTEND_URL: Optional[str] = os.getenv("FRONTEND_URL")

    # CORS
    BACKEND_CORS_ORIGINS: Optional[str] = os.getenv("BACKEND_CORS_ORIGINS")

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "True").lower() == "true"
    RATE_LIMIT_REQUESTS: int = int(os.getenv("RATE_LIMIT_REQUESTS", 100))
    RATE_LIMIT_PERIOD_SECONDS: int = int(os.getenv("RATE_LIMIT_PERIOD_SECONDS", 60))

    # Roles: "reject" refuses sessions carrying an unrecognised role,
    # "patient" routes them to the patient view.
    UNKNOWN_ROLE_POLICY: str = os.getenv("UNKNOWN_ROLE_POLICY", "reject")

    # Inventory
    LOW_STOCK_THRESHOLD: int = int(os.getenv("LOW_STOCK_THRESHOLD", 5))

    # Pharmacy locator (default centre: Kigali)
    LOCATOR_DEFAULT_LAT: float = float(os.getenv("LOCATOR_DEFAULT_LAT", -1.9441))
    LOCATOR_DEFAULT_LNG: float = float(os.getenv("LOCATOR_DEFAULT_LNG", 30.0619))
    LOCATOR_DEFAULT_RADIUS_KM: float = float(os.getenv("LOCATOR_DEFAULT_RADIUS_KM", 50))
    LOCATOR_DEFAULT_MIN_STOCK: int = int(os.getenv("LOCATOR_DEFAULT_MIN_STOCK", 1))

    # Reports
    REPORT_LINES_PER_PAGE: int = int(os.getenv("REPORT_LINES_PER_PAGE", 60))

    # Redis
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    CACHE_ENABLED: bool = os.getenv("CACHE_ENABLED", "True").lower() == "true"
    CACHE_TTL_SECONDS: int = int(os.getenv("CACHE_TTL_SECONDS", 300))



settings = Settings()
