from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Propdesk API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # Frontend Domains (CORS, auto-built below)
    # -------------------------------------------------
    FRONTEND_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
    ]
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # Seed account for POST /provisioning/super-admin
    SUPER_ADMIN_EMAIL: Optional[str] = None
    SUPER_ADMIN_PASSWORD: Optional[str] = None

    # -------------------------------------------------
    # QR Payments
    # -------------------------------------------------
    QR_PAYMENT_TTL_MINUTES: int = Field(15, description="Lifetime of a generated QR payment request")
    QR_UPI_ID: str = "yourbusiness@upi"
    QR_BUSINESS_NAME: str = "YourProperty"
    QR_IMAGE_ENDPOINT: str = "https://api.qrserver.com/v1/create-qr-code/"
    QR_IMAGE_SIZE: str = "200x200"

    # -------------------------------------------------
    # Currency
    # -------------------------------------------------
    INR_PER_USD: float = Field(83.0, description="Fixed INR → USD display conversion rate")

    # -------------------------------------------------
    # Access control
    # -------------------------------------------------
    ROLE_CACHE_TTL_SECONDS: int = 30

    # Sign-in / sign-up throttling (per email or IP)
    LOGIN_RATE_LIMIT: int = 10
    LOGIN_RATE_WINDOW_SECONDS: int = 300

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    model_config = SettingsConfigDict(case_sensitive=True)


# Instantiate settings
settings = Settings()


# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
def build_cors_origins(origins: List[str]) -> List[str]:
    cleaned = []
    for origin in origins:
        origin = origin.strip()
        if not origin:
            continue
        if not origin.startswith("http"):
            origin = f"https://{origin}"
        cleaned.append(origin.rstrip("/"))
    return sorted(set(cleaned))


settings.BACKEND_CORS_ORIGINS = build_cors_origins(settings.FRONTEND_ORIGINS)
