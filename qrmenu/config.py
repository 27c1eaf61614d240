from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    APP_ENV: str = "dev"
    APP_SECRET: str
    DB_URL: str
    JWT_ISS: str = "qrmenu"
    JWT_EXP_MIN: int = 24*60
    TZ: str = "UTC"                       # "today" for join dates
    LOG_LEVEL: str = "INFO"
    DEFAULT_MONTHLY_FEE: Decimal = Decimal("1000.00")
    DEFAULT_CURRENCY: str = "EGP"
    FIRST_INVOICE_DUE_DAYS: int = 7
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
settings = Settings()

def local_today() -> date:
    return datetime.now(ZoneInfo(settings.TZ)).date()


# ── Platform settings (super-admin console) ─────────────────────────────────
# Stored as one JSON row; anything missing falls back to these defaults.

class PlatformSection(BaseModel):
    site_name: str = "QR Menu System"
    site_description: str = "Professional QR code menu system for restaurants and cafes"
    maintenance_mode: bool = False
    registration_enabled: bool = True
    max_tenants_per_user: int = Field(5, ge=1)
    default_time_zone: str = "UTC"
    support_email: str = "support@example.com"
    default_language: str = "en"

class SecuritySection(BaseModel):
    jwt_expiration_minutes: int = Field(24*60, ge=1)
    password_min_length: int = Field(8, ge=4)
    require_email_verification: bool = False
    two_factor_enabled: bool = False
    max_login_attempts: int = Field(5, ge=1)
    lockout_duration_minutes: int = Field(15, ge=0)
    session_timeout_minutes: int = Field(1440, ge=1)

class EmailSection(BaseModel):
    provider: str = "smtp"
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    from_email: str = "noreply@example.com"
    from_name: str = "QR Menu System"

class StorageSection(BaseModel):
    provider: str = "local"
    max_file_size: int = 10 * 1024 * 1024
    allowed_file_types: list[str] = ["image/jpeg", "image/png", "image/webp"]
    storage_limit: int = 1024 * 1024 * 1024

class NotificationSection(BaseModel):
    email_notifications: bool = True
    system_alerts: bool = True
    user_welcome_emails: bool = True
    password_reset_emails: bool = True
    maintenance_notifications: bool = True

class BusinessSection(BaseModel):
    default_business_types: list[str] = ["restaurant", "cafe", "bar", "bakery", "fast-food", "fine-dining"]
    max_categories_per_tenant: int = Field(50, ge=1)
    max_products_per_category: int = Field(100, ge=1)
    max_image_uploads_per_product: int = Field(5, ge=1)
    qr_code_expiration_days: int = Field(365, ge=1)

class PlatformSettings(BaseModel):
    platform: PlatformSection = PlatformSection()
    security: SecuritySection = SecuritySection()
    email: EmailSection = EmailSection()
    storage: StorageSection = StorageSection()
    notifications: NotificationSection = NotificationSection()
    business: BusinessSection = BusinessSection()
