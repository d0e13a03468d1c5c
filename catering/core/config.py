import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load .env from the project root
load_dotenv()


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./catering.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_TEST = ENV_NORMALIZED == "test"
IS_PROD = ENV_NORMALIZED in {"prod", "production"}

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]
if not CORS_ORIGINS:
    CORS_ORIGINS = [FRONTEND_URL]

# Auth (JWT)
JWT_SECRET = os.getenv("JWT_SECRET", "your-super-secret-jwt-key")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_DAYS = int(os.getenv("JWT_EXPIRE_DAYS", "7"))
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@gioscorner.com").strip().lower()
ADMIN_PASSWORD_HASH = os.getenv("ADMIN_PASSWORD_HASH", "").strip()

# Email
EMAIL_PROVIDER = os.getenv("EMAIL_PROVIDER", "resend" if os.getenv("RESEND_API_KEY") else "log").strip().lower()
RESEND_API_KEY = os.getenv("RESEND_API_KEY", "")
OWNER_EMAIL = os.getenv("OWNER_EMAIL", "owner@gioscorner.com")
FROM_EMAIL = os.getenv("FROM_EMAIL", "onboarding@resend.dev")
CATERING_EMAIL = os.getenv("CATERING_EMAIL", OWNER_EMAIL)
BUSINESS_NAME = os.getenv("BUSINESS_NAME", "Gio's Corner")

# Payments
PAYMENT_PROVIDER = os.getenv("PAYMENT_PROVIDER", "stripe" if os.getenv("STRIPE_SECRET_KEY") else "mock").strip().lower()
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET", "")
CURRENCY = os.getenv("CURRENCY", "usd").strip().lower()
INVOICE_DAYS_UNTIL_DUE = int(os.getenv("INVOICE_DAYS_UNTIL_DUE", "7"))

# Orders: 3 PM cutoff for next-day delivery
ORDER_CUTOFF_HOUR = int(os.getenv("ORDER_CUTOFF_HOUR", "15"))
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "").strip()

AUTO_CREATE_TABLES = _env_flag("AUTO_CREATE_TABLES", "1" if IS_DEV else "0")


@dataclass(frozen=True)
class Settings:
    """Runtime configuration handed to services instead of module lookups."""

    env: str = "dev"
    frontend_url: str = "http://localhost:5173"
    business_name: str = "Gio's Corner"
    owner_email: str = "owner@gioscorner.com"
    from_email: str = "onboarding@resend.dev"
    catering_email: str = "owner@gioscorner.com"
    admin_email: str = "admin@gioscorner.com"
    admin_password_hash: str = ""
    jwt_secret: str = "your-super-secret-jwt-key"
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 7
    email_provider: str = "log"
    resend_api_key: str = ""
    payment_provider: str = "mock"
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    currency: str = "usd"
    invoice_days_until_due: int = 7
    order_cutoff_hour: int = 15
    business_timezone: str = ""
    cors_origins: list[str] = field(default_factory=list)

    @property
    def is_dev(self) -> bool:
        return self.env.lower() in {"dev", "development", "local"}

    @property
    def sender(self) -> str:
        return f"{self.business_name} <{self.from_email}>"


def load_settings() -> Settings:
    return Settings(
        env=ENV,
        frontend_url=FRONTEND_URL,
        business_name=BUSINESS_NAME,
        owner_email=OWNER_EMAIL,
        from_email=FROM_EMAIL,
        catering_email=CATERING_EMAIL,
        admin_email=ADMIN_EMAIL,
        admin_password_hash=ADMIN_PASSWORD_HASH,
        jwt_secret=JWT_SECRET,
        jwt_algorithm=JWT_ALGORITHM,
        jwt_expire_days=JWT_EXPIRE_DAYS,
        email_provider=EMAIL_PROVIDER,
        resend_api_key=RESEND_API_KEY,
        payment_provider=PAYMENT_PROVIDER,
        stripe_secret_key=STRIPE_SECRET_KEY,
        stripe_webhook_secret=STRIPE_WEBHOOK_SECRET,
        currency=CURRENCY,
        invoice_days_until_due=INVOICE_DAYS_UNTIL_DUE,
        order_cutoff_hour=ORDER_CUTOFF_HOUR,
        business_timezone=BUSINESS_TIMEZONE,
        cors_origins=list(CORS_ORIGINS),
    )
