import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# --- Database ---
DB_USER = os.getenv("POSTGRES_USER", "postgres")
DB_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
DB_HOST = os.getenv("POSTGRES_HOST", "localhost") # In Docker, this will be 'postgres'
DB_PORT = os.getenv("POSTGRES_PORT", "5433")
DB_NAME = os.getenv("POSTGRES_DB", "marketplace")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)
SQL_ECHO = _flag("SQL_ECHO", "false")

# --- Auth ---
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
OTP_TTL_SECONDS = int(os.getenv("OTP_TTL_SECONDS", "300"))

# --- Observability ---
TRACING_ENABLED = _flag("TRACING_ENABLED", "true")
OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT", "http://localhost:4317")

# --- Rate limiting ---
RATE_LIMIT_ENABLED = _flag("RATE_LIMIT_ENABLED", "true")
PLACE_ORDER_RATE_LIMIT = os.getenv("PLACE_ORDER_RATE_LIMIT", "10/minute")
SEND_OTP_RATE_LIMIT = os.getenv("SEND_OTP_RATE_LIMIT", "5/minute")

# --- Notifications ---
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID", "")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER", "")
EMAIL_API_URL = os.getenv("EMAIL_API_URL", "")
EMAIL_API_KEY = os.getenv("EMAIL_API_KEY", "")
EMAIL_FROM = os.getenv("EMAIL_FROM", "orders@livemart.com")
NOTIFICATION_TIMEOUT_SECONDS = float(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", "10"))
DEFAULT_COUNTRY_CODE = os.getenv("DEFAULT_COUNTRY_CODE", "91")
BRAND_NAME = os.getenv("BRAND_NAME", "LiveMART")
SYNTHETIC_EMAIL_DOMAIN = os.getenv("SYNTHETIC_EMAIL_DOMAIN", "temp.livemart.com")
