import os



def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
SQL_ECHO = _get_bool(os.getenv("SQL_ECHO"), default=False)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ALLOWED_ORIGINS = _get_list(os.getenv("CORS_ALLOWED_ORIGINS"), ["http://localhost:3000"])

BOOKING_HORIZON_DAYS = int(os.getenv("BOOKING_HORIZON_DAYS", "14"))

DEFAULT_START_TIME = os.getenv("DEFAULT_START_TIME", "08:00")
DEFAULT_END_TIME = os.getenv("DEFAULT_END_TIME", "16:00")
DEFAULT_SLOT_DURATION_MINUTES = int(os.getenv("DEFAULT_SLOT_DURATION_MINUTES", "30"))
DEFAULT_BREAKS = [{"start": "12:00", "end": "13:00"}]
# 0 = Sunday ... 6 = Saturday
DEFAULT_WORKING_DAYS = [int(day) for day in _get_list(os.getenv("DEFAULT_WORKING_DAYS"), ["1", "2", "3", "4", "5"])]

NOTIFICATION_CACHE_TTL_SECONDS = float(os.getenv("NOTIFICATION_CACHE_TTL_SECONDS", "30"))
SETTINGS_CACHE_TTL_SECONDS = float(os.getenv("SETTINGS_CACHE_TTL_SECONDS", "60"))

ADMIN_NOTIFICATION_RECIPIENT = os.getenv("ADMIN_NOTIFICATION_RECIPIENT", "admin")

def validate_runtime_config() -> None:
    if BOOKING_HORIZON_DAYS <= 0:
        raise RuntimeError("BOOKING_HORIZON_DAYS must be a positive number of days.")
    if NOTIFICATION_CACHE_TTL_SECONDS <= 0 or SETTINGS_CACHE_TTL_SECONDS <= 0:
        raise RuntimeError("Cache TTLs must be positive.")
    if APP_ENV.lower() == "production" and not os.getenv("DATABASE_URL"):
        raise RuntimeError("DATABASE_URL must be set in production.")
