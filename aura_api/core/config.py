"""
Configuration helpers for the Neuro Aura backend.

Settings is a typed, immutable view of the environment so that services and
routers never read os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_UPLOADS_DIR = Path(__file__).resolve().parents[2] / "uploads"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    public_base_url: str
    database_url: str
    cors_origins: tuple[str, ...]
    supabase_url: str
    supabase_service_role_key: str
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_from: str
    mail_from_name: str
    lava_api_key: str
    lava_base_url: str
    lava_buyer_language: str
    webhook_secret: str
    tariff_catalog: str
    uploads_dir: str
    upload_max_files: int
    upload_max_file_size: int
    http_timeout_seconds: float
    rate_limit_enabled: bool
    min_password_length: int
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _float(value: str, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    def _list(value: str | None) -> list[str]:
        return [item.strip().rstrip("/") for item in (value or "").split(",") if item.strip()]

    app_env = (os.getenv("APP_ENV") or "dev").lower()
    public_base_url = os.getenv("PUBLIC_BASE_URL", "https://www.neuro-aura.com").rstrip("/")

    database_url = (os.getenv("DATABASE_URL") or "").strip()
    # Supabase hands out postgres:// URLs, SQLAlchemy only accepts postgresql://
    if database_url.startswith("postgres://"):
        database_url = "postgresql://" + database_url[len("postgres://"):]

    origins = _list(os.getenv("CORS_ORIGINS")) or [public_base_url]
    if app_env != "prod":
        origins += ["http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:5173"]

    return Settings(
        app_env=app_env,
        public_base_url=public_base_url,
        database_url=database_url,
        cors_origins=tuple(dict.fromkeys(origins)),
        supabase_url=(os.getenv("SUPABASE_URL") or "").strip().rstrip("/"),
        supabase_service_role_key=(os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "").strip(),
        smtp_host=os.getenv("SMTP_HOST", "smtp.mail.ru"),
        smtp_port=_int(os.getenv("SMTP_PORT", "465"), 465),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASS") or os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
        mail_from_name=os.getenv("MAIL_FROM_NAME", "Neuro Aura"),
        lava_api_key=(os.getenv("LAVA_API_KEY") or os.getenv("API_KEY", "")).strip(),
        lava_base_url=os.getenv("LAVA_BASE_URL", "https://gate.lava.top").rstrip("/"),
        lava_buyer_language=os.getenv("LAVA_BUYER_LANGUAGE", "EN"),
        webhook_secret=(os.getenv("LAVA_WEBHOOK_SECRET") or os.getenv("WEBHOOK_SECRET", "")).strip(),
        tariff_catalog=os.getenv("TARIFF_CATALOG", ""),
        uploads_dir=os.getenv("UPLOADS_DIR") or str(DEFAULT_UPLOADS_DIR),
        upload_max_files=_int(os.getenv("UPLOAD_MAX_FILES", "5"), 5),
        upload_max_file_size=_int(os.getenv("UPLOAD_MAX_FILE_SIZE", str(10 * 1024 * 1024)), 10 * 1024 * 1024),
        http_timeout_seconds=_float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"), 15.0),
        rate_limit_enabled=_bool(os.getenv("RATE_LIMIT_ENABLED"), True),
        min_password_length=_int(os.getenv("MIN_PASSWORD_LENGTH", "6"), 6),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
