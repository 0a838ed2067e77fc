"""
Centralized settings for the Civic Engagement backend.

Provides a lightweight wrapper around environment variables (with `.env`
support for local development) so the rest of the codebase can import a single
`get_settings()` helper when configuration is needed. This avoids ad-hoc calls
to `os.environ` spread across modules and keeps defaults consistent.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional
import os

from dotenv import dotenv_values


@dataclass(frozen=True)
class Settings:
    """Immutable view of application configuration."""

    # General
    environment: str
    allowed_hosts: tuple[str, ...]

    # Database (SQLModel/alembic still look at DATABASE_URL)
    database_url: str

    # Auth
    jwt_secret: Optional[str]
    jwt_access_minutes: int

    # Object storage for report images
    storage_provider: str
    report_image_bucket: str
    s3_region: str
    s3_endpoint: Optional[str]
    s3_use_ssl: bool
    s3_access_key_id: Optional[str]
    s3_secret_access_key: Optional[str]
    public_storage_base_url: Optional[str]
    local_storage_path: Path
    max_report_images: int

    # Reverse geocoding
    geocoder_url: str
    geocoder_user_agent: str
    geocoder_timeout: float

    # Leaderboard
    leaderboard_limit: int

    # Observability
    sentry_dsn: Optional[str]


def _as_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_lookup(key: str, env: dict[str, str], default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key) or env.get(key) or default


@lru_cache()
def get_settings() -> Settings:
    """Load settings once per process."""

    env_path = Path(__file__).resolve().parents[2] / ".env"
    env_file = dotenv_values(str(env_path)) if env_path.exists() else {}

    default_storage = Path(__file__).resolve().parents[1] / "storage"

    return Settings(
        environment=_env_lookup("APP_ENV", env_file, "development"),
        allowed_hosts=tuple(
            h.strip() for h in _env_lookup("ALLOWED_HOSTS", env_file, "*").split(",") if h.strip()
        ),
        database_url=_env_lookup("DATABASE_URL", env_file, "sqlite+aiosqlite:///./civic.db"),
        jwt_secret=_env_lookup("JWT_SECRET", env_file),
        jwt_access_minutes=int(_env_lookup("JWT_ACCESS_MINUTES", env_file, "60")),
        storage_provider=_env_lookup("STORAGE_PROVIDER", env_file, "local").lower(),
        report_image_bucket=_env_lookup("REPORT_IMAGE_BUCKET", env_file, "report-images"),
        s3_region=_env_lookup("S3_REGION", env_file, "us-east-1"),
        s3_endpoint=_env_lookup("S3_ENDPOINT", env_file) or _env_lookup("S3_ENDPOINT_URL", env_file),
        s3_use_ssl=_as_bool(_env_lookup("S3_USE_SSL", env_file, "true"), True),
        s3_access_key_id=_env_lookup("S3_ACCESS_KEY_ID", env_file) or _env_lookup("S3_ACCESS_KEY", env_file),
        s3_secret_access_key=_env_lookup("S3_SECRET_ACCESS_KEY", env_file) or _env_lookup("S3_SECRET_KEY", env_file),
        public_storage_base_url=_env_lookup("PUBLIC_STORAGE_BASE_URL", env_file),
        local_storage_path=Path(_env_lookup("LOCAL_STORAGE_PATH", env_file, str(default_storage))),
        max_report_images=int(_env_lookup("MAX_REPORT_IMAGES", env_file, "5")),
        geocoder_url=_env_lookup(
            "GEOCODER_URL", env_file, "https://nominatim.openstreetmap.org/reverse"
        ),
        geocoder_user_agent=_env_lookup("GEOCODER_USER_AGENT", env_file, "civic-engagement-api/1.0"),
        geocoder_timeout=float(_env_lookup("GEOCODER_TIMEOUT", env_file, "5")),
        leaderboard_limit=int(_env_lookup("LEADERBOARD_LIMIT", env_file, "50")),
        sentry_dsn=_env_lookup("SENTRY_DSN", env_file),
    )


__all__ = ["Settings", "get_settings"]
