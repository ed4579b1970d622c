"""
Configuration helpers for the SpinCity backend.

Settings are read once from the environment so that stores/services never
touch os.environ directly. Call get_settings.cache_clear() to re-read.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_STORE_PATH = Path(__file__).resolve().parents[1] / "data.json"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    local_store_path: Path
    key_prefix: str
    default_admin_email: str
    reconcile_on_load: bool
    identity_hook_secret: str
    log_level: str
    cors_origins: tuple[str, ...] = ()

    @property
    def remote_enabled(self) -> bool:
        return bool(self.database_url)


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    store_path = (os.getenv("LOCAL_STORE_PATH") or "").strip()
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=(os.getenv("DATABASE_URL") or "").strip(),
        local_store_path=Path(store_path) if store_path else DEFAULT_STORE_PATH,
        key_prefix=os.getenv("STORE_KEY_PREFIX", "spincity_"),
        default_admin_email=os.getenv("DEFAULT_ADMIN_EMAIL", "admin@spincity.com").strip(),
        reconcile_on_load=_bool(os.getenv("RECONCILE_ON_LOAD"), True),
        identity_hook_secret=os.getenv("IDENTITY_HOOK_SECRET", ""),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        cors_origins=tuple(o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()),
    )
