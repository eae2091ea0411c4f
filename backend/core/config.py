import os
from dataclasses import dataclass
from functools import lru_cache


def _default_database_url() -> str:
    """Local SQLite file used when DATABASE_URL is not set."""
    return "sqlite+aiosqlite:///./racing_insight.db"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    """Application settings loaded from environment variables with safe defaults."""

    app_name: str = "Racing Insight"
    env: str = "dev"
    database_url: str = ""  # set from from_env
    log_level: str = "INFO"
    # Identity service (hosted auth). Empty values are reported per request.
    supabase_url: str = ""
    service_role_key: str = ""
    identity_timeout_seconds: float = 10.0
    timezone: str = "Europe/London"
    bankroll_write_policy: str = "partial-failure-tolerant"

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        db_url = os.getenv("DATABASE_URL") or _default_database_url()
        return cls(
            app_name=os.getenv("APP_NAME", cls.app_name),
            env=os.getenv("ENV", cls.env),
            database_url=db_url,
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            supabase_url=os.getenv("SUPABASE_URL", "").strip(),
            service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", "").strip(),
            identity_timeout_seconds=_float_env(
                "IDENTITY_TIMEOUT_SECONDS", cls.identity_timeout_seconds
            ),
            timezone=os.getenv("RACING_TIMEZONE", cls.timezone),
            bankroll_write_policy=os.getenv(
                "BANKROLL_WRITE_POLICY", cls.bankroll_write_policy
            ),
        )

    @property
    def identity_configured(self) -> bool:
        return bool(self.supabase_url and self.service_role_key)


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings.from_env()
