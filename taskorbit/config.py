"""
Service configuration loaded from environment variables.
"""
import os
from functools import lru_cache
from typing import Optional


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Runtime settings for the TaskOrbit service."""

    def __init__(
        self,
        environment: Optional[str] = None,
        storage_backend: Optional[str] = None,
        db_path: Optional[str] = None,
        redis_url: Optional[str] = None,
        jwt_secret: Optional[str] = None,
        jwt_algorithm: str = "HS256",
        jwt_expires_minutes: Optional[int] = None,
        bcrypt_rounds: Optional[int] = None,
        log_level: Optional[str] = None,
        port: Optional[int] = None,
        cors_origin: Optional[str] = None,
        seed_on_startup: Optional[bool] = None,
    ):
        self.environment = environment or os.getenv("TASKORBIT_ENV", "development")
        self.storage_backend = (storage_backend or os.getenv("TASKORBIT_STORAGE", "sqlite")).lower()
        self.db_path = db_path or os.getenv("TASKORBIT_DB_PATH", os.path.join("data", "taskorbit.db"))
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.jwt_secret = jwt_secret or os.getenv("JWT_SECRET", "taskorbit-dev-secret-change-me")
        self.jwt_algorithm = jwt_algorithm
        self.jwt_expires_minutes = jwt_expires_minutes or int(os.getenv("JWT_EXPIRES_MINUTES", "10080"))
        self.bcrypt_rounds = bcrypt_rounds or int(os.getenv("BCRYPT_ROUNDS", "12"))
        self.log_level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
        self.port = port or int(os.getenv("TASKORBIT_PORT", "8080"))
        self.cors_origin = cors_origin or os.getenv("CORS_ORIGIN", "http://localhost:3001")
        self.seed_on_startup = _env_bool("TASKORBIT_SEED") if seed_on_startup is None else seed_on_startup

        if self.storage_backend not in ("sqlite", "redis"):
            raise ValueError(
                f"Invalid TASKORBIT_STORAGE '{self.storage_backend}'. Must be one of: sqlite, redis"
            )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings()
