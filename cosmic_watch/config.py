"""Runtime configuration, read from the environment."""

import os
from functools import lru_cache

from dotenv import load_dotenv


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Configuration that adapts to environment without complaint."""

    def __init__(self):
        # Feed
        self.nasa_api_key = os.getenv("NASA_API_KEY", "DEMO_KEY")
        self.nasa_base_url = os.getenv("NASA_BASE_URL", "https://api.nasa.gov/neo/rest/v1")
        self.data_source = os.getenv("DATA_SOURCE", "live").strip().lower()
        self.feed_fallback = _env_bool("FEED_FALLBACK", True)
        self.cache_ttl = float(os.getenv("CACHE_TTL", "300"))  # 5 minutes
        self.http_timeout = float(os.getenv("HTTP_TIMEOUT", "30"))

        # Accounts
        self.jwt_secret = os.getenv("JWT_SECRET", "cosmic-watch-secret-key-change-in-production")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        self.access_token_expire_days = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))
        self.bcrypt_rounds = int(os.getenv("BCRYPT_ROUNDS", "10"))

        # Persistence
        self.data_file = os.getenv("DATA_FILE", "data.json")
        self.preferences_dir = os.getenv("PREFERENCES_DIR", "preferences")

        # Server
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "3001"))

        if self.data_source not in ("live", "fixture"):
            raise ValueError(f"DATA_SOURCE must be 'live' or 'fixture', got {self.data_source!r}")


@lru_cache()
def get_settings() -> Settings:
    """Single source of truth, cached for the life of the process."""
    load_dotenv()
    return Settings()
