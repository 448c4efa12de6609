"""
Runtime configuration for priv8.

Values come from PRIV8_* environment variables and are collected into a single
immutable Settings object that is handed to the services that need it.
"""
import os
import secrets
from dataclasses import dataclass
from functools import lru_cache

from priv8.core.errors import ConfigurationError
from priv8.core.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SALT = "priv8-dev-salt"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class Settings:
    """
    Service-wide configuration.

    Attributes:
        salt: Process-wide salt mixed into every passphrase key derivation
        db_url: SQLAlchemy database URL
        jwt_signing_key: HS256 key used to sign admin tokens
        jwt_expiration_hours: Lifetime of an admin token
        admin_username: Login name accepted by /api/auth/login
        admin_password_hash: Bcrypt hash of the admin password; empty disables login
        debug: FastAPI debug flag
    """
    salt: str
    db_url: str = "sqlite:///.data/priv8.db"
    jwt_signing_key: str = ""
    jwt_expiration_hours: int = 72
    admin_username: str = "admin"
    admin_password_hash: str = ""
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        debug = _env_bool("PRIV8_DEBUG", "false")

        salt = os.getenv("PRIV8_SALT")
        if not salt:
            if not debug:
                raise ConfigurationError("PRIV8_SALT must be set when PRIV8_DEBUG is not true")
            logger.warning("PRIV8_SALT is not set, falling back to the development salt")
            salt = DEFAULT_SALT

        signing_key = os.getenv("PRIV8_JWT_SIGNING_KEY")
        if not signing_key:
            # Tokens will not survive a restart
            logger.warning("PRIV8_JWT_SIGNING_KEY is not set, using a random per-process key")
            signing_key = secrets.token_urlsafe(32)

        return cls(
            salt=salt,
            db_url=os.getenv("PRIV8_DB_URL") or "sqlite:///.data/priv8.db",
            jwt_signing_key=signing_key,
            jwt_expiration_hours=int(os.getenv("PRIV8_JWT_EXPIRATION_HOURS", "72")),
            admin_username=os.getenv("PRIV8_ADMIN_USERNAME", "admin"),
            admin_password_hash=os.getenv("PRIV8_ADMIN_PASSWORD_HASH", ""),
            debug=debug,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """FastAPI dependency returning the process settings, read once."""
    return Settings.from_env()
