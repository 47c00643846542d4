"""
Runtime configuration for the photo API.

All environment lookups happen here; the rest of the application receives an
explicit Settings instance.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

logger = logging.getLogger(__name__)

PRODUCTION_ENV = "production"
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _parse_bool(name: str, value: str | None, *, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    error_message = f"Invalid boolean for {name}: {value!r}"
    raise ValueError(error_message)


@dataclass(frozen=True)
class Settings:
    app_env: str = "development"
    storage_backend: str = "azure"
    storage_connection_string: str | None = None
    container_name: str = "photos"
    filesystem_storage_path: str = "./data"
    auth_enabled: bool = True
    jwt_secret_key: str | None = None
    oidc_authority: str | None = None
    oidc_audience: str | None = None
    principal_claim: str = "sub"

    def __post_init__(self) -> None:
        if not self.auth_enabled and self.app_env.lower() == PRODUCTION_ENV:
            error_message = "AUTH_ENABLED cannot be disabled in production"
            raise ValueError(error_message)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.
        STORAGE_CONNECTION_STRING falls back to the Functions host's
        AzureWebJobsStorage connection when unset.
        """
        connection_string = os.getenv("STORAGE_CONNECTION_STRING") or os.getenv(
            "AzureWebJobsStorage"
        )
        return cls(
            app_env=os.getenv("APP_ENV", "development"),
            storage_backend=os.getenv("STORAGE_BACKEND", "azure").lower(),
            storage_connection_string=connection_string,
            container_name=os.getenv("PHOTO_CONTAINER", "photos"),
            filesystem_storage_path=os.getenv("FILESYSTEM_STORAGE_PATH", "./data"),
            auth_enabled=_parse_bool(
                "AUTH_ENABLED", os.getenv("AUTH_ENABLED"), default=True
            ),
            jwt_secret_key=os.getenv("JWT_SECRET_KEY") or None,
            oidc_authority=os.getenv("OIDC_AUTHORITY") or None,
            oidc_audience=os.getenv("OIDC_AUDIENCE") or None,
            principal_claim=os.getenv("PRINCIPAL_CLAIM", "sub"),
        )


@lru_cache
def get_settings() -> Settings:
    """
    Dependency returning the process-wide settings, read once from the environment.
    """
    settings = Settings.from_env()
    if settings.auth_enabled:
        logger.info("Authorization gate enabled (env=%s)", settings.app_env)
    else:
        logger.warning(
            "Authorization gate DISABLED (env=%s); photos are not owner-scoped",
            settings.app_env,
        )
    return settings
