"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from asapi.core.authorize.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_GC_INTERVAL = 300
DEFAULT_REQUEST_TIMEOUT = 5.0
DEFAULT_TOKEN_EXPIRY_MARGIN = 30


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info(f"Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            logger.warning(f"Failed to read /run/secrets/{secret_name}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


def _env_bool(var_name: str, default: bool = False) -> bool:
    value = os.environ.get(var_name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(var_name: str, default, cast=int):
    value = os.environ.get(var_name, "").strip()
    if not value:
        return default
    try:
        return cast(value)
    except ValueError:
        raise ConfigurationError(f"Environment variable {var_name} must be a number, got {value!r}")


@dataclass
class Config:
    """Authorization client configuration container."""
    # Service
    asapi_url: str = ""
    service_identify: str = ""

    # Service principal
    client_id: str = ""
    client_secret: str = ""

    # Cache
    is_enabled_cache: bool = False
    cache_gc_interval: int = 0  # seconds; 0 means DEFAULT_CACHE_GC_INTERVAL

    # HTTP
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    # Refresh the service token this many seconds before it expires
    token_expiry_margin: int = DEFAULT_TOKEN_EXPIRY_MARGIN

    def get_url(self, router: str) -> str:
        """Absolute URL of a service route (e.g. "/oauth2/verify")."""
        if router.startswith(("http://", "https://")):
            return router
        return f"{self.asapi_url.rstrip('/')}/{router.lstrip('/')}"


def load_settings(strict: bool = True) -> Config:
    """Load client settings from environment and /run/secrets.

    Args:
        strict: Require ASAPI_URL, ASAPI_CLIENT_ID and the client secret

    Raises:
        ConfigurationError: If a required value is missing in strict mode
    """
    asapi_url = os.environ.get("ASAPI_URL", "").strip()
    client_id = os.environ.get("ASAPI_CLIENT_ID", "").strip()
    client_secret = _load_secret_from_file("asapi_client_secret", "ASAPI_CLIENT_SECRET") or ""

    if strict:
        missing = [
            name
            for name, value in (
                ("ASAPI_URL", asapi_url),
                ("ASAPI_CLIENT_ID", client_id),
                ("ASAPI_CLIENT_SECRET", client_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")

    cfg = Config(
        asapi_url=asapi_url,
        service_identify=os.environ.get("ASAPI_SERVICE_IDENTIFY", "").strip(),
        client_id=client_id,
        client_secret=client_secret,
        is_enabled_cache=_env_bool("ASAPI_ENABLE_CACHE"),
        cache_gc_interval=_env_number("ASAPI_CACHE_GC_INTERVAL", 0),
        request_timeout=_env_number("ASAPI_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT, float),
        token_expiry_margin=_env_number("ASAPI_TOKEN_EXPIRY_MARGIN", DEFAULT_TOKEN_EXPIRY_MARGIN),
    )

    logger.info(
        f"Settings loaded: url={cfg.asapi_url or '<unset>'}; service={cfg.service_identify or '<unset>'}; "
        f"cache={'on' if cfg.is_enabled_cache else 'off'}"
    )
    return cfg
