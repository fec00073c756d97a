"""OCI Auth application configuration.

Loads settings from two YAML files:
  * oci_auth.settings.yaml : non-secret configuration
  * oci_auth.secrets.yaml  : secrets (never committed)

The IDCS service credentials may also come from the ``OCI_CLIENT_ID`` and
``OCI_CLIENT_SECRET`` environment variables, which take precedence over the
secrets file.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from oci_auth.auth.errors import ConfigurationError
from oci_auth.auth.idcs_client import DEFAULT_SCOPE
from oci_auth.auth.schemas import ServiceCredentials

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_FILE = Path("oci_auth.settings.yaml")
SECRETS_FILE  = Path("oci_auth.secrets.yaml")

CLIENT_ID_ENV     = "OCI_CLIENT_ID"
CLIENT_SECRET_ENV = "OCI_CLIENT_SECRET"

DEFAULT_BASE_URL = "https://idcs-8e8265d058d54299bdc845382c75339f.identity.oraclecloud.com"

LOG_LEVELS = ("trace", "debug", "info", "warn", "error", "off")


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


# ---------------------------------------------------------------------------
# Secrets models
# ---------------------------------------------------------------------------


class IdcsSecrets(BaseModel):
    client_id:     Optional[str] = None
    client_secret: Optional[str] = None


class Secrets(BaseModel):
    idcs: IdcsSecrets = Field(default_factory=IdcsSecrets)


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000


class IdentitySettings(BaseModel):
    """Where and how to reach the identity provider."""
    base_url:        str   = DEFAULT_BASE_URL
    scope:           str   = DEFAULT_SCOPE
    timeout_seconds: float = 30.0

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout_seconds must be greater than 0")
        return v


class LoggingSettings(BaseModel):
    level:        str           = "info"
    file_size_mb: int           = 10
    file_count:   int           = 5
    log_dir:      Optional[str] = None

    @field_validator("level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().lower()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v!r} (expected one of {', '.join(LOG_LEVELS)})")
        return level

    @field_validator("file_size_mb")
    @classmethod
    def _positive_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Log file size must be greater than 0 MB")
        return v

    @field_validator("file_count")
    @classmethod
    def _positive_count(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Log file count must be greater than 0")
        return v


class OciAuthConfig(BaseModel):
    server:   ServerSettings   = Field(default_factory=ServerSettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    logging:  LoggingSettings  = Field(default_factory=LoggingSettings)
    secrets:  Secrets          = Field(default_factory=Secrets)

    def has_service_credentials(self) -> bool:
        return bool(self.secrets.idcs.client_id and self.secrets.idcs.client_secret)

    def service_credentials(self) -> ServiceCredentials:
        """Return the IDCS service credentials.

        Raises:
            ConfigurationError: If the client id or secret is missing.
        """
        missing = []
        if not self.secrets.idcs.client_id:
            missing.append(CLIENT_ID_ENV)
        if not self.secrets.idcs.client_secret:
            missing.append(CLIENT_SECRET_ENV)
        if missing:
            raise ConfigurationError(
                f"Missing service credentials: {', '.join(missing)} is not set"
            )
        return ServiceCredentials(
            client_id=self.secrets.idcs.client_id,
            client_secret=self.secrets.idcs.client_secret,
        )


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------


def _apply_env_overrides(secrets_data: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay OCI_CLIENT_ID / OCI_CLIENT_SECRET onto the secrets mapping."""
    idcs = dict(secrets_data.get("idcs") or {})
    client_id = os.getenv(CLIENT_ID_ENV, "").strip()
    client_secret = os.getenv(CLIENT_SECRET_ENV, "").strip()
    if client_id:
        idcs["client_id"] = client_id
    if client_secret:
        idcs["client_secret"] = client_secret
    merged = dict(secrets_data)
    merged["idcs"] = idcs
    return merged


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_config(
    settings_path: Optional[Path] = None,
    secrets_path: Optional[Path] = None,
) -> OciAuthConfig:
    """Load and merge settings + secrets into a single *OciAuthConfig* object."""
    settings_data = _load_yaml(Path(settings_path) if settings_path else SETTINGS_FILE)
    secrets_data  = _load_yaml(Path(secrets_path) if secrets_path else SECRETS_FILE)

    # Merge: secrets live under the "secrets" key in OciAuthConfig
    settings_data["secrets"] = _apply_env_overrides(secrets_data)

    config = OciAuthConfig(**settings_data)
    logger.info(
        "Settings loaded (identity.base_url=%s, logging.level=%s, credentials=%s)",
        config.identity.base_url,
        config.logging.level,
        "set" if config.has_service_credentials() else "missing",
    )
    return config


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_config: Optional[OciAuthConfig] = None


def get_config() -> OciAuthConfig:
    """Return the global config, loading it from disk on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[OciAuthConfig]) -> None:
    """Set (or reset, with None) the global config instance."""
    global _config
    _config = config
