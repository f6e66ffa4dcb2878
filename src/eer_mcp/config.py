"""Configuration and settings module for the eer-mcp adapter.

Provides the :class:`AdapterConfig` class which centralises all configuration
for the adapter.  Configuration is resolved in priority order:

1. **Environment variables** (highest priority) -- ``SPRING_*``, ``SESSION_ID``,
   ``HOST``/``PORT`` and ``EER_MCP_*``
2. **Settings file** -- the ``.env`` file in the working directory (or the
   path given by ``EER_MCP_ENV_FILE``)
3. **Defaults** (lowest priority) -- sensible built-in values

Typical usage::

    config = AdapterConfig.load()                       # ./.env + environment
    config = AdapterConfig.load(env_file="/srv/.env")   # explicit settings file
    config = AdapterConfig(base_url="http://spring:8080")

    print(config.endpoint_url)   # http://spring:8080/enomix/common/ajaxHandler.ex
    print(config.domain_id)      # NODE0000000001
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Settings file name, looked up in the current working directory.
DEFAULT_ENV_FILE_NAME = ".env"

# Key of the session token line inside the settings file.  This is also the
# environment variable the token is read from at startup.
SESSION_KEY = "SESSION_ID"

# Prefix for adapter-specific variables that have no legacy name.
ENV_PREFIX = "EER_MCP_"

# Maps settings keys (env var or .env key) to AdapterConfig field names.
_STRING_KEYS = {
    "SPRING_BASE_URL": "base_url",
    "SPRING_AJAX_PATH": "ajax_path",
    "SPRING_DOMAIN_ID": "domain_id",
    SESSION_KEY: "session_id",
    "HOST": "host",
    f"{ENV_PREFIX}LOG_LEVEL": "log_level",
}

_INT_KEYS = {
    "PORT": "port",
}

_FLOAT_KEYS = {
    f"{ENV_PREFIX}TIMEOUT": "timeout_seconds",
}

# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class AdapterConfig(BaseModel):
    """Centralised configuration for the backend adapter.

    Attributes
    ----------
    base_url:
        Scheme and host of the Spring backend.
    ajax_path:
        Path of the single ``ajaxHandler`` endpoint every command is posted to.
    domain_id:
        Domain identifier sent as ``domainId`` with every command.
    session_id:
        Initial session token (``JSESSIONID``).  Empty means unconfigured.
    timeout_seconds:
        Fixed request timeout for backend calls.  There is no retry.
    log_level:
        Python logging level name.
    host, port:
        Bind address for the HTTP/SSE transport.
    env_file:
        The settings file the session token is persisted to.
    """

    base_url: str = Field(
        default="http://localhost:19090",
        description="Base URL of the Spring backend.",
    )
    ajax_path: str = Field(
        default="/enomix/common/ajaxHandler.ex",
        description="Endpoint path that receives form-encoded commands.",
    )
    domain_id: str = Field(
        default="NODE0000000001",
        description="Domain identifier attached to every command.",
    )
    session_id: str = Field(
        default="",
        description="Initial JSESSIONID value.  Empty when not configured.",
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Backend request timeout in seconds.",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL.",
    )
    host: str = Field(
        default="127.0.0.1",
        description="Bind host for the SSE transport.",
    )
    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Bind port for the SSE transport.",
    )
    env_file: Optional[str] = Field(
        default=None,
        description="Path of the .env settings file.",
    )

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def resolve_env_file(self) -> "AdapterConfig":
        """Resolve ``env_file`` to an absolute path, defaulting to ``./.env``."""
        if self.env_file is None:
            self.env_file = str(Path.cwd() / DEFAULT_ENV_FILE_NAME)
        else:
            self.env_file = str(Path(self.env_file).resolve())
        return self

    @model_validator(mode="after")
    def validate_log_level(self) -> "AdapterConfig":
        """Normalise and validate the log level string."""
        normalised = self.log_level.upper().strip()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalised not in valid_levels:
            raise ValueError(
                f"Invalid log_level '{self.log_level}'. "
                f"Must be one of: {', '.join(sorted(valid_levels))}."
            )
        self.log_level = normalised
        return self

    @model_validator(mode="after")
    def normalise_values(self) -> "AdapterConfig":
        """Trim ``base_url``, ``ajax_path`` and ``session_id`` into canonical form."""
        self.base_url = self.base_url.rstrip("/")
        if not self.ajax_path.startswith("/"):
            self.ajax_path = "/" + self.ajax_path
        self.session_id = self.session_id.strip()
        return self

    # ------------------------------------------------------------------
    # Factory: load from settings file + environment
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, env_file: Optional[str] = None) -> "AdapterConfig":
        """Load configuration with full resolution: environment -> .env -> defaults.

        Parameters
        ----------
        env_file:
            Explicit path to the settings file.  When *None*, the
            ``EER_MCP_ENV_FILE`` variable is consulted, then ``./.env``.

        Returns
        -------
        AdapterConfig
            Fully resolved configuration object.
        """
        if env_file is None:
            env_file = os.environ.get(f"{ENV_PREFIX}ENV_FILE")
        if env_file is None:
            env_file = str(Path.cwd() / DEFAULT_ENV_FILE_NAME)
        resolved = str(Path(env_file).resolve())

        file_values = _collect_overrides(_load_env_file(resolved), source=resolved)
        env_values = _collect_overrides(os.environ, source="environment")

        merged: dict = {}
        merged.update(file_values)
        merged.update(env_values)
        merged["env_file"] = resolved

        return cls.model_validate(merged)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def endpoint_url(self) -> str:
        """Absolute URL of the ajax endpoint."""
        return f"{self.base_url}{self.ajax_path}"

    @property
    def session_configured(self) -> bool:
        return bool(self.session_id)

    # ------------------------------------------------------------------
    # Utility
    # ------------------------------------------------------------------

    def configure_logging(self) -> None:
        """Apply the configured log level to the ``eer_mcp`` logger.

        Logs always go to stderr: stdout carries the MCP stdio channel.
        Calling this more than once does not add duplicate handlers.
        """
        pkg_logger = logging.getLogger("eer_mcp")
        pkg_logger.setLevel(self.log_level)

        if not pkg_logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(self.log_level)
            formatter = logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
            handler.setFormatter(formatter)
            pkg_logger.addHandler(handler)

    def to_dict(self, mask_session: bool = True) -> dict:
        """Return all configuration values as a plain dictionary."""
        data = self.model_dump()
        if mask_session:
            data["session_id"] = mask_token(self.session_id)
        return data

    def __repr__(self) -> str:
        return (
            f"AdapterConfig("
            f"endpoint_url={self.endpoint_url!r}, "
            f"domain_id={self.domain_id!r}, "
            f"session_configured={self.session_configured}, "
            f"log_level={self.log_level!r}, "
            f"env_file={self.env_file!r}"
            f")"
        )


def mask_token(token: str) -> str:
    """Return a display-safe form of a session token."""
    if not token:
        return ""
    if len(token) <= 10:
        return "*" * len(token)
    return f"{token[:10]}..."


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _load_env_file(path: str) -> dict:
    """Read a ``.env`` file and return its key/value pairs.

    Returns an empty dict if the file does not exist.
    """
    if not Path(path).is_file():
        logger.debug("No settings file at %s. Using defaults.", path)
        return {}

    try:
        values = dotenv_values(path)
    except OSError:
        logger.warning("Could not read settings file %s. Ignoring.", path, exc_info=True)
        return {}

    logger.info("Loaded settings from %s", path)
    return {key: value for key, value in values.items() if value is not None}


def _collect_overrides(source_values, source: str) -> dict:
    """Translate recognised settings keys into AdapterConfig field values.

    Invalid numeric values are logged and skipped.
    """
    overrides: dict = {}

    for key, field_name in _STRING_KEYS.items():
        value = source_values.get(key)
        if value is not None:
            overrides[field_name] = value

    for key, field_name in _INT_KEYS.items():
        value = source_values.get(key)
        if value is None:
            continue
        try:
            overrides[field_name] = int(value)
        except ValueError:
            logger.warning(
                "Invalid %s value in %s: %r. Must be an integer. Ignoring.",
                key, source, value,
            )

    for key, field_name in _FLOAT_KEYS.items():
        value = source_values.get(key)
        if value is None:
            continue
        try:
            overrides[field_name] = float(value)
        except ValueError:
            logger.warning(
                "Invalid %s value in %s: %r. Must be a number. Ignoring.",
                key, source, value,
            )

    if overrides:
        logger.debug(
            "Overrides from %s: %s",
            source,
            ", ".join(overrides.keys()),
        )

    return overrides
