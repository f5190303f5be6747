"""
Configuration Settings.

Two layers of configuration live here:

- ``Settings``: process settings bound from environment variables and a ``.env``
  file through Pydantic's BaseSettings (log level, remote endpoint, listener
  ports).
- ``CouponConfig``: the small JSON file persisted on behalf of the user (the
  bearer token and optional relay overrides). It is read from the working
  directory first and the user config directory second, and written back
  whenever the token changes.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Sequence

import click
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

APP_NAME = "mcd-coupon"
CONFIG_FILE_NAME = "config.json"
LOCAL_CONFIG_FILE_NAME = "mcd-coupon-config.json"

MCP_SERVER_URL = "https://mcp.mcd.cn/mcp-servers/mcd-mcp"


class ConfigSaveError(Exception):
    """Raised when the config file cannot be written to any candidate location.

    Args:
        message: Human-readable error description.
        paths: The locations that were attempted, in order.
    """

    def __init__(self, message: str, *, paths: Sequence[Path] = ()) -> None:
        super().__init__(message)
        self.paths = list(paths)


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Logging
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="MCD_COUPON_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log line format (simple, detailed, json)",
        alias="MCD_COUPON_LOG_FORMAT",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Also write DEBUG logs to a file under log_file_dir",
        alias="MCD_COUPON_ENABLE_FILE_LOGGING",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory for the log file when file logging is enabled",
        alias="MCD_COUPON_LOG_FILE_DIR",
    )

    # =====================================================================
    # Remote MCP endpoint
    # =====================================================================
    remote_url: str = Field(
        default=MCP_SERVER_URL,
        description="Remote MCP endpoint serving the coupon tools",
        alias="MCD_COUPON_REMOTE_URL",
    )
    remote_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout applied to every remote call",
        alias="MCD_COUPON_REMOTE_TIMEOUT",
    )

    # =====================================================================
    # Local listeners
    # =====================================================================
    relay_host: str = Field(
        default="0.0.0.0",
        description="Host address the JSON-RPC relay binds to",
        alias="MCD_COUPON_RELAY_HOST",
    )
    relay_port: int = Field(
        default=8080,
        description="Relay port used when the config file does not set mcp_server_port",
        alias="MCD_COUPON_RELAY_PORT",
    )
    web_host: str = Field(
        default="127.0.0.1",
        description="Host address the HTML front-end binds to",
        alias="MCD_COUPON_WEB_HOST",
    )
    web_port_start: int = Field(
        default=8080,
        description="First port tried by the HTML front-end",
        alias="MCD_COUPON_WEB_PORT_START",
    )
    web_port_end: int = Field(
        default=9000,
        description="Last port tried by the HTML front-end",
        alias="MCD_COUPON_WEB_PORT_END",
    )


settings = Settings()


# =====================================================================
# Persisted user configuration
# =====================================================================


def local_config_path() -> Path:
    """Config file in the current working directory."""
    return Path.cwd() / LOCAL_CONFIG_FILE_NAME


def user_config_path() -> Path:
    """Config file in the platform's per-user config directory."""
    return Path(click.get_app_dir(APP_NAME)) / CONFIG_FILE_NAME


class CouponConfig(BaseModel):
    """The user's persisted configuration.

    Attributes:
        token: The bearer token sent verbatim in the ``Authorization`` header.
        mcp_server_port: Optional port for the relay (``mcpserver`` mode).
        mcp_server_url: Optional override of the remote MCP endpoint.
    """

    token: str = ""
    mcp_server_port: Optional[int] = Field(default=None, ge=0, le=65535)
    mcp_server_url: Optional[str] = None

    def has_valid_token(self) -> bool:
        return bool(self.token.strip())

    def clear_token(self) -> None:
        self.token = ""

    @staticmethod
    def config_path() -> Path:
        """Preferred save location, shown to users who need to edit the file by hand."""
        return user_config_path()

    @classmethod
    def load(cls, paths: Optional[Sequence[Path]] = None) -> "CouponConfig":
        """Load the first readable config file, or defaults.

        Candidates are tried in order (working directory, then user config
        directory); missing, unreadable or malformed files are skipped.
        """
        candidates = list(paths) if paths is not None else [local_config_path(), user_config_path()]
        for path in candidates:
            if not path.exists():
                continue
            try:
                config = cls._load_from_path(path)
            except (OSError, ValueError, ValidationError) as e:
                logger.debug("CouponConfig.load: skipping %s: %s", path, e)
                continue
            logger.debug("CouponConfig.load: loaded %s", path)
            return config
        return cls()

    @classmethod
    def _load_from_path(cls, path: Path) -> "CouponConfig":
        raw = path.read_text(encoding="utf-8")
        return cls.model_validate(json.loads(raw))

    def save(self, paths: Optional[Sequence[Path]] = None) -> Path:
        """Write the config to the first writable location and return it.

        The user config directory is preferred; the working directory is the
        fallback.

        Raises:
            ConfigSaveError: If no candidate location could be written.
        """
        candidates = list(paths) if paths is not None else [user_config_path(), local_config_path()]
        last_error: Optional[Exception] = None
        for path in candidates:
            try:
                self._save_to_path(path)
            except OSError as e:
                logger.debug("CouponConfig.save: cannot write %s: %s", path, e)
                last_error = e
                continue
            logger.debug("CouponConfig.save: wrote %s", path)
            return path
        raise ConfigSaveError(
            f"Unable to save config file to any location: {last_error}",
            paths=candidates,
        )

    def _save_to_path(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2, exclude_none=True), encoding="utf-8")
