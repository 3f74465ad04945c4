"""Configuration model and config-file loading for fanatic."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from . import config_constants


def _is_test_environment() -> bool:
    """Check if we're running in a test environment."""
    import sys

    if "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ:
        return True
    if os.environ.get("TESTING", "").lower() in ("1", "true", "yes"):
        return True
    return False


# Tests configure PORT and friends explicitly; never pick up a developer's .env
if not _is_test_environment():
    try:
        load_dotenv(override=False)
    except (PermissionError, OSError):
        pass

DEFAULT_ENDPOINT = config_constants.DEFAULT_ENDPOINT
DEFAULT_STRATEGY = config_constants.DEFAULT_STRATEGY
VALID_STRATEGIES = config_constants.VALID_STRATEGIES
DEFAULT_TIMEOUT_SECONDS = config_constants.DEFAULT_TIMEOUT_SECONDS
MIN_TIMEOUT_SECONDS = config_constants.MIN_TIMEOUT_SECONDS
DEFAULT_USER_AGENT = config_constants.DEFAULT_USER_AGENT
DEFAULT_WORKERS = config_constants.DEFAULT_WORKERS
DEFAULT_HOST = config_constants.DEFAULT_HOST
DEFAULT_PORT = config_constants.DEFAULT_PORT
DEFAULT_REFRESH_INTERVAL_SECONDS = config_constants.DEFAULT_REFRESH_INTERVAL_SECONDS
MIN_REFRESH_INTERVAL_SECONDS = config_constants.MIN_REFRESH_INTERVAL_SECONDS
DEFAULT_LOG_LEVEL = config_constants.DEFAULT_LOG_LEVEL
VALID_LOG_LEVELS = config_constants.VALID_LOG_LEVELS

MAX_PORT = 65535


class Config(BaseModel):
    """Configuration model for the scrape-and-publish pipeline.

    The model is immutable (frozen) after creation. It can be built
    programmatically, from CLI arguments, or from a JSON/YAML file loaded
    with `load_config_file()`.

    Attributes:
        endpoint: Show page to scrape.
        strategy: Extraction strategy, "player_json" (current page markup,
            one JSON fetch per episode) or "legacy" (fields scraped from
            the card markup, MP3 URL synthesized from a template).
        output: File to write the feed to. None or "-" writes to stdout.
        user_agent: HTTP User-Agent header for requests.
        timeout: Request timeout in seconds (minimum: 1).
        workers: Concurrent player JSON fetches. 1 keeps fetches sequential.
        serve: Serve the feed over HTTP instead of generating it once.
        host: Interface to bind in serve mode.
        port: Port to bind in serve mode. Falls back to the PORT
            environment variable, then 8080.
        refresh_interval: Seconds between feed regenerations in serve mode.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional log file path.
        show_title: Channel title.
        show_description: Channel description.
        show_language: Channel language code.
        show_copyright: Channel copyright string.
        show_link: Channel link. Defaults to the endpoint.
        legacy_mp3_url_template: Template used by the legacy strategy;
            receives ``{number}`` and ``{date}`` (YYMMDD).

    Example:
        >>> from fanatic import Config
        >>> cfg = Config(endpoint="https://www.kcrw.com/music/shows/henry-rollins")
        >>> cfg.show_link
        'https://www.kcrw.com/music/shows/henry-rollins'
    """

    endpoint: str = Field(default=DEFAULT_ENDPOINT, alias="endpoint")
    strategy: str = Field(default=DEFAULT_STRATEGY, alias="strategy")
    output: Optional[str] = Field(default=None, alias="output")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, alias="user_agent")
    timeout: int = Field(default=DEFAULT_TIMEOUT_SECONDS, alias="timeout")
    workers: int = Field(default=DEFAULT_WORKERS, alias="workers")
    serve: bool = Field(default=False, alias="serve")
    host: str = Field(default=DEFAULT_HOST, alias="host")
    port: int = Field(
        default=None,  # type: ignore[assignment]
        alias="port",
        validate_default=True,
        description="Listen port. Can be set via PORT environment variable.",
    )
    refresh_interval: int = Field(
        default=DEFAULT_REFRESH_INTERVAL_SECONDS, alias="refresh_interval"
    )
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, alias="log_level")
    log_file: Optional[str] = Field(default=None, alias="log_file")
    show_title: str = Field(default=config_constants.DEFAULT_SHOW_TITLE, alias="show_title")
    show_description: str = Field(
        default=config_constants.DEFAULT_SHOW_DESCRIPTION, alias="show_description"
    )
    show_language: str = Field(
        default=config_constants.DEFAULT_SHOW_LANGUAGE, alias="show_language"
    )
    show_copyright: str = Field(
        default=config_constants.DEFAULT_SHOW_COPYRIGHT, alias="show_copyright"
    )
    show_link: Optional[str] = Field(default=None, alias="show_link")
    legacy_mp3_url_template: str = Field(
        default=config_constants.DEFAULT_LEGACY_MP3_URL_TEMPLATE,
        alias="legacy_mp3_url_template",
    )

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    @field_validator("endpoint", mode="before")
    @classmethod
    def _strip_endpoint(cls, value: Any) -> str:
        if value is None:
            return DEFAULT_ENDPOINT
        value = str(value).strip()
        return value or DEFAULT_ENDPOINT

    @field_validator("strategy", mode="before")
    @classmethod
    def _normalize_strategy(cls, value: Any) -> str:
        if value is None or str(value).strip() == "":
            return DEFAULT_STRATEGY
        return str(value).strip().lower().replace("-", "_")

    @field_validator("strategy", mode="after")
    @classmethod
    def _validate_strategy(cls, value: str) -> str:
        if value not in VALID_STRATEGIES:
            raise ValueError(f"strategy must be one of {VALID_STRATEGIES}, got: {value}")
        return value

    @field_validator("output", "log_file", "show_link", mode="before")
    @classmethod
    def _strip_optional(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("user_agent", mode="before")
    @classmethod
    def _coerce_user_agent(cls, value: Any) -> str:
        if value is None:
            return DEFAULT_USER_AGENT
        value_str = str(value).strip()
        return value_str or DEFAULT_USER_AGENT

    @field_validator("timeout", mode="before")
    @classmethod
    def _ensure_timeout(cls, value: Any) -> int:
        if value is None or value == "":
            return DEFAULT_TIMEOUT_SECONDS
        try:
            timeout = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("timeout must be an integer") from exc
        return max(MIN_TIMEOUT_SECONDS, timeout)

    @field_validator("workers", mode="before")
    @classmethod
    def _ensure_workers(cls, value: Any) -> int:
        if value is None or value == "":
            return DEFAULT_WORKERS
        try:
            workers = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("workers must be an integer") from exc
        if workers < 1:
            raise ValueError("workers must be at least 1")
        return workers

    @field_validator("port", mode="before")
    @classmethod
    def _load_port_from_env(cls, value: Any) -> int:
        """Use the PORT environment variable when no port is configured."""
        if value is None or str(value).strip() == "":
            value = os.getenv("PORT", "").strip() or DEFAULT_PORT
        try:
            port = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"port must be an integer, got: {value!r}") from exc
        if not 0 <= port <= MAX_PORT:
            raise ValueError(f"port must be between 0 and {MAX_PORT}, got: {port}")
        return port

    @field_validator("refresh_interval", mode="before")
    @classmethod
    def _ensure_refresh_interval(cls, value: Any) -> int:
        if value is None or value == "":
            return DEFAULT_REFRESH_INTERVAL_SECONDS
        try:
            interval = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("refresh_interval must be an integer") from exc
        return max(MIN_REFRESH_INTERVAL_SECONDS, interval)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        if value is None:
            return DEFAULT_LOG_LEVEL
        return str(value).strip().upper() or DEFAULT_LOG_LEVEL

    @field_validator("log_level", mode="after")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        if value not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}, got: {value}")
        return value

    @field_validator("legacy_mp3_url_template", mode="after")
    @classmethod
    def _validate_template(cls, value: str) -> str:
        if "{number}" not in value or "{date}" not in value:
            raise ValueError("legacy_mp3_url_template must contain {number} and {date}")
        return value

    @model_validator(mode="after")
    def _default_show_link(self) -> "Config":
        if self.show_link is None:
            # Frozen model: bypass the setattr guard for this derived default
            object.__setattr__(self, "show_link", self.endpoint)
        return self

    @property
    def writes_to_stdout(self) -> bool:
        return self.output is None or self.output == "-"


def load_config_file(path: str) -> Dict[str, Any]:
    """Load configuration from a JSON or YAML file.

    The file format is picked from the extension (`.json`, `.yaml` or
    `.yml`). The returned mapping can be unpacked into `Config`.

    Args:
        path: Path to the configuration file. Supports ``~`` expansion.

    Returns:
        Dictionary of configuration values keyed by `Config` field name.

    Raises:
        ValueError: If the path is empty, the file does not exist, the
            format is unsupported, parsing fails, or the top level is not
            a mapping.

    Example:
        >>> cfg = Config(**load_config_file("fanatic.yaml"))
    """
    if not path:
        raise ValueError("Config path cannot be empty")

    cfg_path = Path(path).expanduser()
    try:
        resolved = cfg_path.resolve()
    except (OSError, RuntimeError) as exc:
        raise ValueError(f"Invalid config path: {path} ({exc})") from exc

    if not resolved.exists():
        raise ValueError(f"Config file not found: {resolved}")

    suffix = resolved.suffix.lower()
    try:
        text = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Failed to read config file {resolved}: {exc}") from exc

    if suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON config file {resolved}: {exc}") from exc
    elif suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:  # type: ignore[attr-defined]
            raise ValueError(f"Invalid YAML config file {resolved}: {exc}") from exc
    else:
        raise ValueError(f"Unsupported config file type: {resolved.suffix}")

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping/object at the top level")

    return data
