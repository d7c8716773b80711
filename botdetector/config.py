"""Client configuration, built once at process start."""

from dataclasses import dataclass, asdict, replace
from pathlib import Path
from typing import Optional, Dict
from urllib.parse import urlsplit
import json
import logging
import os

from botdetector.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_SEND_INTERVAL,
    DEFAULT_USER_AGENT,
)
from botdetector.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_ENV_API_PATH = "BOT_DETECTOR_API_PATH"
_ENV_PLUGIN_VERSION = "BOT_DETECTOR_PLUGIN_VERSION"
_ENV_CONNECT_TIMEOUT = "BOT_DETECTOR_CONNECT_TIMEOUT"
_ENV_READ_TIMEOUT = "BOT_DETECTOR_READ_TIMEOUT"
_ENV_USER_AGENT = "BOT_DETECTOR_USER_AGENT"
_ENV_LOG_LEVEL = "BOT_DETECTOR_LOG_LEVEL"
_ENV_SEND_AUTOMATIC = "BOT_DETECTOR_SEND_AUTOMATIC"
_ENV_SEND_INTERVAL = "BOT_DETECTOR_SEND_INTERVAL"

_DEFAULT_LOG_LEVEL = "INFO"
_DEFAULT_SEND_AUTOMATIC = True


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _coerce_float(value: Optional[str], default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _coerce_int(value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _parse_env_file(path: Path) -> Dict[str, str]:
    data: Dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        data[key.strip()] = _strip_quotes(value.strip())
    return data


def _load_config_data(path: Path) -> Dict[str, str]:
    if not path.exists():
        raise ConfigurationError("config_path", f"Config file not found: {path}")
    if path.suffix.lower() == ".json":
        payload = json.loads(path.read_text(encoding="utf-8"))
        return {str(k): str(v) for k, v in payload.items()}
    return _parse_env_file(path)


def _validate_base_url(value: str) -> str:
    parts = urlsplit(value)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError("api_base_url", f"expected an absolute http(s) URL, got {value!r}")
    return value.rstrip("/")


@dataclass(frozen=True)
class Config:
    api_base_url: str = DEFAULT_API_BASE_URL
    plugin_version: str = ""
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = _DEFAULT_LOG_LEVEL

    # Sighting flush schedule
    send_automatic: bool = _DEFAULT_SEND_AUTOMATIC
    send_interval: int = DEFAULT_SEND_INTERVAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "api_base_url", _validate_base_url(self.api_base_url))

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            api_base_url=os.environ.get(_ENV_API_PATH) or DEFAULT_API_BASE_URL,
            plugin_version=os.environ.get(_ENV_PLUGIN_VERSION, ""),
            connect_timeout=_coerce_float(os.environ.get(_ENV_CONNECT_TIMEOUT), DEFAULT_CONNECT_TIMEOUT),
            read_timeout=_coerce_float(os.environ.get(_ENV_READ_TIMEOUT), DEFAULT_READ_TIMEOUT),
            user_agent=os.environ.get(_ENV_USER_AGENT) or DEFAULT_USER_AGENT,
            log_level=os.environ.get(_ENV_LOG_LEVEL) or _DEFAULT_LOG_LEVEL,
            send_automatic=_coerce_bool(os.environ.get(_ENV_SEND_AUTOMATIC), _DEFAULT_SEND_AUTOMATIC),
            send_interval=_coerce_int(os.environ.get(_ENV_SEND_INTERVAL), DEFAULT_SEND_INTERVAL),
        )

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """Environment config, overlaid with a .env-style or JSON file when given."""
        env_config = cls.from_env()
        if not config_path:
            return env_config

        file_data = _load_config_data(Path(config_path))
        logger.debug("Loaded %d config values from %s", len(file_data), config_path)
        return cls(
            api_base_url=file_data.get(_ENV_API_PATH) or env_config.api_base_url,
            plugin_version=file_data.get(_ENV_PLUGIN_VERSION, env_config.plugin_version),
            connect_timeout=_coerce_float(
                file_data.get(_ENV_CONNECT_TIMEOUT),
                env_config.connect_timeout,
            ),
            read_timeout=_coerce_float(
                file_data.get(_ENV_READ_TIMEOUT),
                env_config.read_timeout,
            ),
            user_agent=file_data.get(_ENV_USER_AGENT) or env_config.user_agent,
            log_level=file_data.get(_ENV_LOG_LEVEL) or env_config.log_level,
            send_automatic=_coerce_bool(
                file_data.get(_ENV_SEND_AUTOMATIC),
                env_config.send_automatic,
            ),
            send_interval=_coerce_int(
                file_data.get(_ENV_SEND_INTERVAL),
                env_config.send_interval,
            ),
        )

    def with_overrides(self, **changes) -> "Config":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def to_dict(self) -> Dict[str, str]:
        return {k: str(v) for k, v in asdict(self).items()}
