"""
asyncllm - Configuration

Settings read from the environment.

Variables:
- ASYNCLLM_TIMEOUT: connect/read timeout in seconds (default 60)
- ASYNCLLM_METRICS: record Prometheus metrics (default true)
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default WARNING)
- LOG_FORMAT: json or text (default json)
"""

import os
from dataclasses import dataclass

from .core.errors import ConfigError


TRUTHY = {"1", "true", "yes", "on"}
FALSY = {"0", "false", "no", "off"}

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
LOG_FORMATS = {"json", "text"}


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.lower().strip()
    if value in TRUTHY:
        return True
    if value in FALSY:
        return False
    raise ConfigError(name, raw, "one of: " + ", ".join(sorted(TRUTHY | FALSY)))


def _get_timeout(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(name, raw, "a number of seconds") from None
    if value <= 0:
        raise ConfigError(name, raw, "a positive number of seconds")
    return value


@dataclass(frozen=True)
class Settings:
    """Resolved settings."""
    timeout: float = 60.0
    metrics_enabled: bool = True
    log_level: str = "WARNING"
    log_format: str = "json"

    @property
    def json_logs(self) -> bool:
        return self.log_format == "json"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Read settings from the environment.

        Raises:
            ConfigError: If a variable is set to an unusable value
        """
        log_level = os.getenv("LOG_LEVEL", "WARNING").upper().strip()
        if log_level not in LOG_LEVELS:
            raise ConfigError("LOG_LEVEL", log_level, "one of: " + ", ".join(sorted(LOG_LEVELS)))

        log_format = os.getenv("LOG_FORMAT", "json").lower().strip()
        if log_format not in LOG_FORMATS:
            raise ConfigError("LOG_FORMAT", log_format, "json or text")

        return cls(
            timeout=_get_timeout("ASYNCLLM_TIMEOUT", 60.0),
            metrics_enabled=_get_bool("ASYNCLLM_METRICS", True),
            log_level=log_level,
            log_format=log_format,
        )
