"""Logging Configuration.

Settings for log levels and output formats.
"""

from dataclasses import dataclass, field
from enum import Enum


class LogLevel(str, Enum):
    """Log level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output format."""
    JSON = "json"
    CONSOLE = "console"


@dataclass
class LoggingConfig:
    """Structured logging configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.CONSOLE
    include_caller: bool = False
    service_name: str = "reticule"
    # Third-party loggers held at WARNING regardless of level
    quiet_loggers: list[str] = field(
        default_factory=lambda: ["httpx", "httpcore", "websockets", "asyncio"]
    )


DEFAULT_LOGGING_CONFIG = LoggingConfig()
