"""Structured Logging & Request Tracing.

Console or JSON logging plus request-id propagation for the
Coinbase Pro client.
"""

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import RequestContext, generate_request_id, get_request_id
from src.logging_config.setup import configure_logging, get_logger

__all__ = [
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "RequestContext",
    "configure_logging",
    "generate_request_id",
    "get_logger",
    "get_request_id",
]
