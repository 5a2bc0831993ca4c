"""Request observability hooks.

The request pipeline reports through an injected observer instead of a
module-level logger, at three points: before a request is sent, after a
response is received, and when a call fails.
"""

import logging
from typing import Optional, Protocol


class RequestObserver(Protocol):
    """Extension points invoked by the request pipeline."""

    def before_request(self, method: str, path: str) -> None:
        ...

    def after_response(
        self, method: str, path: str, status_code: int, duration_ms: float
    ) -> None:
        ...

    def on_error(self, method: str, path: str, error: BaseException) -> None:
        ...


class LoggingObserver:
    """Observer that writes request activity to a standard logger.

    Only method, path, status and timing are logged; headers and bodies
    (which carry credentials and signatures) never are.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        slow_threshold_ms: float = 1000.0,
    ):
        self._logger = logger or logging.getLogger("src.coinbasepro.api")
        self._slow_threshold_ms = slow_threshold_ms

    def before_request(self, method: str, path: str) -> None:
        self._logger.debug("%s %s", method, path, extra={"method": method, "path": path})

    def after_response(
        self, method: str, path: str, status_code: int, duration_ms: float
    ) -> None:
        extra = {
            "method": method,
            "path": path,
            "status_code": status_code,
            "duration_ms": round(duration_ms, 2),
        }
        if duration_ms >= self._slow_threshold_ms:
            self._logger.warning(
                "Slow request: %s %s took %.1fms", method, path, duration_ms, extra=extra
            )
        else:
            self._logger.debug(
                "%s %s -> %d in %.1fms", method, path, status_code, duration_ms, extra=extra
            )

    def on_error(self, method: str, path: str, error: BaseException) -> None:
        self._logger.warning(
            "%s %s failed: %s", method, path, error,
            extra={"method": method, "path": path},
        )

