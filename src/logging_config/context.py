"""Request Context Management.

Task-local request context using contextvars, so every log line emitted
while a single API call or feed session is in flight carries the same
request id. asyncio copies the context per task, so concurrent requests
never see each other's ids.
"""

import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Any


_request_id_var: ContextVar[str] = ContextVar("request_id", default="")
_extra_context_var: ContextVar[dict] = ContextVar("extra_context", default={})


def generate_request_id() -> str:
    """Generate a unique request ID using UUID4."""
    return str(uuid.uuid4())


def get_request_id() -> str:
    return _request_id_var.get()


def get_context_dict() -> dict[str, Any]:
    """Get all context variables as a dictionary for log binding."""
    ctx: dict[str, Any] = {}
    req_id = _request_id_var.get()
    if req_id:
        ctx["request_id"] = req_id
    extra = _extra_context_var.get()
    if extra:
        ctx.update(extra)
    return ctx


@dataclass
class RequestContext:
    """Context manager binding a request id and extra fields to log entries.

    Nested contexts restore the outer values on exit.

    Example:
        with RequestContext(extra={"method": "GET", "path": "/accounts/"}):
            logger.debug("sending")  # includes request_id, method, path
    """

    request_id: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    _tokens: list[Token] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if not self.request_id:
            self.request_id = generate_request_id()

    def __enter__(self) -> "RequestContext":
        self._tokens = [
            _request_id_var.set(self.request_id),
            _extra_context_var.set(self.extra.copy()),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        request_token, extra_token = self._tokens
        _extra_context_var.reset(extra_token)
        _request_id_var.reset(request_token)
        self._tokens = []

