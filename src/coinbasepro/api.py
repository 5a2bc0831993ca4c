"""Coinbase Pro Request Pipeline.

Signs and issues REST requests, decodes JSON bodies or structured
errors, and attaches header-based pagination to paged results.
Errors are terminal; nothing here retries.
"""

import dataclasses
import json
import time
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Optional, Protocol, TypeVar

import httpx

from src.coinbasepro.auth import Credentials, build_message
from src.coinbasepro.auth import timestamp as unix_timestamp
from src.coinbasepro.exceptions import APIError, EncodingError, TransportError
from src.coinbasepro.observer import LoggingObserver, RequestObserver
from src.coinbasepro.pagination import Pagination, apply_page
from src.logging_config.context import RequestContext

T = TypeVar("T")

# A decoder turns decoded JSON into the caller's result type (e.g. Model.from_api).
Decoder = Callable[[Any], T]

DEFAULT_USER_AGENT = "Python Reticule v0.1"


class APIRequester(Protocol):
    """The request surface shared by APIClient and its development wrapper."""

    async def get(self, path: str, result: Optional[Decoder] = None) -> Any:
        ...

    async def post(
        self, path: str, content: Any = None, result: Optional[Decoder] = None
    ) -> Any:
        ...

    async def do(
        self,
        method: str,
        path: str,
        content: Any = None,
        result: Optional[Decoder] = None,
    ) -> Any:
        ...

    async def close(self) -> None:
        ...


def json_default(value: Any) -> Any:
    """``json.dumps`` hook for request bodies and typed results."""
    if hasattr(value, "to_api"):
        return value.to_api()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_json(value: Any) -> bytes:
    """Serialize ``value`` to compact JSON bytes.

    Raises:
        EncodingError: If the value cannot be represented as JSON.
    """
    try:
        return json.dumps(value, default=json_default, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"cannot encode request body: {e}") from e


def decode_json(response: httpx.Response) -> Any:
    try:
        return json.loads(response.content)
    except ValueError as e:
        raise EncodingError(
            f"cannot decode response body ({response.status_code}): {e}"
        ) from e


def decode_error(response: httpx.Response) -> APIError:
    payload = decode_json(response)
    message = payload.get("message", "") if isinstance(payload, dict) else ""
    return APIError(status_code=response.status_code, message=message)


class APIClient:
    """Signed HTTP access to the Coinbase Pro REST API.

    Safe to share between concurrent tasks: the only mutable state is the
    underlying httpx.AsyncClient, which supports concurrent requests.

    Example:
        api = APIClient("https://api.pro.coinbase.com", Credentials(key, passphrase, secret))
        accounts = await api.get("/accounts/", result=list)
    """

    def __init__(
        self,
        base_url: str,
        credentials: Credentials,
        http_client: Optional[httpx.AsyncClient] = None,
        timestamp: Callable[[], str] = unix_timestamp,
        observer: Optional[RequestObserver] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
    ):
        self._base_url = httpx.URL(base_url)
        self._credentials = credentials
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self._timestamp = timestamp
        self._observer = observer or LoggingObserver()
        self._user_agent = user_agent

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    async def __aenter__(self) -> "APIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def get(self, path: str, result: Optional[Decoder] = None) -> Any:
        return await self.do("GET", path, None, result)

    async def post(
        self, path: str, content: Any = None, result: Optional[Decoder] = None
    ) -> Any:
        return await self.do("POST", path, content, result)

    async def do(
        self,
        method: str,
        path: str,
        content: Any = None,
        result: Optional[Decoder] = None,
    ) -> Any:
        """Issue a signed request and decode the response.

        Args:
            method: HTTP method.
            path: Path relative to the base URL, including any query string.
            content: Request body, serialized to JSON when not None.
            result: Decoder for the JSON body. When None the body is ignored.

        Returns:
            The decoded result with pagination attached when the result
            type supports it, or None when no decoder was given.

        Raises:
            TransportError: The request could not be completed.
            APIError: The exchange answered with a status >= 300.
            EncodingError: The body could not be encoded or decoded.
        """
        with RequestContext(extra={"method": method, "path": path}):
            response = await self.send(method, path, content)
            if result is None:
                return None
            payload = decode_json(response)
            try:
                decoded = result(payload)
            except (TypeError, KeyError, ValueError, AttributeError, ArithmeticError) as e:
                raise EncodingError(f"cannot decode {method} {path} result: {e}") from e
            apply_page(decoded, Pagination.from_headers(response.headers))
            return decoded

    async def send(self, method: str, path: str, content: Any = None) -> httpx.Response:
        """Sign and send a request, returning the successful raw response."""
        body = encode_json(content) if content is not None else b""
        timestamp = self._timestamp()
        signature = self._credentials.sign(build_message(timestamp, method, path, body))
        url = self._base_url.join(path)

        self._observer.before_request(method, path)
        start = time.perf_counter()
        try:
            response = await self._http_client.request(
                method,
                url,
                content=body or None,
                headers=self._headers(timestamp, signature),
            )
        except httpx.HTTPError as e:
            error = TransportError(f"{method} {path}: {e}")
            self._observer.on_error(method, path, error)
            raise error from e
        duration_ms = (time.perf_counter() - start) * 1000
        self._observer.after_response(method, path, response.status_code, duration_ms)

        if response.status_code >= 300:
            error = decode_error(response)
            self._observer.on_error(method, path, error)
            raise error
        return response

    def _headers(self, timestamp: str, signature: str) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": self._user_agent,
            "CB-ACCESS-KEY": self._credentials.key,
            "CB-ACCESS-PASSPHRASE": self._credentials.passphrase,
            "CB-ACCESS-TIMESTAMP": timestamp,
            "CB-ACCESS-SIGN": signature,
        }

    async def close(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()
