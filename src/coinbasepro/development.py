"""Development-Mode Request Capture.

Wraps the request pipeline and records two shapes per call into a
persistent shape store: the raw JSON as received, and the typed result
re-serialized. Keys present in the first but missing from the second are
fields the models do not map yet.

Example:
    client = CoinbaseProClient.from_settings(settings)
    development_mode(client, "store.json")
    await client.list_accounts()
    await client.close()    # writes store.json
    print(Store.load_file("store.json").unmapped_keys("/accounts", "/accounts (list[Account])"))
"""

import json
import logging
import posixpath
from pathlib import Path
from typing import Any, Optional, Union

import httpx

from src.coinbasepro.api import APIClient, Decoder, decode_json, json_default
from src.coinbasepro.exceptions import EncodingError, ShapeCaptureError
from src.coinbasepro.pagination import Pagination, apply_page
from src.shape_store import Store

logger = logging.getLogger(__name__)


def base_path(path: str) -> str:
    """Capture name for ``path``: query stripped, last element dropped."""
    return posixpath.dirname(path.split("?", 1)[0])


def type_name(value: Any) -> str:
    if isinstance(value, list):
        inner = type(value[0]).__name__ if value else "Any"
        return f"list[{inner}]"
    return type(value).__name__


class DevelopmentAPIClient:
    """Request pipeline that captures response shapes on the way through.

    Satisfies the same requester interface as APIClient. Pipeline errors
    propagate unchanged; a payload that cannot be captured raises
    ShapeCaptureError.
    """

    def __init__(self, api: APIClient, store_path: Union[str, Path]):
        self.api = api
        self.store_path = Path(store_path)
        self.store = Store.load_file(self.store_path)
        logger.info("Development mode on, %d known shapes in %s", len(self.store), self.store_path)

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
        response = await self.api.send(method, path, content)
        name = base_path(path)
        if result is None:
            if response.content:
                self.store.add_shape(name, self._payload(method, path, response))
            return None

        payload = self._payload(method, path, response)
        self.store.add_shape(name, payload)

        try:
            decoded = result(payload)
        except (TypeError, KeyError, ValueError, AttributeError, ArithmeticError) as e:
            raise ShapeCaptureError(f"{method} {path}: cannot decode result: {e}") from e
        apply_page(decoded, Pagination.from_headers(response.headers))

        try:
            typed = json.loads(json.dumps(decoded, default=json_default))
        except (TypeError, ValueError) as e:
            raise ShapeCaptureError(f"{method} {path}: cannot re-encode result: {e}") from e
        self.store.add_shape(f"{name} ({type_name(decoded)})", typed)
        return decoded

    @staticmethod
    def _payload(method: str, path: str, response: httpx.Response) -> Any:
        try:
            return decode_json(response)
        except EncodingError as e:
            raise ShapeCaptureError(f"{method} {path}: {e}") from e

    async def close(self) -> None:
        try:
            self.store.write_file(self.store_path)
            logger.info("Wrote %d shapes to %s", len(self.store), self.store_path)
        finally:
            await self.api.close()


def development_mode(client, store_path: Union[str, Path]) -> DevelopmentAPIClient:
    """Swap ``client``'s requester for a capturing one and return it."""
    wrapper = DevelopmentAPIClient(client.api, store_path)
    client.api = wrapper
    return wrapper
