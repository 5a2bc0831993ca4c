"""Coinbase Pro WebSocket Feed Relay.

Opens the real-time feed, sends the subscription first, then relays
decoded frames to a consumer-facing Feed until the caller cancels or the
connection fails. Three tasks share the connection:

- reader: one JSON frame at a time into a single-slot hand-off queue
- writer: hand-off queue -> Feed.messages, per the feed's overflow policy
- subscriber: later subscription changes from Feed.subscriptions -> socket

Example:
    feed = Feed(buffer_size=64)
    request = new_subscription_request(["BTC-USD"], [ChannelName.TICKER])
    task = asyncio.create_task(client.watch(request, feed))
    async for message in feed:
        print(message["type"])
"""

import asyncio
import json
import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Protocol, Union

import websockets
from websockets.exceptions import InvalidHandshake, InvalidURI

from src.coinbasepro.api import encode_json
from src.coinbasepro.exceptions import EncodingError, FeedClosed, TransportError

logger = logging.getLogger(__name__)


class ChannelName(str, Enum):
    """Feed channels."""
    HEARTBEAT = "heartbeat"
    STATUS = "status"
    TICKER = "ticker"
    LEVEL2 = "level2"
    FULL = "full"
    USER = "user"
    MATCHES = "matches"


class MessageType(str, Enum):
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"


class OverflowPolicy(str, Enum):
    """What the relay does when the consumer falls behind.

    BLOCK applies backpressure all the way to the socket read loop.
    DROP_NEWEST discards the incoming message; DROP_OLDEST evicts the
    oldest buffered one to make room.
    """
    BLOCK = "block"
    DROP_NEWEST = "drop_newest"
    DROP_OLDEST = "drop_oldest"


def _name(value: Union[str, Enum]) -> str:
    return value.value if isinstance(value, Enum) else value


@dataclass
class Channel:
    """A channel limited to its own product ids."""
    name: str
    product_ids: list[str] = field(default_factory=list)

    def to_api(self) -> dict:
        return {"name": _name(self.name), "product_ids": list(self.product_ids)}


@dataclass
class SubscriptionRequest:
    """Subscribe/unsubscribe frame.

    ``channels`` mixes bare channel names (using the request-level
    product ids) and Channel objects with their own product ids.
    """
    type: str = MessageType.SUBSCRIBE
    product_ids: list[str] = field(default_factory=list)
    channels: list[Union[str, Channel]] = field(default_factory=list)

    def to_api(self) -> dict:
        return {
            "type": _name(self.type),
            "product_ids": list(self.product_ids),
            "channels": [
                c.to_api() if isinstance(c, Channel) else _name(c) for c in self.channels
            ],
        }


def new_subscription_request(
    product_ids: Iterable[str],
    channel_names: Iterable[Union[str, ChannelName]] = (),
    channels: Iterable[Channel] = (),
) -> SubscriptionRequest:
    return SubscriptionRequest(
        type=MessageType.SUBSCRIBE,
        product_ids=list(product_ids),
        channels=[*channel_names, *channels],
    )


# =====================================================================
# Feed
# =====================================================================


class Feed:
    """Consumer side of a relay.

    ``messages`` carries decoded frames; ``subscriptions`` (one slot)
    carries subscription changes to forward while the relay runs. The
    relay closes the feed when it exits; consumers then drain what is
    buffered and see FeedClosed (or the end of ``async for``).
    """

    def __init__(
        self,
        buffer_size: int = 1,
        overflow: Union[str, OverflowPolicy] = OverflowPolicy.BLOCK,
    ):
        if buffer_size < 1:
            raise ValueError(f"buffer_size must be >= 1, got {buffer_size}")
        self.subscriptions: asyncio.Queue = asyncio.Queue(maxsize=1)
        self.messages: asyncio.Queue = asyncio.Queue(maxsize=buffer_size)
        self.overflow = OverflowPolicy(overflow)
        self.dropped = 0
        self._closed = asyncio.Event()
        self._undelivered: deque = deque()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    async def subscribe(self, request: SubscriptionRequest) -> None:
        await self.subscriptions.put(request)

    async def publish(self, message: Any) -> bool:
        """Hand ``message`` to the consumer. Returns False if it was dropped."""
        if self.overflow is OverflowPolicy.BLOCK:
            await self.messages.put(message)
            return True
        if self.overflow is OverflowPolicy.DROP_NEWEST:
            try:
                self.messages.put_nowait(message)
            except asyncio.QueueFull:
                self.dropped += 1
                return False
            return True

        delivered = True
        while self.messages.full():
            self.messages.get_nowait()
            self.dropped += 1
            delivered = False
        self.messages.put_nowait(message)
        return delivered

    async def get(self) -> Any:
        """Next message; raises FeedClosed once closed and drained."""
        if self._undelivered:
            return self._undelivered.popleft()
        if not self.messages.empty():
            return self.messages.get_nowait()
        if self.closed:
            raise FeedClosed("feed closed")

        getter = asyncio.ensure_future(self.messages.get())
        closer = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait({getter, closer}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            # Already taken off the queue; keep it for the next get()
            if getter.done() and not getter.cancelled():
                self._undelivered.append(getter.result())
            raise
        finally:
            closer.cancel()
            if not getter.done():
                getter.cancel()
        if getter.done() and not getter.cancelled():
            return getter.result()
        raise FeedClosed("feed closed")

    def __aiter__(self) -> "Feed":
        return self

    async def __anext__(self) -> Any:
        try:
            return await self.get()
        except FeedClosed:
            raise StopAsyncIteration


# =====================================================================
# Connection
# =====================================================================


class FeedConnection(Protocol):
    """A duplex JSON frame connection."""

    async def read_json(self) -> Any:
        ...

    async def write_json(self, value: Any) -> None:
        ...

    async def close(self) -> None:
        ...


class WebSocketFeedConnection:
    """FeedConnection over a ``websockets`` client connection."""

    def __init__(self, ws):
        self._ws = ws

    async def read_json(self) -> Any:
        try:
            frame = await self._ws.recv()
        except websockets.ConnectionClosed as e:
            raise TransportError(f"feed connection closed: {e}") from e
        try:
            return json.loads(frame)
        except ValueError as e:
            raise EncodingError(f"cannot decode feed frame: {e}") from e

    async def write_json(self, value: Any) -> None:
        data = encode_json(value).decode("utf-8")
        try:
            await self._ws.send(data)
        except websockets.ConnectionClosed as e:
            raise TransportError(f"feed connection closed: {e}") from e

    async def close(self) -> None:
        await self._ws.close()


class FeedDialer:
    """Opens WebSocket connections to the feed URL."""

    def __init__(self, feed_url: str, open_timeout: float = 10.0):
        self.feed_url = feed_url
        self.open_timeout = open_timeout

    async def dial(self) -> WebSocketFeedConnection:
        try:
            ws = await websockets.connect(
                self.feed_url,
                open_timeout=self.open_timeout,
                max_size=None,
            )
        except (OSError, asyncio.TimeoutError, InvalidHandshake, InvalidURI) as e:
            raise TransportError(f"cannot connect to {self.feed_url}: {e}") from e
        logger.info("Connected to feed %s", self.feed_url)
        return WebSocketFeedConnection(ws)


# =====================================================================
# Relay
# =====================================================================


async def relay(connection: FeedConnection, feed: Feed) -> None:
    """Relay frames between ``connection`` and ``feed`` until failure or cancellation.

    The first task to fail cancels the others and its exception is
    re-raised as is. The feed is closed on every exit path. A frame
    already read but still in the hand-off queue when the reader fails
    is not published.
    """
    frames: asyncio.Queue = asyncio.Queue(maxsize=1)

    async def read() -> None:
        while True:
            message = await connection.read_json()
            await frames.put(message)

    async def write() -> None:
        while True:
            message = await frames.get()
            if not await feed.publish(message):
                logger.warning(
                    "Feed consumer behind, dropped message (%s)", feed.overflow.value,
                    extra={"dropped": feed.dropped},
                )

    async def subscribe() -> None:
        while True:
            request = await feed.subscriptions.get()
            await connection.write_json(request)

    try:
        async with asyncio.TaskGroup() as group:
            group.create_task(read(), name="feed-reader")
            group.create_task(write(), name="feed-writer")
            group.create_task(subscribe(), name="feed-subscriber")
    except BaseExceptionGroup as errors:
        raise errors.exceptions[0]
    finally:
        feed.close()
