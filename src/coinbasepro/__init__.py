"""Coinbase Pro Client Library.

Signed REST access with cursor pagination, a real-time WebSocket feed
relay, and an optional development mode that records response shapes to
spot fields the models do not map.

Example:
    from src.coinbasepro import CoinbaseProClient, new_subscription_request

    async with CoinbaseProClient.from_settings() as client:
        accounts = await client.list_accounts()

        feed = client.new_feed()
        request = new_subscription_request(["BTC-USD"], ["ticker"])
        watcher = asyncio.create_task(client.watch(request, feed))
        async for message in feed:
            ...
"""

from src.coinbasepro.api import APIClient
from src.coinbasepro.auth import Credentials, sign
from src.coinbasepro.client import CoinbaseProClient, new_client
from src.coinbasepro.development import DevelopmentAPIClient, development_mode
from src.coinbasepro.exceptions import (
    APIError,
    CoinbaseProError,
    EncodingError,
    ErrorCode,
    FeedClosed,
    ShapeCaptureError,
    TransportError,
    ValidationError,
)
from src.coinbasepro.feed import (
    Channel,
    ChannelName,
    Feed,
    FeedDialer,
    MessageType,
    OverflowPolicy,
    SubscriptionRequest,
    new_subscription_request,
    relay,
)
from src.coinbasepro.filters import (
    BookLevel,
    CancelOrderSpec,
    DepositFilter,
    FillFilter,
    HistoricRateFilter,
    LimitOrder,
    MarketOrder,
    OrderFilter,
    ProfileFilter,
    WithdrawalFilter,
)
from src.coinbasepro.pagination import Pagination, PaginationParams

__all__ = [
    # Client
    "APIClient",
    "CoinbaseProClient",
    "Credentials",
    "DevelopmentAPIClient",
    "development_mode",
    "new_client",
    "sign",
    # Errors
    "APIError",
    "CoinbaseProError",
    "EncodingError",
    "ErrorCode",
    "FeedClosed",
    "ShapeCaptureError",
    "TransportError",
    "ValidationError",
    # Feed
    "Channel",
    "ChannelName",
    "Feed",
    "FeedDialer",
    "MessageType",
    "OverflowPolicy",
    "SubscriptionRequest",
    "new_subscription_request",
    "relay",
    # Parameters
    "BookLevel",
    "CancelOrderSpec",
    "DepositFilter",
    "FillFilter",
    "HistoricRateFilter",
    "LimitOrder",
    "MarketOrder",
    "OrderFilter",
    "Pagination",
    "PaginationParams",
    "ProfileFilter",
    "WithdrawalFilter",
]
