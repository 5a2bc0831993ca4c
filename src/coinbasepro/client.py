"""Coinbase Pro Client.

One coroutine per REST endpoint plus the real-time feed. Each endpoint is
a thin mapping onto the signed request pipeline; parameters are validated
locally before anything is sent.
"""

import logging
from typing import TYPE_CHECKING, Any, Optional, Union

from src.coinbasepro.api import APIClient, APIRequester
from src.coinbasepro.auth import Credentials
from src.coinbasepro.feed import Feed, FeedDialer, OverflowPolicy, SubscriptionRequest, relay
from src.coinbasepro.filters import (
    BookLevel,
    CancelOrderSpec,
    CoinbaseAccountTransferSpec,
    CryptoAddress,
    CryptoAddressWithdrawalSpec,
    DepositFilter,
    FillFilter,
    HistoricRateFilter,
    LimitOrder,
    MarketOrder,
    OrderFilter,
    PaymentMethodTransferSpec,
    ProfileFilter,
    ProfileTransferSpec,
    ReportSpec,
    StablecoinConversionSpec,
    WithdrawalFilter,
)
from src.coinbasepro.models import (
    DEPOSIT_TYPES,
    WITHDRAWAL_TYPES,
    Account,
    AggregatedOrderBook,
    Candle,
    CoinbaseAccount,
    CryptoDepositAddress,
    Currency,
    Deposits,
    Fees,
    Fills,
    Holds,
    Ledger,
    Limits,
    Order,
    OrderBook,
    Orders,
    PagedList,
    PaymentMethod,
    Product,
    ProductStats,
    ProductTicker,
    ProductTrades,
    Profile,
    ProfileTransfer,
    Report,
    ServerTime,
    StablecoinConversion,
    Transfer,
    WithdrawalFeeEstimate,
    Withdrawals,
    created_id,
    raw,
)
from src.coinbasepro.pagination import Pagination, PaginationParams, query

if TYPE_CHECKING:
    from src.settings import Settings

logger = logging.getLogger(__name__)


def _paged_query(pagination: Optional[PaginationParams], *filters: Any) -> str:
    pagination = pagination or PaginationParams()
    pagination.validate()
    params: list[str] = []
    for f in filters:
        if f is not None:
            params.extend(f.params())
    params.extend(pagination.params())
    return query(params)


class CoinbaseProClient:
    """Coinbase Pro REST and feed client.

    Example:
        async with new_client(base_url, feed_url, Credentials(key, passphrase, secret)) as client:
            accounts = await client.list_accounts()
            orders = await client.get_orders(OrderFilter(status=["open"]))
            next_page = await client.get_orders(
                OrderFilter(), PaginationParams(after=orders.page.after))
    """

    def __init__(
        self,
        api: APIRequester,
        dialer: Optional[FeedDialer] = None,
        clear_page_on_empty_transfers: bool = False,
        feed_buffer_size: int = 1,
        feed_overflow: Union[str, OverflowPolicy] = OverflowPolicy.BLOCK,
    ):
        self.api = api
        self.dialer = dialer
        self.clear_page_on_empty_transfers = clear_page_on_empty_transfers
        self.feed_buffer_size = feed_buffer_size
        self.feed_overflow = OverflowPolicy(feed_overflow)

    @classmethod
    def from_settings(cls, settings: Optional["Settings"] = None) -> "CoinbaseProClient":
        """Build a client from Settings, in development mode when enabled."""
        from src.settings import get_settings

        settings = settings or get_settings()
        api = APIClient(
            settings.base_url,
            settings.credentials(),
            user_agent=settings.user_agent,
            timeout=settings.request_timeout,
        )
        client = cls(
            api,
            FeedDialer(settings.feed_url),
            clear_page_on_empty_transfers=settings.clear_page_on_empty_transfers,
            feed_buffer_size=settings.feed_buffer_size,
            feed_overflow=settings.feed_overflow,
        )
        if settings.development_mode:
            from src.coinbasepro.development import development_mode

            development_mode(client, settings.shape_store_path)
        return client

    async def __aenter__(self) -> "CoinbaseProClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.api.close()

    # ── Accounts ─────────────────────────────────────────────────────

    async def list_accounts(self) -> list[Account]:
        return await self.api.get("/accounts/", Account.list_from_api)

    async def get_account(self, account_id: str) -> Account:
        return await self.api.get(f"/accounts/{account_id}", Account.from_api)

    async def get_ledger(
        self, account_id: str, pagination: Optional[PaginationParams] = None
    ) -> Ledger:
        """Account activity, newest first. Paginated."""
        q = _paged_query(pagination)
        return await self.api.get(f"/accounts/{account_id}/ledger/{q}", Ledger.from_api)

    async def get_holds(
        self, account_id: str, pagination: Optional[PaginationParams] = None
    ) -> Holds:
        q = _paged_query(pagination)
        return await self.api.get(f"/accounts/{account_id}/holds/{q}", Holds.from_api)

    # ── Orders ───────────────────────────────────────────────────────

    async def create_limit_order(self, order: LimitOrder) -> Order:
        order.validate()
        return await self.api.post("/orders/", order, Order.from_api)

    async def create_market_order(self, order: MarketOrder) -> Order:
        order.validate()
        return await self.api.post("/orders/", order, Order.from_api)

    async def cancel_order(self, spec: CancelOrderSpec) -> Any:
        """Cancel one order. Returns the decoded response body (the canceled order id)."""
        spec.validate()
        return await self.api.do("DELETE", spec.path(), None, raw)

    async def get_orders(
        self,
        order_filter: Optional[OrderFilter] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> Orders:
        """Open or un-settled orders, newest first. Paginated."""
        if order_filter is not None:
            order_filter.validate()
        q = _paged_query(pagination, order_filter)
        return await self.api.get(f"/orders/{q}", Orders.from_api)

    async def get_order(self, order_id: str) -> Order:
        return await self.api.get(f"/orders/{order_id}", Order.from_api)

    async def get_client_order(self, client_oid: str) -> Order:
        return await self.api.get(f"/orders/client:{client_oid}", Order.from_api)

    async def get_fills(
        self,
        fill_filter: Optional[FillFilter] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> Fills:
        q = _paged_query(pagination, fill_filter)
        return await self.api.get(f"/fills/{q}", Fills.from_api)

    async def get_limits(self) -> Limits:
        return await self.api.get("/users/self/exchange-limits/", Limits.from_api)

    # ── Deposits ─────────────────────────────────────────────────────

    async def get_deposits(
        self,
        deposit_filter: Optional[DepositFilter] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> Deposits:
        """Deposits of the current profile, newest first. Paginated.

        /transfers cannot filter on more than one type, so other transfer
        types are removed client-side.
        """
        q = _paged_query(pagination, deposit_filter)
        deposits = await self.api.get(f"/transfers/{q}", Deposits.from_api)
        return self._keep_transfers(deposits, DEPOSIT_TYPES)

    async def get_deposit(self, deposit_id: str) -> Transfer:
        return await self.api.get(f"/transfers/{deposit_id}", Transfer.from_api)

    async def create_payment_method_deposit(self, spec: PaymentMethodTransferSpec) -> Transfer:
        deposit_id = await self.api.post("/deposits/payment-method/", spec, created_id)
        return await self.get_deposit(deposit_id)

    async def create_coinbase_account_deposit(self, spec: CoinbaseAccountTransferSpec) -> Transfer:
        deposit_id = await self.api.post("/deposits/coinbase-account/", spec, created_id)
        return await self.get_deposit(deposit_id)

    async def create_crypto_deposit_address(self, coinbase_account_id: str) -> CryptoDepositAddress:
        return await self.api.post(
            f"/coinbase-accounts/{coinbase_account_id}/addresses/", None, CryptoDepositAddress.from_api
        )

    # ── Withdrawals ──────────────────────────────────────────────────

    async def get_withdrawals(
        self,
        withdrawal_filter: Optional[WithdrawalFilter] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> Withdrawals:
        q = _paged_query(pagination, withdrawal_filter)
        withdrawals = await self.api.get(f"/transfers/{q}", Withdrawals.from_api)
        return self._keep_transfers(withdrawals, WITHDRAWAL_TYPES)

    async def get_withdrawal(self, withdrawal_id: str) -> Transfer:
        return await self.api.get(f"/transfers/{withdrawal_id}", Transfer.from_api)

    async def create_payment_method_withdrawal(self, spec: PaymentMethodTransferSpec) -> Transfer:
        withdrawal_id = await self.api.post("/withdrawals/payment-method/", spec, created_id)
        return await self.get_withdrawal(withdrawal_id)

    async def create_coinbase_account_withdrawal(
        self, spec: CoinbaseAccountTransferSpec
    ) -> Transfer:
        withdrawal_id = await self.api.post("/withdrawals/coinbase-account/", spec, created_id)
        return await self.get_withdrawal(withdrawal_id)

    async def create_crypto_address_withdrawal(self, spec: CryptoAddressWithdrawalSpec) -> Transfer:
        withdrawal_id = await self.api.post("/withdrawals/crypto/", spec, created_id)
        return await self.get_withdrawal(withdrawal_id)

    async def get_withdrawal_fee_estimate(self, address: CryptoAddress) -> WithdrawalFeeEstimate:
        return await self.api.get(
            f"/withdrawals/fee-estimate/{query(address.params())}", WithdrawalFeeEstimate.from_api
        )

    def _keep_transfers(self, transfers: PagedList, types: frozenset) -> PagedList:
        transfers.items = [t for t in transfers.items if t.type in types]
        if not transfers.items and self.clear_page_on_empty_transfers:
            transfers.page = Pagination()
        return transfers

    # ── Conversions, payment methods, fees ───────────────────────────

    async def create_stablecoin_conversion(self, spec: StablecoinConversionSpec) -> StablecoinConversion:
        return await self.api.post("/conversions/", spec, StablecoinConversion.from_api)

    async def list_payment_methods(self) -> list[PaymentMethod]:
        return await self.api.get("/payment-methods/", PaymentMethod.list_from_api)

    async def list_coinbase_accounts(self) -> list[CoinbaseAccount]:
        return await self.api.get("/coinbase-accounts/", CoinbaseAccount.list_from_api)

    async def get_fees(self) -> Fees:
        """Maker and taker fee rates and the 30-day trailing volume."""
        return await self.api.get("/fees/", Fees.from_api)

    # ── Reports ──────────────────────────────────────────────────────

    async def create_report(self, spec: ReportSpec) -> Report:
        spec.validate()
        report_id = await self.api.post("/reports/", spec, created_id)
        return await self.get_report(report_id)

    async def get_report(self, report_id: str) -> Report:
        return await self.api.get(f"/reports/{report_id}", Report.from_api)

    # ── Profiles ─────────────────────────────────────────────────────

    async def list_profiles(self, profile_filter: Optional[ProfileFilter] = None) -> list[Profile]:
        params = profile_filter.params() if profile_filter else []
        return await self.api.get(f"/profiles/{query(params)}", Profile.list_from_api)

    async def get_profile(self, profile_id: str) -> Profile:
        return await self.api.get(f"/profiles/{profile_id}", Profile.from_api)

    async def create_profile_transfer(self, spec: ProfileTransferSpec) -> ProfileTransfer:
        return await self.api.post("/profiles/transfer", spec, ProfileTransfer.from_api)

    # ── Market data ──────────────────────────────────────────────────

    async def list_products(self) -> list[Product]:
        return await self.api.get("/products/", Product.list_from_api)

    async def get_product(self, product_id: str) -> Product:
        return await self.api.get(f"/products/{product_id}", Product.from_api)

    async def get_aggregated_order_book(
        self, product_id: str, level: BookLevel = BookLevel.BEST
    ) -> AggregatedOrderBook:
        return await self.api.get(
            f"/products/{product_id}/book/{query(BookLevel(level).params())}",
            AggregatedOrderBook.from_api,
        )

    async def get_order_book(self, product_id: str) -> OrderBook:
        """Full, non-aggregated order book."""
        return await self.api.get(f"/products/{product_id}/book/?level=3", OrderBook.from_api)

    async def get_product_ticker(self, product_id: str) -> ProductTicker:
        return await self.api.get(f"/products/{product_id}/ticker", ProductTicker.from_api)

    async def get_product_trades(
        self, product_id: str, pagination: Optional[PaginationParams] = None
    ) -> ProductTrades:
        q = _paged_query(pagination)
        return await self.api.get(f"/products/{product_id}/trades/{q}", ProductTrades.from_api)

    async def get_historic_rates(
        self, product_id: str, rate_filter: Optional[HistoricRateFilter] = None
    ) -> list[Candle]:
        """Candles, newest first."""
        rate_filter = rate_filter or HistoricRateFilter()
        rate_filter.validate()
        return await self.api.get(
            f"/products/{product_id}/candles/{query(rate_filter.params())}", Candle.list_from_api
        )

    async def get_product_stats(self, product_id: str) -> ProductStats:
        return await self.api.get(f"/products/{product_id}/stats", ProductStats.from_api)

    async def list_currencies(self) -> list[Currency]:
        return await self.api.get("/currencies/", Currency.list_from_api)

    async def get_currency(self, currency: str) -> Currency:
        return await self.api.get(f"/currencies/{currency}", Currency.from_api)

    async def get_server_time(self) -> ServerTime:
        return await self.api.get("/time", ServerTime.from_api)

    # ── Feed ─────────────────────────────────────────────────────────

    def new_feed(self) -> Feed:
        """Feed with the buffer size and overflow policy this client was configured with."""
        return Feed(buffer_size=self.feed_buffer_size, overflow=self.feed_overflow)

    async def watch(self, subscription: SubscriptionRequest, feed: Feed) -> None:
        """Stream feed messages into ``feed`` until cancelled or the connection fails.

        The subscription is the first frame sent. The connection is
        closed and the feed marked closed on every exit path.
        """
        if self.dialer is None:
            raise RuntimeError("client has no feed dialer")
        connection = await self.dialer.dial()
        try:
            await connection.write_json(subscription)
            logger.info("Subscribed to %s", ", ".join(subscription.product_ids) or "all products")
            await relay(connection, feed)
        finally:
            feed.close()
            await connection.close()


def new_client(base_url: str, feed_url: str, credentials: Credentials) -> CoinbaseProClient:
    """Client with a fresh pipeline and feed dialer."""
    return CoinbaseProClient(APIClient(base_url, credentials), FeedDialer(feed_url))
