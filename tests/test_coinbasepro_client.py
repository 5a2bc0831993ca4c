"""Tests for the Coinbase Pro client facade."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.coinbasepro.client import CoinbaseProClient, new_client
from src.coinbasepro.exceptions import ValidationError
from src.coinbasepro.feed import Feed, OverflowPolicy, new_subscription_request
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
    Account,
    AggregatedOrderBook,
    Candle,
    CoinbaseAccount,
    CryptoDepositAddress,
    Currency,
    Deposits,
    Fees,
    Fills,
    Ledger,
    Limits,
    Order,
    OrderBook,
    PaymentMethod,
    Product,
    ProductStats,
    ProductTicker,
    Profile,
    ProfileTransfer,
    Report,
    ServerTime,
    StablecoinConversion,
    Transfer,
    WithdrawalFeeEstimate,
    Withdrawals,
    raw,
)
from src.coinbasepro.pagination import Pagination, PaginationParams
from src.settings import Settings


def _api(result=None):
    api = MagicMock()
    api.get = AsyncMock(return_value=result)
    api.post = AsyncMock(return_value=result)
    api.do = AsyncMock(return_value=None)
    api.close = AsyncMock()
    return api


def _path(mock):
    return mock.call_args.args[0]


def _transfers(cls, *types):
    return cls(items=[Transfer(id=str(i), type=t) for i, t in enumerate(types)], page=Pagination("b", "a"))


# =====================================================================
# Test: Accounts
# =====================================================================


class TestAccounts:

    @pytest.mark.asyncio
    async def test_list_accounts(self):
        api = _api([Account(id="a")])
        client = CoinbaseProClient(api)
        accounts = await client.list_accounts()
        assert accounts[0].id == "a"
        api.get.assert_awaited_once_with("/accounts/", Account.list_from_api)

    @pytest.mark.asyncio
    async def test_get_account(self):
        api = _api(Account(id="a"))
        await CoinbaseProClient(api).get_account("a")
        assert _path(api.get) == "/accounts/a"

    @pytest.mark.asyncio
    async def test_get_ledger_with_pagination(self):
        api = _api(Ledger())
        await CoinbaseProClient(api).get_ledger("a", PaginationParams(after="42", limit=10))
        path = _path(api.get)
        assert path.startswith("/accounts/a/ledger/?")
        assert set(path.split("?", 1)[1].split("&")) == {"after=42", "limit=10"}

    @pytest.mark.asyncio
    async def test_get_holds_no_params(self):
        api = _api()
        await CoinbaseProClient(api).get_holds("a")
        assert _path(api.get) == "/accounts/a/holds/"

    @pytest.mark.asyncio
    async def test_invalid_pagination_never_sent(self):
        api = _api()
        with pytest.raises(ValidationError):
            await CoinbaseProClient(api).get_ledger("a", PaginationParams(before="1", after="2"))
        api.get.assert_not_awaited()


# =====================================================================
# Test: Orders & Fills
# =====================================================================


class TestOrders:

    @pytest.mark.asyncio
    async def test_create_limit_order(self):
        api = _api(Order(id="o"))
        order = LimitOrder(product_id="BTC-USD", side="buy", price=Decimal("1"), size=Decimal("2"))
        result = await CoinbaseProClient(api).create_limit_order(order)
        assert result.id == "o"
        api.post.assert_awaited_once_with("/orders/", order, Order.from_api)

    @pytest.mark.asyncio
    async def test_invalid_market_order_never_sent(self):
        api = _api()
        with pytest.raises(ValidationError, match="without funds a size is required"):
            await CoinbaseProClient(api).create_market_order(MarketOrder(product_id="BTC-USD"))
        api.post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancel_order(self):
        api = _api()
        api.do = AsyncMock(return_value="o1")
        result = await CoinbaseProClient(api).cancel_order(CancelOrderSpec("o1", product_id="BTC-USD"))
        assert result == "o1"
        api.do.assert_awaited_once_with("DELETE", "/orders/o1?product_id=BTC-USD", None, raw)

    @pytest.mark.asyncio
    async def test_cancel_without_order_id_never_sent(self):
        api = _api()
        with pytest.raises(ValidationError, match="order_id"):
            await CoinbaseProClient(api).cancel_order(CancelOrderSpec(""))
        api.do.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_limit_order_never_sent(self):
        api = _api()
        order = LimitOrder(
            product_id="BTC-USD", price=Decimal("1"), size=Decimal("1"), time_in_force="GTT"
        )
        with pytest.raises(ValidationError, match="cancel_after"):
            await CoinbaseProClient(api).create_limit_order(order)
        api.post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_orders_filter(self):
        api = _api()
        await CoinbaseProClient(api).get_orders(OrderFilter(product_id="BTC-USD", status=["open", "done"]))
        path = _path(api.get)
        assert set(path.split("?", 1)[1].split("&")) == {"product_id=BTC-USD", "status=open", "status=done"}

    @pytest.mark.asyncio
    async def test_get_orders_invalid_status(self):
        api = _api()
        with pytest.raises(ValidationError, match="status.*blah.* not valid"):
            await CoinbaseProClient(api).get_orders(OrderFilter(status=["blah"]))
        api.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_client_order(self):
        api = _api()
        await CoinbaseProClient(api).get_client_order("my-oid")
        assert _path(api.get) == "/orders/client:my-oid"

    @pytest.mark.asyncio
    async def test_get_fills(self):
        api = _api(Fills())
        await CoinbaseProClient(api).get_fills(FillFilter(order_id="o"), PaginationParams(limit=5))
        path = _path(api.get)
        assert set(path.split("?", 1)[1].split("&")) == {"order_id=o", "limit=5"}

    @pytest.mark.asyncio
    async def test_get_limits(self):
        api = _api({})
        await CoinbaseProClient(api).get_limits()
        assert _path(api.get) == "/users/self/exchange-limits/"


# =====================================================================
# Test: Transfers
# =====================================================================


class TestTransfers:

    @pytest.mark.asyncio
    async def test_deposits_filtered_by_type(self):
        api = _api(_transfers(Deposits, "deposit", "withdraw", "internal_deposit"))
        deposits = await CoinbaseProClient(api).get_deposits(DepositFilter(profile_id="p"))
        assert [d.type for d in deposits] == ["deposit", "internal_deposit"]
        assert deposits.page == Pagination("b", "a")
        assert _path(api.get) == "/transfers/?profile_id=p"

    @pytest.mark.asyncio
    async def test_withdrawals_filtered_by_type(self):
        api = _api(_transfers(Withdrawals, "deposit", "withdraw", "internal_withdraw"))
        withdrawals = await CoinbaseProClient(api).get_withdrawals(WithdrawalFilter(type="withdraw"))
        assert [w.type for w in withdrawals] == ["withdraw", "internal_withdraw"]
        assert _path(api.get) == "/transfers/?type=withdraw"

    @pytest.mark.asyncio
    async def test_empty_filtered_page_kept_by_default(self):
        api = _api(_transfers(Deposits, "withdraw"))
        deposits = await CoinbaseProClient(api).get_deposits()
        assert len(deposits) == 0
        assert deposits.page == Pagination("b", "a")

    @pytest.mark.asyncio
    async def test_empty_filtered_page_cleared_when_enabled(self):
        api = _api(_transfers(Deposits, "withdraw"))
        client = CoinbaseProClient(api, clear_page_on_empty_transfers=True)
        deposits = await client.get_deposits()
        assert deposits.page == Pagination()
        assert not deposits.page.not_empty()

    @pytest.mark.asyncio
    async def test_create_deposit_fetches_full_representation(self):
        api = _api()
        api.post = AsyncMock(return_value="dep-1")
        api.get = AsyncMock(return_value=Transfer(id="dep-1", type="deposit"))
        spec = PaymentMethodTransferSpec(Decimal("10"), "USD", "pm")
        deposit = await CoinbaseProClient(api).create_payment_method_deposit(spec)
        assert deposit.id == "dep-1"
        assert _path(api.post) == "/deposits/payment-method/"
        assert _path(api.get) == "/transfers/dep-1"

    @pytest.mark.asyncio
    async def test_create_coinbase_account_withdrawal(self):
        api = _api()
        api.post = AsyncMock(return_value="w-1")
        api.get = AsyncMock(return_value=Transfer(id="w-1"))
        spec = CoinbaseAccountTransferSpec(Decimal("1"), "BTC", "cb")
        await CoinbaseProClient(api).create_coinbase_account_withdrawal(spec)
        assert _path(api.post) == "/withdrawals/coinbase-account/"
        assert _path(api.get) == "/transfers/w-1"

    @pytest.mark.asyncio
    async def test_create_crypto_address_withdrawal(self):
        api = _api()
        api.post = AsyncMock(return_value="w-2")
        api.get = AsyncMock(return_value=Transfer(id="w-2"))
        spec = CryptoAddressWithdrawalSpec(Decimal("1"), "BTC", "addr", no_destination_tag=True)
        await CoinbaseProClient(api).create_crypto_address_withdrawal(spec)
        assert _path(api.post) == "/withdrawals/crypto/"

    @pytest.mark.asyncio
    async def test_fee_estimate(self):
        api = _api({"fee": "0.01"})
        await CoinbaseProClient(api).get_withdrawal_fee_estimate(CryptoAddress("BTC", "addr"))
        assert _path(api.get) == "/withdrawals/fee-estimate/?currency=BTC&crypto_address=addr"

    @pytest.mark.asyncio
    async def test_crypto_deposit_address(self):
        api = _api({"address": "x"})
        await CoinbaseProClient(api).create_crypto_deposit_address("cb-1")
        assert _path(api.post) == "/coinbase-accounts/cb-1/addresses/"


# =====================================================================
# Test: Reports & Profiles
# =====================================================================


class TestReportsAndProfiles:

    @pytest.mark.asyncio
    async def test_create_report(self):
        api = _api()
        api.post = AsyncMock(return_value="r-1")
        api.get = AsyncMock(return_value=Report(id="r-1", status="pending"))
        spec = ReportSpec(
            type="fills",
            product_id="BTC-USD",
            start_date=datetime(2020, 1, 1, tzinfo=timezone.utc),
            end_date=datetime(2020, 2, 1, tzinfo=timezone.utc),
        )
        report = await CoinbaseProClient(api).create_report(spec)
        assert report.status == "pending"
        api.get.assert_awaited_once_with("/reports/r-1", Report.from_api)

    @pytest.mark.asyncio
    async def test_invalid_report_never_sent(self):
        api = _api()
        with pytest.raises(ValidationError, match="product_id"):
            await CoinbaseProClient(api).create_report(ReportSpec(type="fills"))
        api.post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_active_profiles(self):
        api = _api([])
        await CoinbaseProClient(api).list_profiles(ProfileFilter(active=True))
        assert _path(api.get) == "/profiles/?active"

    @pytest.mark.asyncio
    async def test_list_profiles(self):
        api = _api([])
        await CoinbaseProClient(api).list_profiles()
        assert _path(api.get) == "/profiles/"


# =====================================================================
# Test: Market data
# =====================================================================


class TestMarketData:

    @pytest.mark.asyncio
    async def test_aggregated_book_defaults_to_best(self):
        api = _api({})
        await CoinbaseProClient(api).get_aggregated_order_book("BTC-USD", BookLevel.UNDEFINED)
        assert _path(api.get) == "/products/BTC-USD/book/?level=1"

    @pytest.mark.asyncio
    async def test_full_order_book(self):
        api = _api({})
        await CoinbaseProClient(api).get_order_book("BTC-USD")
        assert _path(api.get) == "/products/BTC-USD/book/?level=3"

    @pytest.mark.asyncio
    async def test_historic_rates(self):
        api = _api([])
        rate_filter = HistoricRateFilter(
            granularity=3600,
            start=datetime(2020, 1, 1, tzinfo=timezone.utc),
            end=datetime(2020, 1, 2, tzinfo=timezone.utc),
        )
        await CoinbaseProClient(api).get_historic_rates("BTC-USD", rate_filter)
        path = _path(api.get)
        assert path.startswith("/products/BTC-USD/candles/?")
        assert set(path.split("?", 1)[1].split("&")) == {
            "granularity=3600",
            "start=2020-01-01T00:00:00Z",
            "end=2020-01-02T00:00:00Z",
        }

    @pytest.mark.asyncio
    async def test_historic_rates_invalid_granularity(self):
        api = _api()
        with pytest.raises(ValidationError, match="granularity"):
            await CoinbaseProClient(api).get_historic_rates("BTC-USD", HistoricRateFilter(granularity=61))
        api.get.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,args,path", [
        ("list_products", (), "/products/"),
        ("get_product", ("BTC-USD",), "/products/BTC-USD"),
        ("get_product_ticker", ("BTC-USD",), "/products/BTC-USD/ticker"),
        ("get_product_stats", ("BTC-USD",), "/products/BTC-USD/stats"),
        ("list_currencies", (), "/currencies/"),
        ("get_currency", ("BTC",), "/currencies/BTC"),
        ("get_server_time", (), "/time"),
        ("get_fees", (), "/fees/"),
        ("list_payment_methods", (), "/payment-methods/"),
        ("list_coinbase_accounts", (), "/coinbase-accounts/"),
    ])
    async def test_simple_paths(self, method, args, path):
        api = _api({})
        await getattr(CoinbaseProClient(api), method)(*args)
        assert _path(api.get) == path

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,args,decoder", [
        ("list_products", (), Product.list_from_api),
        ("get_product", ("BTC-USD",), Product.from_api),
        ("get_aggregated_order_book", ("BTC-USD",), AggregatedOrderBook.from_api),
        ("get_order_book", ("BTC-USD",), OrderBook.from_api),
        ("get_product_ticker", ("BTC-USD",), ProductTicker.from_api),
        ("get_historic_rates", ("BTC-USD",), Candle.list_from_api),
        ("get_product_stats", ("BTC-USD",), ProductStats.from_api),
        ("list_currencies", (), Currency.list_from_api),
        ("get_currency", ("BTC",), Currency.from_api),
        ("get_server_time", (), ServerTime.from_api),
        ("get_fees", (), Fees.from_api),
        ("get_limits", (), Limits.from_api),
        ("list_payment_methods", (), PaymentMethod.list_from_api),
        ("list_coinbase_accounts", (), CoinbaseAccount.list_from_api),
        ("list_profiles", (), Profile.list_from_api),
        ("get_profile", ("p",), Profile.from_api),
        ("get_withdrawal_fee_estimate", (CryptoAddress("BTC", "addr"),), WithdrawalFeeEstimate.from_api),
    ])
    async def test_typed_results(self, method, args, decoder):
        api = _api()
        await getattr(CoinbaseProClient(api), method)(*args)
        assert api.get.call_args.args[1] == decoder

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,args,decoder", [
        ("create_stablecoin_conversion", (StablecoinConversionSpec("USD", "USDC", Decimal("1")),),
         StablecoinConversion.from_api),
        ("create_profile_transfer", (ProfileTransferSpec("a", "b", "USD", Decimal("1")),),
         ProfileTransfer.from_api),
        ("create_crypto_deposit_address", ("cb-1",), CryptoDepositAddress.from_api),
    ])
    async def test_typed_post_results(self, method, args, decoder):
        api = _api()
        await getattr(CoinbaseProClient(api), method)(*args)
        assert api.post.call_args.args[2] == decoder

    @pytest.mark.asyncio
    async def test_product_trades(self):
        api = _api()
        await CoinbaseProClient(api).get_product_trades("BTC-USD", PaginationParams(before="7"))
        assert _path(api.get) == "/products/BTC-USD/trades/?before=7"


# =====================================================================
# Test: Lifecycle & feed
# =====================================================================


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_context_manager_closes_api(self):
        api = _api()
        async with CoinbaseProClient(api):
            pass
        api.close.assert_awaited_once()

    def test_new_client(self, credentials):
        client = new_client("https://api.test", "wss://feed.test", credentials)
        assert str(client.api.base_url) == "https://api.test"
        assert client.dialer.feed_url == "wss://feed.test"

    def test_from_settings(self):
        settings = Settings(base_url="https://api.test", feed_url="wss://feed.test", secret="zZ==")
        client = CoinbaseProClient.from_settings(settings)
        assert str(client.api.base_url) == "https://api.test"
        assert client.dialer.feed_url == "wss://feed.test"

    def test_from_settings_development_mode(self, tmp_path):
        from src.coinbasepro.development import DevelopmentAPIClient

        settings = Settings(development_mode=True, shape_store_path=str(tmp_path / "store.json"))
        client = CoinbaseProClient.from_settings(settings)
        assert isinstance(client.api, DevelopmentAPIClient)

    def test_new_feed_defaults(self):
        feed = CoinbaseProClient(_api()).new_feed()
        assert feed.messages.maxsize == 1
        assert feed.overflow is OverflowPolicy.BLOCK

    def test_new_feed_from_settings(self):
        settings = Settings(feed_buffer_size=16, feed_overflow="drop_oldest")
        feed = CoinbaseProClient.from_settings(settings).new_feed()
        assert feed.messages.maxsize == 16
        assert feed.overflow is OverflowPolicy.DROP_OLDEST

    def test_invalid_overflow_policy_rejected(self):
        with pytest.raises(ValueError):
            CoinbaseProClient(_api(), feed_overflow="drop_everything")

    @pytest.mark.asyncio
    async def test_watch_sends_subscription_first_and_closes(self):
        connection = MagicMock()
        connection.write_json = AsyncMock()
        connection.read_json = AsyncMock(side_effect=ConnectionResetError("gone"))
        connection.close = AsyncMock()
        dialer = MagicMock()
        dialer.dial = AsyncMock(return_value=connection)

        client = CoinbaseProClient(_api(), dialer)
        request = new_subscription_request(["BTC-USD"], ["ticker"])
        feed = Feed()
        with pytest.raises(ConnectionResetError):
            await client.watch(request, feed)

        assert connection.write_json.await_args_list[0].args[0] is request
        connection.close.assert_awaited_once()
        assert feed.closed

    @pytest.mark.asyncio
    async def test_watch_without_dialer(self):
        with pytest.raises(RuntimeError):
            await CoinbaseProClient(_api()).watch(new_subscription_request([]), Feed())
