"""Coinbase Pro Response Models.

Serialization contracts for the results the client decodes into typed
values. Paged collections arrive as bare JSON arrays; their page cursors
come from response headers and are attached after decoding.

Monetary amounts are kept as Decimal and written back as strings, the way
the exchange sends them. Timestamps are kept as the strings received.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Optional

from src.coinbasepro.pagination import Pagination


def _dec(value: Any) -> Decimal:
    return Decimal(str(value or 0))


# =====================================================================
# Accounts
# =====================================================================


@dataclass
class Account:
    """A Coinbase Pro trading account holding one currency."""
    id: str = ""
    currency: str = ""
    balance: Decimal = Decimal(0)
    available: Decimal = Decimal(0)
    hold: Decimal = Decimal(0)
    profile_id: str = ""
    trading_enabled: bool = False

    @classmethod
    def from_api(cls, data: dict) -> "Account":
        return cls(
            id=data.get("id", ""),
            currency=data.get("currency", ""),
            balance=_dec(data.get("balance")),
            available=_dec(data.get("available")),
            hold=_dec(data.get("hold")),
            profile_id=data.get("profile_id", ""),
            trading_enabled=bool(data.get("trading_enabled", False)),
        )

    @classmethod
    def list_from_api(cls, data: list) -> list["Account"]:
        return [cls.from_api(a) for a in data]

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "currency": self.currency,
            "balance": str(self.balance),
            "available": str(self.available),
            "hold": str(self.hold),
            "profile_id": self.profile_id,
            "trading_enabled": self.trading_enabled,
        }


@dataclass
class LedgerEntry:
    """One balance-changing activity on an account."""
    id: str = ""
    amount: Decimal = Decimal(0)
    balance: Decimal = Decimal(0)
    created_at: str = ""
    type: str = ""  # conversion, fee, match, rebate
    details: dict = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> "LedgerEntry":
        return cls(
            id=str(data.get("id", "")),
            amount=_dec(data.get("amount")),
            balance=_dec(data.get("balance")),
            created_at=data.get("created_at", ""),
            type=data.get("type", ""),
            details=dict(data.get("details") or {}),
        )

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "amount": str(self.amount),
            "balance": str(self.balance),
            "created_at": self.created_at,
            "type": self.type,
            "details": self.details,
        }


@dataclass
class Hold:
    """Funds reserved for an open order or a pending withdrawal."""
    id: str = ""
    account_id: str = ""
    amount: Decimal = Decimal(0)
    created_at: str = ""
    updated_at: str = ""
    ref: str = ""
    type: str = ""  # order, transfer

    @classmethod
    def from_api(cls, data: dict) -> "Hold":
        return cls(
            id=data.get("id", ""),
            account_id=data.get("account_id", ""),
            amount=_dec(data.get("amount")),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
            ref=data.get("ref", ""),
            type=data.get("type", ""),
        )

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "amount": str(self.amount),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "ref": self.ref,
            "type": self.type,
        }


# =====================================================================
# Orders & Fills
# =====================================================================


@dataclass
class Order:
    """An order as reported by the exchange."""
    id: str = ""
    product_id: str = ""
    side: str = ""
    type: str = ""
    price: Decimal = Decimal(0)
    size: Decimal = Decimal(0)
    funds: Decimal = Decimal(0)
    time_in_force: str = ""
    post_only: bool = False
    status: str = ""
    settled: bool = False
    filled_size: Decimal = Decimal(0)
    fill_fees: Decimal = Decimal(0)
    executed_value: Decimal = Decimal(0)
    created_at: str = ""
    done_at: Optional[str] = None
    done_reason: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Order":
        return cls(
            id=data.get("id", ""),
            product_id=data.get("product_id", ""),
            side=data.get("side", ""),
            type=data.get("type", ""),
            price=_dec(data.get("price")),
            size=_dec(data.get("size")),
            funds=_dec(data.get("funds")),
            time_in_force=data.get("time_in_force", ""),
            post_only=bool(data.get("post_only", False)),
            status=data.get("status", ""),
            settled=bool(data.get("settled", False)),
            filled_size=_dec(data.get("filled_size")),
            fill_fees=_dec(data.get("fill_fees")),
            executed_value=_dec(data.get("executed_value")),
            created_at=data.get("created_at", ""),
            done_at=data.get("done_at"),
            done_reason=data.get("done_reason", ""),
        )

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "side": self.side,
            "type": self.type,
            "price": str(self.price),
            "size": str(self.size),
            "funds": str(self.funds),
            "time_in_force": self.time_in_force,
            "post_only": self.post_only,
            "status": self.status,
            "settled": self.settled,
            "filled_size": str(self.filled_size),
            "fill_fees": str(self.fill_fees),
            "executed_value": str(self.executed_value),
            "created_at": self.created_at,
            "done_at": self.done_at,
            "done_reason": self.done_reason,
        }


@dataclass
class Fill:
    """A (partial) execution of an order."""
    trade_id: int = 0
    order_id: str = ""
    product_id: str = ""
    side: str = ""
    price: Decimal = Decimal(0)
    size: Decimal = Decimal(0)
    fee: Decimal = Decimal(0)
    liquidity: str = ""  # M (maker) or T (taker)
    settled: bool = False
    created_at: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Fill":
        return cls(
            trade_id=int(data.get("trade_id", 0) or 0),
            order_id=data.get("order_id", ""),
            product_id=data.get("product_id", ""),
            side=data.get("side", ""),
            price=_dec(data.get("price")),
            size=_dec(data.get("size")),
            fee=_dec(data.get("fee")),
            liquidity=data.get("liquidity", ""),
            settled=bool(data.get("settled", False)),
            created_at=data.get("created_at", ""),
        )

    def to_api(self) -> dict:
        return {
            "trade_id": self.trade_id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "side": self.side,
            "price": str(self.price),
            "size": str(self.size),
            "fee": str(self.fee),
            "liquidity": self.liquidity,
            "settled": self.settled,
            "created_at": self.created_at,
        }


# =====================================================================
# Transfers (deposits & withdrawals)
# =====================================================================


class TransferType(str, Enum):
    """Transfer flavors returned by /transfers."""
    DEPOSIT = "deposit"
    INTERNAL_DEPOSIT = "internal_deposit"
    WITHDRAW = "withdraw"
    INTERNAL_WITHDRAW = "internal_withdraw"


DEPOSIT_TYPES = frozenset({TransferType.DEPOSIT.value, TransferType.INTERNAL_DEPOSIT.value})
WITHDRAWAL_TYPES = frozenset({TransferType.WITHDRAW.value, TransferType.INTERNAL_WITHDRAW.value})


@dataclass
class Transfer:
    """Movement of funds into or out of a profile.

    Deposits and withdrawals share one representation on the wire;
    ``details`` is free-form and varies by transfer type.
    """
    id: str = ""
    type: str = ""
    account_id: str = ""
    amount: Decimal = Decimal(0)
    currency: str = ""
    created_at: str = ""
    completed_at: Optional[str] = None
    canceled_at: Optional[str] = None
    processed_at: Optional[str] = None
    user_id: str = ""
    user_nonce: Optional[str] = None
    details: dict = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> "Transfer":
        return cls(
            id=data.get("id", ""),
            type=data.get("type", ""),
            account_id=data.get("account_id", ""),
            amount=_dec(data.get("amount")),
            currency=data.get("currency", ""),
            created_at=data.get("created_at", ""),
            completed_at=data.get("completed_at"),
            canceled_at=data.get("canceled_at"),
            processed_at=data.get("processed_at"),
            user_id=data.get("user_id", ""),
            user_nonce=data.get("user_nonce"),
            details=dict(data.get("details") or {}),
        )

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "account_id": self.account_id,
            "amount": str(self.amount),
            "currency": self.currency,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
            "canceled_at": self.canceled_at,
            "processed_at": self.processed_at,
            "user_id": self.user_id,
            "user_nonce": self.user_nonce,
            "details": self.details,
        }


# =====================================================================
# Market data
# =====================================================================


@dataclass
class ProductTrade:
    """A recent trade on a product."""
    trade_id: int = 0
    price: Decimal = Decimal(0)
    size: Decimal = Decimal(0)
    side: str = ""
    time: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "ProductTrade":
        return cls(
            trade_id=int(data.get("trade_id", 0) or 0),
            price=_dec(data.get("price")),
            size=_dec(data.get("size")),
            side=data.get("side", ""),
            time=data.get("time", ""),
        )

    def to_api(self) -> dict:
        return {
            "trade_id": self.trade_id,
            "price": str(self.price),
            "size": str(self.size),
            "side": self.side,
            "time": self.time,
        }


@dataclass
class Product:
    """A tradable currency pair and its trading rules."""
    id: str = ""
    display_name: str = ""
    base_currency: str = ""
    quote_currency: str = ""
    base_increment: Decimal = Decimal(0)
    quote_increment: Decimal = Decimal(0)
    base_min_size: Decimal = Decimal(0)
    base_max_size: Decimal = Decimal(0)
    min_market_funds: Decimal = Decimal(0)
    max_market_funds: Decimal = Decimal(0)
    status: str = ""
    status_message: str = ""
    cancel_only: bool = False
    limit_only: bool = False
    post_only: bool = False
    trading_disabled: bool = False

    @classmethod
    def from_api(cls, data: dict) -> "Product":
        return cls(
            id=data.get("id", ""),
            display_name=data.get("display_name", ""),
            base_currency=data.get("base_currency", ""),
            quote_currency=data.get("quote_currency", ""),
            base_increment=_dec(data.get("base_increment")),
            quote_increment=_dec(data.get("quote_increment")),
            base_min_size=_dec(data.get("base_min_size")),
            base_max_size=_dec(data.get("base_max_size")),
            min_market_funds=_dec(data.get("min_market_funds")),
            max_market_funds=_dec(data.get("max_market_funds")),
            status=data.get("status", ""),
            status_message=data.get("status_message", ""),
            cancel_only=bool(data.get("cancel_only", False)),
            limit_only=bool(data.get("limit_only", False)),
            post_only=bool(data.get("post_only", False)),
            trading_disabled=bool(data.get("trading_disabled", False)),
        )

    @classmethod
    def list_from_api(cls, data: list) -> list["Product"]:
        return [cls.from_api(p) for p in data]

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "base_currency": self.base_currency,
            "quote_currency": self.quote_currency,
            "base_increment": str(self.base_increment),
            "quote_increment": str(self.quote_increment),
            "base_min_size": str(self.base_min_size),
            "base_max_size": str(self.base_max_size),
            "min_market_funds": str(self.min_market_funds),
            "max_market_funds": str(self.max_market_funds),
            "status": self.status,
            "status_message": self.status_message,
            "cancel_only": self.cancel_only,
            "limit_only": self.limit_only,
            "post_only": self.post_only,
            "trading_disabled": self.trading_disabled,
        }


def _row(data: list, size: int, name: str) -> list:
    if not isinstance(data, list) or len(data) != size:
        raise ValueError(f"{name} must have {size} elements, got {data!r}")
    return data


@dataclass
class AggregatedBookEntry:
    """One price level; sent as ``[price, size, num_orders]``."""
    price: Decimal = Decimal(0)
    size: Decimal = Decimal(0)
    num_orders: int = 0

    @classmethod
    def from_api(cls, data: list) -> "AggregatedBookEntry":
        price, size, num_orders = _row(data, 3, "AggregatedBookEntry")
        return cls(price=_dec(price), size=_dec(size), num_orders=int(num_orders))

    def to_api(self) -> list:
        return [str(self.price), str(self.size), self.num_orders]


@dataclass
class BookEntry:
    """One resting order; sent as ``[price, size, order_id]``."""
    price: Decimal = Decimal(0)
    size: Decimal = Decimal(0)
    order_id: str = ""

    @classmethod
    def from_api(cls, data: list) -> "BookEntry":
        price, size, order_id = _row(data, 3, "BookEntry")
        return cls(price=_dec(price), size=_dec(size), order_id=str(order_id))

    def to_api(self) -> list:
        return [str(self.price), str(self.size), self.order_id]


@dataclass
class AggregatedOrderBook:
    """Order book at level 1 or 2, one entry per price."""
    sequence: int = 0
    bids: list[AggregatedBookEntry] = field(default_factory=list)
    asks: list[AggregatedBookEntry] = field(default_factory=list)

    entry_type: ClassVar[Any] = AggregatedBookEntry

    @classmethod
    def from_api(cls, data: dict):
        return cls(
            sequence=int(data.get("sequence", 0) or 0),
            bids=[cls.entry_type.from_api(b) for b in data.get("bids") or []],
            asks=[cls.entry_type.from_api(a) for a in data.get("asks") or []],
        )

    def to_api(self) -> dict:
        return {
            "sequence": self.sequence,
            "bids": [b.to_api() for b in self.bids],
            "asks": [a.to_api() for a in self.asks],
        }


@dataclass
class OrderBook(AggregatedOrderBook):
    """Full, non-aggregated order book (level 3)."""
    bids: list[BookEntry] = field(default_factory=list)
    asks: list[BookEntry] = field(default_factory=list)

    entry_type: ClassVar[Any] = BookEntry


@dataclass
class ProductTicker:
    """Last trade and best bid/ask."""
    trade_id: int = 0
    price: Decimal = Decimal(0)
    size: Decimal = Decimal(0)
    bid: Decimal = Decimal(0)
    ask: Decimal = Decimal(0)
    volume: Decimal = Decimal(0)
    time: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "ProductTicker":
        return cls(
            trade_id=int(data.get("trade_id", 0) or 0),
            price=_dec(data.get("price")),
            size=_dec(data.get("size")),
            bid=_dec(data.get("bid")),
            ask=_dec(data.get("ask")),
            volume=_dec(data.get("volume")),
            time=data.get("time", ""),
        )

    def to_api(self) -> dict:
        return {
            "trade_id": self.trade_id,
            "price": str(self.price),
            "size": str(self.size),
            "bid": str(self.bid),
            "ask": str(self.ask),
            "volume": str(self.volume),
            "time": self.time,
        }


@dataclass
class ProductStats:
    """24 hour statistics for a product."""
    open: Decimal = Decimal(0)
    high: Decimal = Decimal(0)
    low: Decimal = Decimal(0)
    last: Decimal = Decimal(0)
    volume: Decimal = Decimal(0)
    volume_30day: Decimal = Decimal(0)

    @classmethod
    def from_api(cls, data: dict) -> "ProductStats":
        return cls(**{name: _dec(data.get(name)) for name in cls.__dataclass_fields__})

    def to_api(self) -> dict:
        return {name: str(getattr(self, name)) for name in self.__dataclass_fields__}


@dataclass
class Candle:
    """One bucket of historic rates; sent as ``[time, low, high, open, close, volume]``."""
    time: int = 0
    low: Decimal = Decimal(0)
    high: Decimal = Decimal(0)
    open: Decimal = Decimal(0)
    close: Decimal = Decimal(0)
    volume: Decimal = Decimal(0)

    @classmethod
    def from_api(cls, data: list) -> "Candle":
        time, low, high, open_, close, volume = _row(data, 6, "Candle")
        return cls(
            time=int(time),
            low=_dec(low),
            high=_dec(high),
            open=_dec(open_),
            close=_dec(close),
            volume=_dec(volume),
        )

    @classmethod
    def list_from_api(cls, data: list) -> list["Candle"]:
        return [cls.from_api(row) for row in data]

    def to_api(self) -> list:
        return [
            self.time,
            float(self.low),
            float(self.high),
            float(self.open),
            float(self.close),
            float(self.volume),
        ]


@dataclass
class Currency:
    id: str = ""
    name: str = ""
    min_size: Decimal = Decimal(0)
    max_precision: Decimal = Decimal(0)
    status: str = ""
    message: str = ""
    convertible_to: list[str] = field(default_factory=list)
    details: dict = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> "Currency":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            min_size=_dec(data.get("min_size")),
            max_precision=_dec(data.get("max_precision")),
            status=data.get("status", ""),
            message=data.get("message") or "",
            convertible_to=list(data.get("convertible_to") or []),
            details=dict(data.get("details") or {}),
        )

    @classmethod
    def list_from_api(cls, data: list) -> list["Currency"]:
        return [cls.from_api(c) for c in data]

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "min_size": str(self.min_size),
            "max_precision": str(self.max_precision),
            "status": self.status,
            "message": self.message,
            "convertible_to": self.convertible_to,
            "details": self.details,
        }


@dataclass
class ServerTime:
    iso: str = ""
    epoch: Decimal = Decimal(0)

    @classmethod
    def from_api(cls, data: dict) -> "ServerTime":
        return cls(iso=data.get("iso", ""), epoch=_dec(data.get("epoch")))

    def to_api(self) -> dict:
        return {"iso": self.iso, "epoch": float(self.epoch)}


# =====================================================================
# Profiles, fees, limits & reports
# =====================================================================


@dataclass
class Profile:
    """A portfolio of accounts owned by one user."""
    id: str = ""
    user_id: str = ""
    name: str = ""
    active: bool = False
    is_default: bool = False
    created_at: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Profile":
        return cls(
            id=data.get("id", ""),
            user_id=data.get("user_id", ""),
            name=data.get("name", ""),
            active=bool(data.get("active", False)),
            is_default=bool(data.get("is_default", False)),
            created_at=data.get("created_at", ""),
        )

    @classmethod
    def list_from_api(cls, data: list) -> list["Profile"]:
        return [cls.from_api(p) for p in data]

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "active": self.active,
            "is_default": self.is_default,
            "created_at": self.created_at,
        }


@dataclass
class ProfileTransfer:
    from_profile: str = ""
    to_profile: str = ""
    currency: str = ""
    amount: Decimal = Decimal(0)

    @classmethod
    def from_api(cls, data: dict) -> "ProfileTransfer":
        return cls(
            from_profile=data.get("from", ""),
            to_profile=data.get("to", ""),
            currency=data.get("currency", ""),
            amount=_dec(data.get("amount")),
        )

    def to_api(self) -> dict:
        return {
            "from": self.from_profile,
            "to": self.to_profile,
            "currency": self.currency,
            "amount": str(self.amount),
        }


@dataclass
class Fees:
    """Maker and taker fee rates and the 30-day trailing USD volume."""
    maker_fee_rate: Decimal = Decimal(0)
    taker_fee_rate: Decimal = Decimal(0)
    usd_volume: Decimal = Decimal(0)

    @classmethod
    def from_api(cls, data: dict) -> "Fees":
        return cls(
            maker_fee_rate=_dec(data.get("maker_fee_rate")),
            taker_fee_rate=_dec(data.get("taker_fee_rate")),
            usd_volume=_dec(data.get("usd_volume")),
        )

    def to_api(self) -> dict:
        return {
            "maker_fee_rate": str(self.maker_fee_rate),
            "taker_fee_rate": str(self.taker_fee_rate),
            "usd_volume": str(self.usd_volume),
        }


@dataclass
class Limit:
    max: Decimal = Decimal(0)
    remaining: Decimal = Decimal(0)
    period_in_days: int = 0

    @classmethod
    def from_api(cls, data: dict) -> "Limit":
        return cls(
            max=_dec(data.get("max")),
            remaining=_dec(data.get("remaining")),
            period_in_days=int(data.get("period_in_days", 0) or 0),
        )

    def to_api(self) -> dict:
        return {
            "max": str(self.max),
            "remaining": str(self.remaining),
            "period_in_days": self.period_in_days,
        }


@dataclass
class Limits:
    """Transfer limits keyed by payment method type, then by currency."""
    limit_currency: str = ""
    transfer_limits: dict[str, dict[str, Limit]] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> "Limits":
        return cls(
            limit_currency=data.get("limit_currency", ""),
            transfer_limits={
                method: {currency: Limit.from_api(limit) for currency, limit in limits.items()}
                for method, limits in (data.get("transfer_limits") or {}).items()
            },
        )

    def to_api(self) -> dict:
        return {
            "limit_currency": self.limit_currency,
            "transfer_limits": {
                method: {currency: limit.to_api() for currency, limit in limits.items()}
                for method, limits in self.transfer_limits.items()
            },
        }


@dataclass
class Report:
    """Status of a requested account or fills report."""
    id: str = ""
    type: str = ""
    status: str = ""  # pending, creating, ready
    created_at: str = ""
    completed_at: Optional[str] = None
    expires_at: Optional[str] = None
    file_url: str = ""
    start_date: str = ""
    end_date: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Report":
        params = data.get("params") or {}
        return cls(
            id=data.get("id", ""),
            type=data.get("type", ""),
            status=data.get("status", ""),
            created_at=data.get("created_at", ""),
            completed_at=data.get("completed_at"),
            expires_at=data.get("expires_at"),
            file_url=data.get("file_url") or "",
            start_date=params.get("start_date", ""),
            end_date=params.get("end_date", ""),
        )

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "status": self.status,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
            "expires_at": self.expires_at,
            "file_url": self.file_url,
            "params": {"start_date": self.start_date, "end_date": self.end_date},
        }


# =====================================================================
# Funding: coinbase accounts, payment methods, conversions
# =====================================================================


@dataclass
class WireDepositInformation:
    account_number: str = ""
    routing_number: str = ""
    bank_name: str = ""
    bank_address: str = ""
    bank_country: dict = field(default_factory=dict)  # code, name
    account_name: str = ""
    account_address: str = ""
    reference: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "WireDepositInformation":
        country = data.get("bank_country") or {}
        return cls(
            account_number=data.get("account_number", ""),
            routing_number=data.get("routing_number", ""),
            bank_name=data.get("bank_name", ""),
            bank_address=data.get("bank_address", ""),
            bank_country={"code": country.get("code", ""), "name": country.get("name", "")},
            account_name=data.get("account_name", ""),
            account_address=data.get("account_address", ""),
            reference=data.get("reference", ""),
        )

    def to_api(self) -> dict:
        return {
            "account_number": self.account_number,
            "routing_number": self.routing_number,
            "bank_name": self.bank_name,
            "bank_address": self.bank_address,
            "bank_country": self.bank_country,
            "account_name": self.account_name,
            "account_address": self.account_address,
            "reference": self.reference,
        }


@dataclass
class SEPADepositInformation:
    iban: str = ""
    swift: str = ""
    bank_name: str = ""
    bank_address: str = ""
    bank_country_name: str = ""
    account_name: str = ""
    account_address: str = ""
    reference: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "SEPADepositInformation":
        return cls(**{name: data.get(name, "") for name in cls.__dataclass_fields__})

    def to_api(self) -> dict:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


@dataclass
class CoinbaseAccount:
    """A wallet on coinbase.com linked to the exchange."""
    id: str = ""
    name: str = ""
    currency: str = ""
    balance: Decimal = Decimal(0)
    type: str = ""  # fiat, wallet
    primary: bool = False
    active: bool = False
    wire_deposit_information: Optional[WireDepositInformation] = None
    sepa_deposit_information: Optional[SEPADepositInformation] = None

    @classmethod
    def from_api(cls, data: dict) -> "CoinbaseAccount":
        wire = data.get("wire_deposit_information")
        sepa = data.get("sepa_deposit_information")
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            currency=data.get("currency", ""),
            balance=_dec(data.get("balance")),
            type=data.get("type", ""),
            primary=bool(data.get("primary", False)),
            active=bool(data.get("active", False)),
            wire_deposit_information=WireDepositInformation.from_api(wire) if wire else None,
            sepa_deposit_information=SEPADepositInformation.from_api(sepa) if sepa else None,
        )

    @classmethod
    def list_from_api(cls, data: list) -> list["CoinbaseAccount"]:
        return [cls.from_api(a) for a in data]

    def to_api(self) -> dict:
        body = {
            "id": self.id,
            "name": self.name,
            "currency": self.currency,
            "balance": str(self.balance),
            "type": self.type,
            "primary": self.primary,
            "active": self.active,
        }
        if self.wire_deposit_information is not None:
            body["wire_deposit_information"] = self.wire_deposit_information.to_api()
        if self.sepa_deposit_information is not None:
            body["sepa_deposit_information"] = self.sepa_deposit_information.to_api()
        return body


@dataclass
class PaymentMethod:
    """A bank account or card linked for deposits and withdrawals.

    ``limits`` is kept as received; its layout varies by method type.
    """
    id: str = ""
    type: str = ""
    name: str = ""
    currency: str = ""
    primary_buy: bool = False
    primary_sell: bool = False
    allow_buy: bool = False
    allow_sell: bool = False
    allow_deposit: bool = False
    allow_withdraw: bool = False
    limits: dict = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> "PaymentMethod":
        return cls(
            id=data.get("id", ""),
            type=data.get("type", ""),
            name=data.get("name", ""),
            currency=data.get("currency", ""),
            primary_buy=bool(data.get("primary_buy", False)),
            primary_sell=bool(data.get("primary_sell", False)),
            allow_buy=bool(data.get("allow_buy", False)),
            allow_sell=bool(data.get("allow_sell", False)),
            allow_deposit=bool(data.get("allow_deposit", False)),
            allow_withdraw=bool(data.get("allow_withdraw", False)),
            limits=dict(data.get("limits") or {}),
        )

    @classmethod
    def list_from_api(cls, data: list) -> list["PaymentMethod"]:
        return [cls.from_api(m) for m in data]

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "currency": self.currency,
            "primary_buy": self.primary_buy,
            "primary_sell": self.primary_sell,
            "allow_buy": self.allow_buy,
            "allow_sell": self.allow_sell,
            "allow_deposit": self.allow_deposit,
            "allow_withdraw": self.allow_withdraw,
            "limits": self.limits,
        }


@dataclass
class CryptoDepositAddress:
    id: str = ""
    address: str = ""
    destination_tag: str = ""
    address_info: dict = field(default_factory=dict)  # address, destination_tag
    network: str = ""
    deposit_uri: str = ""
    exchange_deposit_address: bool = False
    resource: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "CryptoDepositAddress":
        info = data.get("address_info") or {}
        return cls(
            id=data.get("id", ""),
            address=data.get("address", ""),
            destination_tag=data.get("destination_tag") or "",
            address_info={
                "address": info.get("address", ""),
                "destination_tag": info.get("destination_tag") or "",
            },
            network=data.get("network", ""),
            deposit_uri=data.get("deposit_uri", ""),
            exchange_deposit_address=bool(data.get("exchange_deposit_address", False)),
            resource=data.get("resource", ""),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "address": self.address,
            "address_info": self.address_info,
            "destination_tag": self.destination_tag,
            "network": self.network,
            "deposit_uri": self.deposit_uri,
            "exchange_deposit_address": self.exchange_deposit_address,
            "resource": self.resource,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class WithdrawalFeeEstimate:
    fee: Decimal = Decimal(0)

    @classmethod
    def from_api(cls, data: dict) -> "WithdrawalFeeEstimate":
        return cls(fee=_dec(data.get("fee")))

    def to_api(self) -> dict:
        return {"fee": str(self.fee)}


@dataclass
class StablecoinConversion:
    id: str = ""
    amount: Decimal = Decimal(0)
    from_currency: str = ""
    to_currency: str = ""
    from_account_id: str = ""
    to_account_id: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "StablecoinConversion":
        return cls(
            id=data.get("id", ""),
            amount=_dec(data.get("amount")),
            from_currency=data.get("from", ""),
            to_currency=data.get("to", ""),
            from_account_id=data.get("from_account_id", ""),
            to_account_id=data.get("to_account_id", ""),
        )

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "amount": str(self.amount),
            "from": self.from_currency,
            "to": self.to_currency,
            "from_account_id": self.from_account_id,
            "to_account_id": self.to_account_id,
        }


# =====================================================================
# Paged collections
# =====================================================================


@dataclass
class PagedList:
    """A page of items plus the cursors from the response headers.

    Subclasses set ``item_type``; the wire format is a bare JSON array.
    """
    items: list = field(default_factory=list)
    page: Optional[Pagination] = None

    item_type: ClassVar[Any] = None

    @classmethod
    def from_api(cls, data: list):
        if not isinstance(data, list):
            raise TypeError(f"{cls.__name__} expects a JSON array, got {type(data).__name__}")
        return cls(items=[cls.item_type.from_api(item) for item in data])

    def to_api(self) -> list:
        return [item.to_api() for item in self.items]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


class Ledger(PagedList):
    item_type = LedgerEntry


class Holds(PagedList):
    item_type = Hold


class Orders(PagedList):
    item_type = Order


class Fills(PagedList):
    item_type = Fill


class Deposits(PagedList):
    item_type = Transfer


class Withdrawals(PagedList):
    item_type = Transfer


class ProductTrades(PagedList):
    item_type = ProductTrade


def raw(data: Any) -> Any:
    """Decoder returning the decoded JSON unchanged."""
    return data


def created_id(data: dict) -> str:
    """Decoder for partial POST responses that only carry an id."""
    return data.get("id", "")
