"""Coinbase Pro Request Parameters.

Query filters and request bodies ("specs") sent to the exchange. Filters
render to unordered ``key=value`` query fragments, contributing one only
for each non-empty field. Specs serialize through ``to_api()`` and
validate locally before any network call.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Optional

from src.coinbasepro.exceptions import ValidationError


class Side(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    LIMIT = "limit"
    MARKET = "market"


class Stop(str, Enum):
    NONE = ""
    LOSS = "loss"
    ENTRY = "entry"


class TimeInForce(str, Enum):
    GOOD_TILL_CANCELED = "GTC"
    GOOD_TILL_TIME = "GTT"
    IMMEDIATE_OR_CANCEL = "IOC"
    FILL_OR_KILL = "FOK"


class SelfTradePrevention(str, Enum):
    DECREMENT_AND_CANCEL = "dc"
    CANCEL_OLDEST = "co"
    CANCEL_NEWEST = "cn"
    CANCEL_BOTH = "cb"


class OrderStatusParam(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    DONE = "done"
    OPEN = "open"
    PENDING = "pending"
    RECEIVED = "received"
    SETTLED = "settled"


class Timeslice(IntEnum):
    """Candle granularity in seconds."""
    ONE_MINUTE = 60
    FIVE_MINUTES = 300
    FIFTEEN_MINUTES = 900
    ONE_HOUR = 3600
    SIX_HOURS = 21600
    ONE_DAY = 86400


class BookLevel(IntEnum):
    """Order book detail. UNDEFINED is sent as BEST."""
    UNDEFINED = 0
    BEST = 1
    TOP_50 = 2
    FULL = 3

    def params(self) -> list[str]:
        level = BookLevel.BEST if self is BookLevel.UNDEFINED else self
        return [f"level={level.value}"]


class ReportType(str, Enum):
    ACCOUNT = "account"
    FILLS = "fills"


class ReportFormat(str, Enum):
    PDF = "pdf"
    CSV = "csv"


def _value(v) -> str:
    return v.value if isinstance(v, Enum) else str(v)


def _rfc3339(value: datetime) -> str:
    # Query strings are not escaped, so offsets are normalized to Z
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.isoformat().replace("+00:00", "Z")


def _one_of(name: str, value, allowed: type[Enum]) -> None:
    if _value(value) not in {member.value for member in allowed}:
        raise ValidationError(f"{name} '{_value(value)}' not valid", field=name)


# =====================================================================
# Filters
# =====================================================================


@dataclass
class OrderFilter:
    product_id: str = ""
    status: list = field(default_factory=list)

    def validate(self) -> None:
        for status in self.status:
            _one_of("status", status, OrderStatusParam)

    def params(self) -> list[str]:
        params = []
        if self.product_id:
            params.append(f"product_id={self.product_id}")
        params.extend(f"status={_value(s)}" for s in self.status)
        return params


@dataclass
class FillFilter:
    order_id: str = ""
    product_id: str = ""

    def params(self) -> list[str]:
        params = []
        if self.order_id:
            params.append(f"order_id={self.order_id}")
        if self.product_id:
            params.append(f"product_id={self.product_id}")
        return params


@dataclass
class TransferFilter:
    """Limits a transfer listing to one profile and transfer type.

    By default the exchange lists transfers of the default profile.
    """
    profile_id: str = ""
    type: str = ""

    def params(self) -> list[str]:
        params = []
        if self.profile_id:
            params.append(f"profile_id={self.profile_id}")
        if self.type:
            params.append(f"type={_value(self.type)}")
        return params


class DepositFilter(TransferFilter):
    pass


class WithdrawalFilter(TransferFilter):
    pass


@dataclass
class ProfileFilter:
    active: bool = False

    def params(self) -> list[str]:
        return ["active"] if self.active else []


@dataclass
class HistoricRateFilter:
    granularity: int = Timeslice.ONE_MINUTE
    end: Optional[datetime] = None
    start: Optional[datetime] = None

    def validate(self) -> None:
        if self.granularity not in {t.value for t in Timeslice}:
            raise ValidationError(
                f"granularity '{int(self.granularity)}' not valid", field="granularity"
            )

    def params(self) -> list[str]:
        params = [f"granularity={int(self.granularity)}"]
        if self.end is not None:
            params.append(f"end={_rfc3339(self.end)}")
        if self.start is not None:
            params.append(f"start={_rfc3339(self.start)}")
        return params


@dataclass
class CryptoAddress:
    """Destination for a withdrawal fee estimate."""
    currency: str
    crypto_address: str

    def params(self) -> list[str]:
        return [f"currency={self.currency}", f"crypto_address={self.crypto_address}"]


@dataclass
class CancelOrderSpec:
    """Identifies one order to cancel.

    An empty ``order_id`` would address ``DELETE /orders/``, which cancels
    every open order, so it is rejected.
    """
    order_id: str
    product_id: str = ""

    def validate(self) -> None:
        if not self.order_id:
            raise ValidationError("'order_id' is required", field="order_id")

    def path(self) -> str:
        path = f"/orders/{self.order_id}"
        if self.product_id:
            path += f"?product_id={self.product_id}"
        return path


# =====================================================================
# Orders
# =====================================================================


@dataclass
class _OrderSpec:
    product_id: str = ""
    side: str = Side.BUY
    client_oid: str = ""
    stp: str = ""
    stop: str = Stop.NONE
    stop_price: Optional[Decimal] = None

    order_type = None

    def validate(self) -> None:
        if _value(self.type) != self.order_type.value:
            raise ValidationError(
                f"order type must be '{self.order_type.value}', got '{_value(self.type)}'",
                field="type",
            )
        if not self.product_id:
            raise ValidationError("'product_id' is required", field="product_id")
        _one_of("side", self.side, Side)
        _one_of("stop", self.stop, Stop)
        if _value(self.stop) and self.stop_price is None:
            raise ValidationError(
                f"stop '{_value(self.stop)}' requires 'stop_price'", field="stop_price"
            )
        if not _value(self.stop) and self.stop_price is not None:
            raise ValidationError("'stop_price' requires a 'stop'", field="stop_price")
        if _value(self.stp):
            _one_of("stp", self.stp, SelfTradePrevention)

    def _base_api(self) -> dict:
        body = {
            "type": _value(self.type),
            "product_id": self.product_id,
            "side": _value(self.side),
        }
        if self.client_oid:
            body["client_oid"] = self.client_oid
        if self.stp:
            body["stp"] = _value(self.stp)
        if _value(self.stop):
            body["stop"] = _value(self.stop)
        if self.stop_price is not None:
            body["stop_price"] = str(self.stop_price)
        return body


@dataclass
class LimitOrder(_OrderSpec):
    """Order executed at ``price`` or better.

    Example:
        order = LimitOrder(product_id="BTC-USD", side="buy",
                           price=Decimal("100.0"), size=Decimal("0.01"))
    """
    type: str = OrderType.LIMIT
    price: Decimal = Decimal(0)
    size: Decimal = Decimal(0)
    time_in_force: str = ""
    cancel_after: str = ""
    post_only: bool = False

    order_type = OrderType.LIMIT

    def validate(self) -> None:
        super().validate()
        if not _value(self.time_in_force):
            return
        _one_of("time_in_force", self.time_in_force, TimeInForce)
        if _value(self.time_in_force) == TimeInForce.GOOD_TILL_TIME.value and not self.cancel_after:
            raise ValidationError(
                "time_in_force 'GTT' requires 'cancel_after'", field="cancel_after"
            )

    def to_api(self) -> dict:
        body = self._base_api()
        body["price"] = str(self.price)
        body["size"] = str(self.size)
        if self.time_in_force:
            body["time_in_force"] = _value(self.time_in_force)
        if self.cancel_after:
            body["cancel_after"] = self.cancel_after
        if self.post_only:
            body["post_only"] = True
        return body


@dataclass
class MarketOrder(_OrderSpec):
    """Order filled immediately at the best available price.

    Either ``size`` or ``funds`` must be given.
    """
    type: str = OrderType.MARKET
    size: Optional[Decimal] = None
    funds: Optional[Decimal] = None

    order_type = OrderType.MARKET

    def validate(self) -> None:
        super().validate()
        if self.funds is None and self.size is None:
            raise ValidationError("without funds a size is required", field="size")

    def to_api(self) -> dict:
        body = self._base_api()
        if self.size is not None:
            body["size"] = str(self.size)
        if self.funds is not None:
            body["funds"] = str(self.funds)
        return body


# =====================================================================
# Transfers, conversions, reports, profiles
# =====================================================================


@dataclass
class PaymentMethodTransferSpec:
    """Deposit from or withdraw to a linked payment method."""
    amount: Decimal
    currency: str
    payment_method_id: str

    def to_api(self) -> dict:
        return {
            "amount": str(self.amount),
            "currency": self.currency,
            "payment_method_id": self.payment_method_id,
        }


@dataclass
class CoinbaseAccountTransferSpec:
    """Deposit from or withdraw to a coinbase.com wallet."""
    amount: Decimal
    currency: str
    coinbase_account_id: str

    def to_api(self) -> dict:
        return {
            "amount": str(self.amount),
            "currency": self.currency,
            "coinbase_account_id": self.coinbase_account_id,
        }


@dataclass
class CryptoAddressWithdrawalSpec:
    amount: Decimal
    currency: str
    crypto_address: str
    destination_tag: str = ""
    no_destination_tag: bool = False
    add_network_fee_to_total: bool = False

    def to_api(self) -> dict:
        return {
            "amount": str(self.amount),
            "currency": self.currency,
            "crypto_address": self.crypto_address,
            "destination_tag": self.destination_tag,
            "no_destination_tag": self.no_destination_tag,
            "add_network_fee_to_total": self.add_network_fee_to_total,
        }


@dataclass
class StablecoinConversionSpec:
    from_currency: str
    to_currency: str
    amount: Decimal

    def to_api(self) -> dict:
        return {"from": self.from_currency, "to": self.to_currency, "amount": str(self.amount)}


@dataclass
class ReportSpec:
    type: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    product_id: str = ""
    account_id: str = ""
    format: str = ReportFormat.PDF
    email: str = ""

    def validate(self) -> None:
        if _value(self.type) not in {t.value for t in ReportType}:
            raise ValidationError("report 'type' must be one of 'account' or 'fills'", field="type")
        if _value(self.type) == ReportType.FILLS.value and not self.product_id:
            raise ValidationError("'product_id' required for report type 'fills'", field="product_id")
        if _value(self.type) == ReportType.ACCOUNT.value and not self.account_id:
            raise ValidationError("'account_id' required for report type 'account'", field="account_id")
        if _value(self.format) not in {f.value for f in ReportFormat}:
            raise ValidationError("'format' must be one of 'pdf' or 'csv'", field="format")
        if self.end_date is None:
            raise ValidationError("'end_date' is required", field="end_date")
        if self.start_date is None:
            raise ValidationError("'start_date' is required", field="start_date")

    def to_api(self) -> dict:
        body = {
            "type": _value(self.type),
            "start_date": _rfc3339(self.start_date) if self.start_date else "",
            "end_date": _rfc3339(self.end_date) if self.end_date else "",
            "format": _value(self.format),
        }
        if self.product_id:
            body["product_id"] = self.product_id
        if self.account_id:
            body["account_id"] = self.account_id
        if self.email:
            body["email"] = self.email
        return body


@dataclass
class ProfileTransferSpec:
    """Move funds between two profiles of the same user."""
    from_profile: str
    to_profile: str
    currency: str
    amount: Decimal

    def to_api(self) -> dict:
        return {
            "from": self.from_profile,
            "to": self.to_profile,
            "currency": self.currency,
            "amount": str(self.amount),
        }
