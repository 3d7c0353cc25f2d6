"""
Standard data models for the application.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from core.decimal_math import ZERO, format_fixed, to_decimal

QUOTE_IRT = "IRT"
QUOTE_USDT = "USDT"
QUOTE_CODES = (QUOTE_IRT, QUOTE_USDT)


def _parse_flag(value: Any) -> bool:
    """Feed booleans may arrive as JSON booleans, 0/1 or "true"/"false" strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return False


class FeedKind(Enum):
    """Detail view tabs. Each tab polls a different feed."""

    BUY_ORDERS = "buyOrders"
    SELL_ORDERS = "sellOrders"
    TRADES = "trades"

    @property
    def side(self) -> Optional[str]:
        """Order book side for the actives endpoint, None for the trade tape."""
        return {
            FeedKind.BUY_ORDERS: "buy",
            FeedKind.SELL_ORDERS: "sell",
        }.get(self)

    @property
    def title(self) -> str:
        return {
            FeedKind.BUY_ORDERS: "Buy orders",
            FeedKind.SELL_ORDERS: "Sell orders",
            FeedKind.TRADES: "Trades",
        }[self]

    @classmethod
    def parse(cls, value: "str | FeedKind") -> "FeedKind":
        """Accept either the enum or its tab value (e.g. "sellOrders")."""
        if isinstance(value, cls):
            return value
        for kind in cls:
            if kind.value == value or kind.name == str(value).upper():
                return kind
        raise ValueError(f"Unknown feed kind: {value!r}")


@dataclass(frozen=True)
class FeedKey:
    """Polling key: which feed of which market."""

    market_id: int
    kind: FeedKind

    def __str__(self) -> str:
        return f"{self.market_id}/{self.kind.value}"


@dataclass(frozen=True)
class QuoteCurrency:
    """Currency a market is priced in."""

    id: int
    code: str
    color: str = ""
    image: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "QuoteCurrency":
        return cls(
            id=int(data.get("id") or 0),
            code=str(data.get("code") or ""),
            color=str(data.get("color") or ""),
            image=str(data.get("image") or ""),
        )


@dataclass(frozen=True)
class MarketSummary:
    """One market from the listing snapshot."""

    id: int
    code: str
    title: str
    title_fa: str
    currency2: QuoteCurrency
    tradable: bool
    price: str = "0"
    change: Decimal = ZERO

    @classmethod
    def from_dict(cls, data: dict) -> "MarketSummary":
        price_info = data.get("price_info") or {}
        return cls(
            id=int(data["id"]),
            code=str(data.get("code") or ""),
            title=str(data.get("title") or ""),
            title_fa=str(data.get("title_fa") or ""),
            currency2=QuoteCurrency.from_dict(data.get("currency2") or {}),
            tradable=_parse_flag(data.get("tradable")),
            price=str(price_info.get("price") or "0"),
            change=to_decimal(price_info.get("change")),
        )


@dataclass(frozen=True)
class MarketList:
    """Market listing snapshot as returned by the feed."""

    count: int = 0
    results: tuple[MarketSummary, ...] = ()


@dataclass(frozen=True)
class OrderRecord:
    """
    One row of a buy book, sell book or trade tape snapshot.

    Quantities are kept as Decimal; missing fields are zero.
    """

    price: Decimal = ZERO
    remain: Decimal = ZERO
    value: Decimal = ZERO
    match_amount: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    time: str = ""

    def __post_init__(self):
        # Rows built by hand may carry strings, floats or None
        for name in ("price", "remain", "value"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        for name in ("match_amount", "amount"):
            raw = getattr(self, name)
            if raw is not None:
                object.__setattr__(self, name, to_decimal(raw))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrderRecord":
        match_amount = data.get("match_amount")
        amount = data.get("amount")
        return cls(
            price=to_decimal(data.get("price")),
            remain=to_decimal(data.get("remain")),
            value=to_decimal(data.get("value")),
            match_amount=None if match_amount is None else to_decimal(match_amount),
            amount=None if amount is None else to_decimal(amount),
            time=str(data.get("time") or ""),
        )

    def volume(self, kind: FeedKind) -> Decimal:
        """Volume column: matched amount on the trade tape, remaining volume on order books."""
        if kind is FeedKind.TRADES:
            return self.match_amount if self.match_amount is not None else ZERO
        return self.remain


@dataclass(frozen=True)
class AggregateResult:
    """Totals for an order list and a target percentage."""

    weighted_avg_price: Decimal = ZERO
    total_remain: Decimal = ZERO
    total_value: Decimal = ZERO
    target_remain: Decimal = ZERO
    total_payment: Decimal = ZERO

    def display(self, places: int = 4) -> dict[str, str]:
        """Fixed-point strings for presentation."""
        return {
            "weighted_avg_price": format_fixed(self.weighted_avg_price, places),
            "total_remain": format_fixed(self.total_remain, places),
            "total_value": format_fixed(self.total_value, places),
            "target_remain": format_fixed(self.target_remain, places),
            "total_payment": format_fixed(self.total_payment, places),
        }


@dataclass(frozen=True)
class PageWindow:
    """Visible slice of a paginated collection plus its page controls."""

    visible: tuple = ()
    page_numbers: tuple[int, ...] = ()
    total_pages: int = 0
    current_page: int = 1
    has_previous: bool = False
    has_next: bool = False
    has_more_pages: bool = False
    total_items: int = 0

