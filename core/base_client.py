from abc import ABC, abstractmethod

from core.models import FeedKey, FeedKind, MarketList, OrderRecord


class FeedError(Exception):
    """A feed request failed (network, HTTP status or unexpected payload)."""


class MarketDataSource(ABC):
    """
    Abstract base class for market data sources.
    Defines the read-only feeds the monitor polls.
    """

    @abstractmethod
    def fetch_markets(self) -> MarketList:
        """Fetch the market listing snapshot."""
        pass

    @abstractmethod
    def fetch_orders(self, market_id: int, side: str) -> list[OrderRecord]:
        """Fetch the active orders of one side ("buy" or "sell") of a market."""
        pass

    @abstractmethod
    def fetch_trades(self, market_id: int) -> list[OrderRecord]:
        """Fetch the latest matched trades of a market."""
        pass

    def fetch_feed(self, key: FeedKey) -> list[OrderRecord]:
        """Fetch whichever feed the detail tab in ``key`` shows."""
        if key.kind is FeedKind.TRADES:
            return self.fetch_trades(key.market_id)
        return self.fetch_orders(key.market_id, key.kind.side)
