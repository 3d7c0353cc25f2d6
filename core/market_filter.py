"""
Market listing filter.
"""

from typing import Iterable

from core.models import MarketSummary


def filter_markets(markets: Iterable[MarketSummary], quote_code: str) -> list[MarketSummary]:
    """Tradable markets quoted in ``quote_code``, in input order."""
    return [
        market
        for market in markets
        if market.currency2.code == quote_code and market.tradable
    ]
