import logging
from typing import Any

import requests

from config.settings import AppSettings, get_settings_manager
from core.base_client import FeedError, MarketDataSource
from core.models import MarketList, MarketSummary, OrderRecord

logger = logging.getLogger(__name__)


class BitpinClient(MarketDataSource):
    """Bitpin public REST API."""

    def __init__(self, settings: AppSettings | None = None, session: requests.Session | None = None):
        self._settings = settings or get_settings_manager().settings
        self._session = session or requests.Session()
        self._configure_proxy()

    def _configure_proxy(self):
        proxy = self._settings.proxy
        if proxy.enabled:
            proxy_url = proxy.get_proxy_url()
            if proxy_url:
                logger.debug(f"Configuring proxy for BitpinClient: {proxy_url}")
                self._session.proxies = {"http": proxy_url, "https": proxy_url}
        else:
            self._session.proxies = {}

    def reconnect(self):
        """Re-apply proxy settings after they change."""
        self._configure_proxy()

    def close(self):
        self._session.close()

    def _get(self, url: str, params: dict | None = None) -> Any:
        timeout = self._settings.polling.request_timeout
        logger.debug(f"GET {url} params={params}")
        try:
            resp = self._session.get(url, params=params, timeout=timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            raise FeedError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            # Body was not JSON
            raise FeedError(f"Invalid JSON from {url}: {e}") from e

    def _rows(self, payload: Any, url: str) -> list[OrderRecord]:
        if not isinstance(payload, list):
            raise FeedError(f"Expected a list of rows from {url}, got {type(payload).__name__}")
        cap = self._settings.polling.order_row_cap
        return [OrderRecord.from_dict(row) for row in payload[:cap] if isinstance(row, dict)]

    def fetch_markets(self) -> MarketList:
        url = self._settings.api.markets_url
        data = self._get(url)
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise FeedError(f"Unexpected market list payload from {url}")

        results = []
        for item in data["results"]:
            try:
                results.append(MarketSummary.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed market entry: {e}")

        count = data.get("count")
        return MarketList(
            count=int(count) if isinstance(count, int) else len(results),
            results=tuple(results),
        )

    def fetch_orders(self, market_id: int, side: str) -> list[OrderRecord]:
        if side not in ("buy", "sell"):
            raise ValueError(f"Unknown order side: {side!r}")
        url = f"{self._settings.api.base_url}/v2/mth/actives/{market_id}/"
        data = self._get(url, params={"type": side})
        if not isinstance(data, dict):
            raise FeedError(f"Unexpected order book payload from {url}")
        return self._rows(data.get("orders") or [], url)

    def fetch_trades(self, market_id: int) -> list[OrderRecord]:
        url = f"{self._settings.api.base_url}/v1/mth/matches/{market_id}/"
        return self._rows(self._get(url), url)
