import logging
from decimal import Decimal
from typing import Any, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from config.settings import AppSettings, get_settings_manager
from core.base_client import MarketDataSource
from core.decimal_math import ZERO
from core.models import AggregateResult, FeedKey, FeedKind, OrderRecord
from core.order_book import aggregate, clamp_percent
from core.poll_scheduler import PollScheduler

logger = logging.getLogger(__name__)


class MarketDetailController(QObject):
    """
    Controller for one market's order books and trade tape.
    Polls the active tab and keeps the volume calculator totals current.
    """

    records_changed = pyqtSignal(object)  # tuple[OrderRecord, ...]
    totals_changed = pyqtSignal(object)  # AggregateResult
    tab_changed = pyqtSignal(object)  # FeedKind
    fetch_failed = pyqtSignal(str)

    def __init__(
        self,
        client: MarketDataSource,
        settings: Optional[AppSettings] = None,
        scheduler: Optional[PollScheduler] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._client = client
        self._settings = settings or get_settings_manager().settings

        if scheduler is None:
            scheduler = PollScheduler(
                self._client.fetch_feed,
                interval_ms=self._settings.polling.interval_ms,
                parent=self,
            )
        self._scheduler = scheduler
        self._scheduler.fetch_failed.connect(self._on_fetch_failed)

        self._market_id: Optional[int] = None
        self._kind = FeedKind.BUY_ORDERS
        self._records: tuple[OrderRecord, ...] = ()
        self._percent: Decimal = ZERO
        self._totals = AggregateResult()

    @property
    def market_id(self) -> Optional[int]:
        return self._market_id

    @property
    def active_tab(self) -> FeedKind:
        return self._kind

    @property
    def records(self) -> tuple[OrderRecord, ...]:
        return self._records

    @property
    def percent(self) -> Decimal:
        return self._percent

    @property
    def totals(self) -> AggregateResult:
        return self._totals

    @property
    def calculator_enabled(self) -> bool:
        """The volume calculator only applies to order books."""
        return self._kind is not FeedKind.TRADES

    def open(self, market_id: int, kind: FeedKind | str = FeedKind.BUY_ORDERS):
        """Start polling a market."""
        self._market_id = market_id
        self._kind = FeedKind.parse(kind)
        self._restart()

    def close(self):
        """Stop polling."""
        self._scheduler.stop()

    def set_tab(self, kind: FeedKind | str):
        kind = FeedKind.parse(kind)
        if kind is self._kind and self._scheduler.is_active():
            return
        self._kind = kind
        self.tab_changed.emit(kind)
        if self._market_id is not None:
            self._restart()

    def set_percent(self, value: Any):
        """Update the target percentage (clamped to 0-100)."""
        percent = clamp_percent(value)
        if percent == self._percent:
            return
        self._percent = percent
        self._recalculate()

    def display_rows(self) -> list[tuple[Decimal, Decimal, Decimal]]:
        """(price, volume, value) per row for the active tab."""
        return [(r.price, r.volume(self._kind), r.value) for r in self._records]

    def _restart(self):
        key = FeedKey(self._market_id, self._kind)
        logger.info(f"Showing {self._kind.title.lower()} for market {self._market_id}")
        # Rows of the previous tab must not show under the new one
        if self._records:
            self._clear_records()
        self._scheduler.start(key, self._on_records)

    def _clear_records(self):
        # Totals are reset silently; listeners get them with the first snapshot of the new key
        self._records = ()
        self._totals = aggregate(self._records, self._percent)
        self.records_changed.emit(self._records)

    def _on_records(self, records):
        self._records = tuple(records)
        self.records_changed.emit(self._records)
        self._recalculate()

    def _recalculate(self):
        self._totals = aggregate(self._records, self._percent)
        self.totals_changed.emit(self._totals)

    def _on_fetch_failed(self, key, message: str):
        logger.warning(f"Keeping last {key.kind.value} snapshot for market {key.market_id}: {message}")
        self.fetch_failed.emit(message)
