import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from config.settings import AppSettings, get_settings_manager
from core.base_client import MarketDataSource
from core.market_filter import filter_markets
from core.models import QUOTE_CODES, MarketList, MarketSummary, PageWindow
from core.pagination import PageState, calculate_total_pages, window
from core.poll_scheduler import Runner, run_in_thread

logger = logging.getLogger(__name__)


class MarketListController(QObject):
    """
    State behind the market listing: snapshot, quote tab and per-tab page.
    Decouples data logic from the UI.
    """

    loading_changed = pyqtSignal(bool)
    markets_loaded = pyqtSignal(object)  # MarketList
    load_failed = pyqtSignal(str)
    tab_changed = pyqtSignal(str)
    page_changed = pyqtSignal(object)  # PageWindow

    _loaded = pyqtSignal(object, object)  # MarketList | None, error message | None

    def __init__(
        self,
        client: MarketDataSource,
        settings: Optional[AppSettings] = None,
        runner: Optional[Runner] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._client = client
        self._settings = settings or get_settings_manager().settings
        self._runner = runner or run_in_thread

        self._markets = MarketList()
        self._filtered: list[MarketSummary] = []
        self._pages = PageState()
        self._loading = False

        quote = self._settings.default_quote.upper()
        self._active_tab = quote if quote in QUOTE_CODES else QUOTE_CODES[0]

        self._loaded.connect(self._on_loaded)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def active_tab(self) -> str:
        return self._active_tab

    @property
    def markets(self) -> MarketList:
        return self._markets

    def refresh(self):
        """Fetch the market listing in the background."""
        if self._loading:
            logger.debug("Market list fetch already in progress")
            return
        self._set_loading(True)

        def job():
            try:
                markets = self._client.fetch_markets()
            except Exception as e:
                self._loaded.emit(None, str(e) or e.__class__.__name__)
            else:
                self._loaded.emit(markets, None)

        self._runner(job)

    def _on_loaded(self, markets: Optional[MarketList], error: Optional[str]):
        try:
            if error is not None:
                logger.error(f"Failed to fetch market data: {error}")
                self.load_failed.emit(error)
                return

            self._markets = markets
            logger.info(f"Loaded {len(markets.results)} markets")
            self._apply_filter()
            self.markets_loaded.emit(markets)
            self.page_changed.emit(self.current_window())
        finally:
            self._set_loading(False)

    def _set_loading(self, loading: bool):
        if loading != self._loading:
            self._loading = loading
            self.loading_changed.emit(loading)

    def _apply_filter(self):
        self._filtered = filter_markets(self._markets.results, self._active_tab)

    def filtered(self) -> list[MarketSummary]:
        return list(self._filtered)

    def set_tab(self, quote_code: str):
        """Switch quote currency tab; each tab keeps its own page."""
        quote_code = quote_code.upper()
        if quote_code not in QUOTE_CODES:
            raise ValueError(f"Unknown quote currency: {quote_code!r}")
        if quote_code == self._active_tab:
            return

        self._active_tab = quote_code
        self._apply_filter()
        self.tab_changed.emit(quote_code)
        self.page_changed.emit(self.current_window())

    def current_page(self) -> int:
        return self._pages.get(self._active_tab)

    def total_pages(self) -> int:
        return calculate_total_pages(len(self._filtered), self._settings.pagination.page_size)

    def set_page(self, page: int):
        """Go to ``page``, clamped to the available pages."""
        page = max(1, min(page, max(self.total_pages(), 1)))
        if page == self.current_page():
            return
        self._pages.set(self._active_tab, page)
        self.page_changed.emit(self.current_window())

    def next_page(self):
        if self.current_page() < self.total_pages():
            self.set_page(self.current_page() + 1)

    def previous_page(self):
        if self.current_page() > 1:
            self.set_page(self.current_page() - 1)

    def current_window(self) -> PageWindow:
        pagination = self._settings.pagination
        return window(
            self._filtered,
            self.current_page(),
            pagination.page_size,
            pagination.display_limit,
        )

    def market(self, market_id: int) -> Optional[MarketSummary]:
        """Look up a market from the latest snapshot (for opening its detail view)."""
        for market in self._markets.results:
            if market.id == market_id:
                return market
        return None
