"""
Bitpin Monitor - console front end.
Main entry point.
"""

import argparse
import logging
import os
import signal
import sys

from PyQt6.QtCore import QCoreApplication

from config.settings import get_settings_manager
from core.bitpin_client import BitpinClient
from core.logger import setup_logging
from core.market_detail_controller import MarketDetailController
from core.market_list_controller import MarketListController
from core.models import QUOTE_CODES, FeedKind
from core.utils import format_number, format_percent

logger = logging.getLogger(__name__)


def print_markets(controller: MarketListController):
    page = controller.current_window()
    print(f"[{controller.active_tab}] page {page.current_page}/{page.total_pages} "
          f"({page.total_items} markets)")
    for market in page.visible:
        print(f"  {market.id:>5}  {market.title:<24} {market.title_fa:<20} "
              f"{format_number(market.price):>20}  {format_percent(market.change)}")

    controls = " ".join(
        f"[{n}]" if n == page.current_page else str(n) for n in page.page_numbers
    )
    if page.has_more_pages:
        controls += " ..."
    prev_label = "<< prev" if page.has_previous else "  "
    next_label = "next >>" if page.has_next else "  "
    print(f"  {prev_label} {controls} {next_label}")


def print_detail(controller: MarketDetailController, places: int):
    kind = controller.active_tab
    print(f"-- {kind.title} (market {controller.market_id}) --")
    print(f"  {'price':>20} {'volume':>20} {'value':>20}")
    for price, volume, value in controller.display_rows():
        print(f"  {format_number(price):>20} {format_number(volume):>20} {format_number(value):>20}")

    if not controller.calculator_enabled:
        return

    totals = controller.totals
    print(f"  avg price: {format_number(totals.weighted_avg_price, places)}  "
          f"total volume: {format_number(totals.total_remain, places)}  "
          f"total: {format_number(totals.total_value, places)}")
    print(f"  for {format_number(controller.percent)}% of tradable volume: "
          f"volume {format_number(totals.target_remain, places)}, "
          f"avg price {format_number(totals.weighted_avg_price, places)}, "
          f"payment {format_number(totals.total_payment, places)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bitpin market monitor")
    sub = parser.add_subparsers(dest="command", required=True)

    markets = sub.add_parser("markets", help="List tradable markets")
    markets.add_argument("--quote", choices=QUOTE_CODES, default=None)
    markets.add_argument("--page", type=int, default=1)

    watch = sub.add_parser("watch", help="Poll a market's order book or trades")
    watch.add_argument("market_id", type=int)
    watch.add_argument("--tab", choices=[k.value for k in FeedKind], default=FeedKind.BUY_ORDERS.value)
    watch.add_argument("--percent", default="0")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)

    app = QCoreApplication(sys.argv)
    app.setApplicationName("Bitpin Monitor")
    # Let Ctrl+C end the event loop
    signal.signal(signal.SIGINT, signal.SIG_DFL)

    settings_manager = get_settings_manager()
    setup_logging(settings_manager.settings.logging, os.environ.get("LOG_LEVEL"))
    if settings_manager.settings.proxy.enabled:
        settings_manager._apply_proxy_env()
    settings = settings_manager.settings

    client = BitpinClient(settings)

    if args.command == "markets":
        controller = MarketListController(client, settings)
        if args.quote:
            controller.set_tab(args.quote)

        def on_loaded(_markets):
            controller.set_page(args.page)
            print_markets(controller)
            app.exit(0)

        controller.markets_loaded.connect(on_loaded)
        controller.load_failed.connect(lambda _msg: app.exit(1))
        controller.refresh()
        return app.exec()

    controller = MarketDetailController(client, settings)
    controller.set_percent(args.percent)
    controller.totals_changed.connect(
        lambda _totals: print_detail(controller, settings.display_places)
    )
    controller.open(args.market_id, args.tab)
    try:
        return app.exec()
    finally:
        controller.close()
        client.close()


if __name__ == "__main__":
    sys.exit(main())
