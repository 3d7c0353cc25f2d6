from decimal import Decimal

import pytest

from core.models import AggregateResult, FeedKey, FeedKind, MarketSummary, OrderRecord


def test_order_record_from_dict():
    order = OrderRecord.from_dict(
        {"price": "1500000", "remain": "0.25", "value": "375000", "time": "1700000000"}
    )

    assert order.price == Decimal("1500000")
    assert order.remain == Decimal("0.25")
    assert order.value == Decimal("375000")
    assert order.match_amount is None
    assert order.time == "1700000000"


def test_order_record_missing_fields_default_to_zero():
    order = OrderRecord.from_dict({"price": "100"})

    assert order.remain == 0
    assert order.value == 0
    assert order.time == ""


def test_order_record_is_read_only():
    order = OrderRecord.from_dict({"price": "100"})
    with pytest.raises(AttributeError):
        order.price = Decimal("101")


def test_volume_column_depends_on_tab():
    trade = OrderRecord.from_dict({"price": "10", "match_amount": "3", "remain": "1"})

    assert trade.volume(FeedKind.TRADES) == Decimal("3")
    assert trade.volume(FeedKind.BUY_ORDERS) == Decimal("1")
    assert OrderRecord().volume(FeedKind.TRADES) == 0


def test_market_summary_from_dict():
    market = MarketSummary.from_dict(
        {
            "id": 1,
            "code": "BTC_IRT",
            "title": "Bitcoin/Toman",
            "title_fa": "بیت کوین/تومان",
            "tradable": True,
            "currency2": {"id": 2, "code": "IRT", "color": "#000", "image": "irt.png"},
            "price_info": {"change": -1.5, "price": "6100000000"},
        }
    )

    assert market.id == 1
    assert market.currency2.code == "IRT"
    assert market.tradable is True
    assert market.price == "6100000000"
    assert market.change == Decimal("-1.5")


class TestFeedKind:
    def test_sides(self):
        assert FeedKind.BUY_ORDERS.side == "buy"
        assert FeedKind.SELL_ORDERS.side == "sell"
        assert FeedKind.TRADES.side is None

    def test_parse(self):
        assert FeedKind.parse("sellOrders") is FeedKind.SELL_ORDERS
        assert FeedKind.parse("trades") is FeedKind.TRADES
        assert FeedKind.parse(FeedKind.BUY_ORDERS) is FeedKind.BUY_ORDERS

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            FeedKind.parse("orders")


def test_feed_keys_compare_by_value():
    assert FeedKey(5, FeedKind.BUY_ORDERS) == FeedKey(5, FeedKind.BUY_ORDERS)
    assert FeedKey(5, FeedKind.BUY_ORDERS) != FeedKey(5, FeedKind.SELL_ORDERS)


def test_aggregate_result_display():
    result = AggregateResult(weighted_avg_price=Decimal(400) / Decimal(3))
    shown = result.display()

    assert shown["weighted_avg_price"] == "133.3333"
    assert shown["total_payment"] == "0.0000"


def test_order_record_normalises_loose_values():
    order = OrderRecord(price="1,500", remain=0.1, value=None, match_amount="2")

    assert order.price == Decimal("1500")
    assert order.remain == Decimal("0.1")
    assert order.value == 0
    assert order.match_amount == Decimal("2")
    assert order.amount is None


@pytest.mark.parametrize(
    "raw, expected",
    [(True, True), (False, False), ("false", False), ("False", False), ("true", True),
     (1, True), (0, False), (None, False), ("", False)],
)
def test_market_tradable_flag(raw, expected):
    market = MarketSummary.from_dict({"id": 1, "tradable": raw, "currency2": {"code": "IRT"}})
    assert market.tradable is expected
