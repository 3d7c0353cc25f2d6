import threading
import time
from unittest.mock import MagicMock

import pytest

from core.models import FeedKey, FeedKind
from core.poll_scheduler import PollScheduler

BUY = FeedKey(5, FeedKind.BUY_ORDERS)
SELL = FeedKey(5, FeedKind.SELL_ORDERS)


class TestPollScheduler:
    @pytest.fixture
    def fetcher(self):
        return MagicMock(side_effect=lambda key: [f"{key}"])

    @pytest.fixture
    def scheduler(self, qapp, fetcher, deferred_runner):
        scheduler = PollScheduler(fetcher, interval_ms=3000, runner=deferred_runner)
        yield scheduler
        scheduler.stop()

    def test_start_fetches_immediately(self, scheduler, fetcher, deferred_runner):
        received = []
        scheduler.start(BUY, received.append)

        assert scheduler.is_active()
        assert scheduler.current_key() == BUY
        assert len(deferred_runner.jobs) == 1

        deferred_runner.complete(0)

        fetcher.assert_called_once_with(BUY)
        assert received == [[str(BUY)]]
        assert scheduler.in_flight() == 0

    def test_each_tick_issues_one_fetch(self, scheduler, deferred_runner):
        scheduler.start(BUY)
        scheduler._tick()
        scheduler._tick()

        assert len(deferred_runner.jobs) == 3
        assert scheduler.in_flight() == 3

    def test_stop_halts_timer(self, scheduler, deferred_runner):
        scheduler.start(BUY)
        scheduler.stop()

        assert not scheduler.is_active()
        assert scheduler.current_key() is None

        scheduler._tick()
        assert len(deferred_runner.jobs) == 1

    def test_result_after_stop_is_discarded(self, scheduler, deferred_runner):
        received = []
        scheduler.start(BUY, received.append)
        scheduler.stop()

        deferred_runner.complete(0)

        assert received == []

    def test_stale_response_after_tab_switch_is_discarded(self, scheduler, deferred_runner):
        buy_results, sell_results = [], []
        scheduler.start(BUY, buy_results.append)
        scheduler.start(SELL, sell_results.append)

        # sell resolves first, then the slow buy response arrives
        deferred_runner.complete(1)
        deferred_runner.complete(0)

        assert sell_results == [[str(SELL)]]
        assert buy_results == []
        assert scheduler.current_key() == SELL
        assert scheduler.is_active()

    def test_restarting_same_key_discards_earlier_requests(self, scheduler, deferred_runner):
        received = []
        scheduler.start(BUY, received.append)
        scheduler.start(BUY, received.append)

        deferred_runner.complete(0)
        assert received == []

        deferred_runner.complete(1)
        assert len(received) == 1

    def test_older_request_of_same_key_does_not_overwrite_newer(self, qapp, deferred_runner):
        responses = iter([["old"], ["new"]])
        scheduler = PollScheduler(lambda key: next(responses), runner=deferred_runner)
        received = []
        scheduler.start(BUY, received.append)
        scheduler._tick()

        deferred_runner.complete(1)
        deferred_runner.complete(0)

        assert received == [["new"]]
        scheduler.stop()

    def test_results_in_completion_order(self, qapp, deferred_runner):
        responses = iter([["first"], ["second"]])
        scheduler = PollScheduler(lambda key: next(responses), runner=deferred_runner)
        received = []
        scheduler.start(BUY, received.append)
        scheduler._tick()

        deferred_runner.complete_all()

        assert received == [["first"], ["second"]]
        scheduler.stop()

    def test_failure_keeps_polling(self, qapp, deferred_runner):
        fetcher = MagicMock(side_effect=[ConnectionError("timeout"), ["ok"]])
        scheduler = PollScheduler(fetcher, runner=deferred_runner)
        received, failures = [], []
        scheduler.fetch_failed.connect(lambda key, msg: failures.append((key, msg)))
        scheduler.start(BUY, received.append)

        deferred_runner.complete(0)

        assert failures == [(BUY, "timeout")]
        assert received == []
        assert scheduler.is_active()

        scheduler._tick()
        deferred_runner.complete(1)

        assert received == [["ok"]]
        scheduler.stop()

    def test_result_ready_signal(self, scheduler, deferred_runner):
        emitted = []
        scheduler.result_ready.connect(lambda key, records: emitted.append((key, records)))
        scheduler.start(SELL)

        deferred_runner.complete(0)

        assert emitted == [(SELL, [str(SELL)])]

    def test_only_one_timer(self, scheduler):
        scheduler.start(BUY)
        timer = scheduler._timer
        scheduler.start(SELL)

        assert scheduler._timer is timer
        assert timer.isActive()
        assert timer.interval() == 3000


def test_background_fetches_are_applied_on_main_thread(qapp):
    main_thread = threading.get_ident()
    fetch_threads, result_threads = [], []

    def fetcher(key):
        fetch_threads.append(threading.get_ident())
        return [str(key)]

    scheduler = PollScheduler(fetcher, interval_ms=50)
    scheduler.start(BUY, lambda records: result_threads.append(threading.get_ident()))

    deadline = time.monotonic() + 5
    while len(result_threads) < 3 and time.monotonic() < deadline:
        qapp.processEvents()
        time.sleep(0.01)
    scheduler.stop()

    assert len(result_threads) >= 3
    assert set(result_threads) == {main_thread}
    assert main_thread not in fetch_threads
