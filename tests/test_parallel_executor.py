"""Tests for bounded, cancellable parallel execution."""

import threading
import time

import pytest

from compose_teardown.services.parallel_executor import ParallelExecutor


class TestParallelExecutor:
    def test_empty_items_return_empty_list(self):
        assert ParallelExecutor().map(lambda x: x, []) == []

    def test_outcomes_keep_input_order(self):
        outcomes = ParallelExecutor(max_workers=4).map(lambda x: x * 2, [3, 1, 2])

        assert [o.item for o in outcomes] == [3, 1, 2]
        assert [o.value for o in outcomes] == [6, 2, 4]
        assert all(o.ok for o in outcomes)

    def test_errors_are_captured_per_item(self):
        def fail_on_two(x):
            if x == 2:
                raise RuntimeError("boom")
            return x

        outcomes = ParallelExecutor().map(fail_on_two, [1, 2, 3])

        assert [o.ok for o in outcomes] == [True, False, True]
        assert str(outcomes[1].error) == "boom"

    def test_fan_out_is_bounded(self):
        lock = threading.Lock()
        state = {"running": 0, "peak": 0}

        def track(_):
            with lock:
                state["running"] += 1
                state["peak"] = max(state["peak"], state["running"])
            time.sleep(0.02)
            with lock:
                state["running"] -= 1

        ParallelExecutor(max_workers=2).map(track, list(range(8)))

        assert state["peak"] <= 2

    def test_no_new_calls_after_cancellation(self):
        executor = ParallelExecutor(max_workers=1)
        called = []

        def cancel_on_first(x):
            called.append(x)
            executor.cancel()
            return x

        outcomes = executor.map(cancel_on_first, [1, 2, 3])

        assert called == [1]
        assert outcomes[0].ok
        assert [o.cancelled for o in outcomes[1:]] == [True, True]
        assert executor.cancelled

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            ParallelExecutor(max_workers=0)
