"""Tests for AsyncNotifier."""

import asyncio
import logging

import pytest

from loadstate import AsyncError, AsyncLoaded, AsyncLoading, AsyncNotifier, AsyncUnloaded


async def _drain(n=5):
    """Give pending tasks a few loop iterations to run."""
    for _ in range(n):
        await asyncio.sleep(0)


class _GatedProducer:
    """Each call returns a coroutine that waits for its own gate, then yields AsyncLoaded(index)."""

    def __init__(self):
        self.gates = []

    def __call__(self):
        index = len(self.gates)
        gate = asyncio.Event()
        self.gates.append(gate)

        async def _wait():
            await gate.wait()
            return AsyncLoaded(index)

        return _wait()


def _record(notifier):
    log = []
    notifier.add_listener(lambda: log.append(notifier.value))
    return log


class TestConstruction:
    async def test_construction_starts_loading(self):
        gate = asyncio.Event()

        async def producer():
            await gate.wait()
            return AsyncLoaded(5)

        n = AsyncNotifier(producer)
        assert n.value == AsyncLoading()
        log = _record(n)
        gate.set()
        await _drain()
        assert log == [AsyncLoaded(5)]
        assert n.pending == 0

    def test_construction_without_loop_stays_unloaded(self):
        calls = []

        async def producer():
            calls.append(1)
            return AsyncLoaded(1)

        n = AsyncNotifier(producer)
        assert n.value == AsyncUnloaded()
        assert calls == []

        async def main():
            await n.reload()

        asyncio.run(main())
        assert n.value == AsyncLoaded(1)

    def test_reload_without_loop_raises(self):
        async def producer():
            return AsyncLoaded(1)

        n = AsyncNotifier(producer)
        with pytest.raises(RuntimeError):
            n.reload()
        assert n.value == AsyncUnloaded()


class TestReload:
    async def test_loading_then_loaded(self):
        async def producer():
            await asyncio.sleep(0.01)
            return AsyncLoaded(5)

        n = AsyncNotifier(producer)
        await _drain()
        await asyncio.sleep(0.05)
        log = _record(n)
        await n.reload()
        assert log == [AsyncLoading(), AsyncLoaded(5)]

    async def test_loading_then_error(self):
        async def producer():
            return AsyncError("x")

        n = AsyncNotifier(producer)
        await _drain()
        log = _record(n)
        await n.reload()
        assert log == [AsyncLoading(), AsyncError("x")]
        assert n.state == AsyncError("x")

    async def test_loading_is_published_before_reload_returns(self):
        producer = _GatedProducer()
        n = AsyncNotifier(producer)
        producer.gates[0].set()
        await _drain()
        assert n.value == AsyncLoaded(0)

        log = _record(n)
        task = n.reload()
        assert log == [AsyncLoading()]
        assert not task.done()
        producer.gates[1].set()
        await task
        assert log == [AsyncLoading(), AsyncLoaded(1)]

    async def test_reload_from_any_state_reenters_loading(self):
        results = iter([AsyncError("first"), AsyncLoaded("second")])

        async def producer():
            return next(results)

        n = AsyncNotifier(producer)
        await _drain()
        assert n.value == AsyncError("first")
        log = _record(n)
        await n.reload()
        assert log == [AsyncLoading(), AsyncLoaded("second")]

    async def test_overlapping_reloads_last_settled_wins(self):
        producer = _GatedProducer()
        n = AsyncNotifier(producer)
        older = n.reload()
        newer = n.reload()
        assert n.pending == 3

        producer.gates[2].set()
        await newer
        assert n.value == AsyncLoaded(2)

        # the older request settles later and overwrites the newer result
        producer.gates[1].set()
        await older
        assert n.value == AsyncLoaded(1)

        producer.gates[0].set()
        await _drain()
        assert n.value == AsyncLoaded(0)
        assert n.pending == 0


class TestFailures:
    async def test_rejected_awaitable_propagates(self):
        calls = []

        async def producer():
            calls.append(1)
            if len(calls) > 1:
                raise ConnectionError("down")
            return AsyncLoaded("ok")

        n = AsyncNotifier(producer)
        await _drain()
        log = _record(n)
        with pytest.raises(ConnectionError, match="down"):
            await n.reload()
        # no result was published after the loading state
        assert log == [AsyncLoading()]

    async def test_synchronous_producer_error_propagates(self):
        calls = []

        def producer():
            calls.append(1)
            if len(calls) > 1:
                raise ValueError("bad producer")

            async def ok():
                return AsyncLoaded(1)

            return ok()

        n = AsyncNotifier(producer)
        await _drain()
        with pytest.raises(ValueError, match="bad producer"):
            n.reload()


class TestDispose:
    async def test_dispose_releases_listeners_but_not_inflight_reload(self):
        producer = _GatedProducer()
        n = AsyncNotifier(producer)
        log = _record(n)
        n.dispose()
        producer.gates[0].set()
        await _drain()
        assert log == []
        assert n.value == AsyncLoaded(0)


class TestLogging:
    async def test_reload_is_logged_at_debug(self, caplog):
        async def producer():
            return AsyncLoaded(1)

        with caplog.at_level(logging.DEBUG, logger="loadstate.notifiers"):
            n = AsyncNotifier(producer)
            await n.reload()
        assert "Reloading AsyncNotifier" in caplog.text
