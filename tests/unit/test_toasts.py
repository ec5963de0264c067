"""Tests for the toast notification bus."""

import asyncio
from collections.abc import Iterator

import pytest

from src.core.config import ToastConfig
from src.dashboard.toasts import Toast, ToastBus, ToastType

FAST = ToastConfig(success_s=0.05, error_s=0.2, info_s=0.05, warning_s=0.05)


@pytest.fixture
def bus() -> Iterator[ToastBus]:
    b = ToastBus(FAST)
    yield b
    b.close()


class TestPush:
    async def test_subscriber_sees_toast_immediately(self, bus: ToastBus) -> None:
        snapshots: list[list[Toast]] = []
        bus.subscribe(snapshots.append)
        bus.success("Job deleted successfully")
        assert snapshots[0] == []
        assert [t.message for t in snapshots[1]] == ["Job deleted successfully"]
        assert snapshots[1][0].type == ToastType.SUCCESS

    async def test_durations_by_type(self, bus: ToastBus) -> None:
        bus.success("ok")
        bus.error("bad")
        durations = {t.type: t.duration_s for t in bus.toasts}
        assert durations == {ToastType.SUCCESS: 0.05, ToastType.ERROR: 0.2}

    async def test_explicit_duration(self, bus: ToastBus) -> None:
        bus.push(ToastType.INFO, "hello", duration_s=1.0)
        assert bus.toasts[0].duration_s == 1.0

    async def test_stacking_and_unique_ids(self, bus: ToastBus) -> None:
        ids = [bus.info("one"), bus.warning("two"), bus.error("three")]
        assert len(set(ids)) == 3
        assert [t.message for t in bus.toasts] == ["one", "two", "three"]

    def test_push_needs_running_loop(self) -> None:
        with pytest.raises(RuntimeError):
            ToastBus(FAST).success("no loop")


class TestExpiry:
    async def test_auto_removal(self, bus: ToastBus) -> None:
        bus.success("short")
        bus.error("long")
        await asyncio.sleep(0.1)
        assert [t.message for t in bus.toasts] == ["long"]
        await asyncio.sleep(0.15)
        assert bus.toasts == []

    async def test_listener_notified_on_expiry(self, bus: ToastBus) -> None:
        sizes: list[int] = []
        bus.subscribe(lambda toasts: sizes.append(len(toasts)))
        bus.success("bye")
        await asyncio.sleep(0.12)
        assert sizes == [0, 1, 0]


class TestDismiss:
    async def test_dismiss_once(self, bus: ToastBus) -> None:
        sizes: list[int] = []
        bus.subscribe(lambda toasts: sizes.append(len(toasts)))
        toast_id = bus.success("bye")
        assert bus.dismiss(toast_id) is True
        assert bus.dismiss(toast_id) is False
        await asyncio.sleep(0.12)
        # The cancelled timer never fires a second removal.
        assert sizes == [0, 1, 0]

    async def test_dismiss_unknown(self, bus: ToastBus) -> None:
        assert bus.dismiss("toast-999") is False

    async def test_dismiss_keeps_others(self, bus: ToastBus) -> None:
        first = bus.info("one")
        bus.info("two")
        bus.dismiss(first)
        assert [t.message for t in bus.toasts] == ["two"]


class TestSubscription:
    async def test_unsubscribe(self, bus: ToastBus) -> None:
        calls: list[int] = []
        unsubscribe = bus.subscribe(lambda toasts: calls.append(len(toasts)))
        unsubscribe()
        bus.info("hello")
        assert calls == [0]

    async def test_close_cancels_timers(self, bus: ToastBus) -> None:
        bus.info("one")
        bus.close()
        assert bus.toasts == []
        await asyncio.sleep(0.1)
        assert bus.toasts == []

