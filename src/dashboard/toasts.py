"""Toast notification bus.

One bus per UI root. Anything holding the bus can push a typed notification;
subscribers get the full current list after every change. Each toast expires
on its own timer, scheduled at push time on the running event loop, so it goes
away even if whoever pushed it is long gone. Dismissing a toast cancels its
timer.
"""

import asyncio
import itertools
import logging
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict

from src.core.config import ToastConfig

logger = logging.getLogger(__name__)


class ToastType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


class Toast(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    message: str
    type: ToastType
    duration_s: float


Listener = Callable[[list[Toast]], None]


class ToastBus:
    """Publish/subscribe channel for transient notifications.

    Usage::

        bus = ToastBus(settings.toasts)
        unsubscribe = bus.subscribe(render)
        bus.success("Job deleted successfully")
    """

    def __init__(self, config: ToastConfig | None = None) -> None:
        self._config = config or ToastConfig()
        self._ids = itertools.count()
        self._toasts: list[Toast] = []
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._listeners: list[Listener] = []

    @property
    def toasts(self) -> list[Toast]:
        return list(self._toasts)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and hand it the current toasts right away."""
        self._listeners.append(listener)
        listener(self.toasts)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def push(self, kind: ToastType, message: str, duration_s: float | None = None) -> str:
        """Show a toast and schedule its removal. Returns the toast id.

        Must be called with an event loop running.
        """
        loop = asyncio.get_running_loop()
        duration = duration_s if duration_s is not None else self._config.duration_for(kind.value)
        toast = Toast(
            id=f"toast-{next(self._ids)}",
            message=message,
            type=kind,
            duration_s=duration,
        )
        self._toasts.append(toast)
        self._timers[toast.id] = loop.call_later(duration, self._expire, toast.id)
        logger.debug("Toast %s (%s): %s", toast.id, kind.value, message)
        self._notify()
        return toast.id

    def success(self, message: str) -> str:
        return self.push(ToastType.SUCCESS, message)

    def error(self, message: str) -> str:
        return self.push(ToastType.ERROR, message)

    def info(self, message: str) -> str:
        return self.push(ToastType.INFO, message)

    def warning(self, message: str) -> str:
        return self.push(ToastType.WARNING, message)

    def dismiss(self, toast_id: str) -> bool:
        """Remove one toast now. Returns False if it was already gone."""
        timer = self._timers.pop(toast_id, None)
        if timer is not None:
            timer.cancel()
        return self._remove(toast_id)

    def close(self) -> None:
        """Cancel every pending expiry and drop all toasts."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        if self._toasts:
            self._toasts.clear()
            self._notify()

    def _expire(self, toast_id: str) -> None:
        self._timers.pop(toast_id, None)
        self._remove(toast_id)

    def _remove(self, toast_id: str) -> bool:
        before = len(self._toasts)
        self._toasts = [t for t in self._toasts if t.id != toast_id]
        if len(self._toasts) == before:
            return False
        self._notify()
        return True

    def _notify(self) -> None:
        snapshot = self.toasts
        for listener in list(self._listeners):
            listener(snapshot)
