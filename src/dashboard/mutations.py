"""Confirm → request → toast → refetch.

Every state-changing action goes through ``MutationRunner.run``. Nothing is
changed locally before the server confirms; the list is consistent again once
the refetch completes.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from src.api.errors import ApiError
from src.dashboard.toasts import ToastBus

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Blocking yes/no prompt, e.g. ``input()`` in the console.
Confirm = Callable[[str], bool]


def always_confirm(prompt: str) -> bool:
    return True


class MutationRunner:
    """Runs mutations with a confirmation gate and toast feedback."""

    def __init__(self, toasts: ToastBus, confirm: Confirm = always_confirm) -> None:
        self._toasts = toasts
        self._confirm = confirm

    async def run(
        self,
        action: Callable[[], Awaitable[T]],
        *,
        success: str | Callable[[T], str],
        failure: str,
        confirm: str | None = None,
        refresh: Callable[[], Awaitable[Any]] | None = None,
    ) -> bool:
        """Run one mutation. Returns True if the server accepted it.

        Args:
            action: Issues the request.
            success: Toast text, or a function building it from the response.
            failure: Fallback toast text when the server gave no message.
            confirm: Prompt for destructive actions. Declining sends nothing.
            refresh: Refetch to run after success, unconditionally.
        """
        if confirm is not None and not self._confirm(confirm):
            logger.debug("Mutation declined: %s", confirm)
            return False

        try:
            result = await action()
        except ApiError as e:
            logger.warning("Mutation failed: %s", e)
            self._toasts.error(e.user_message(failure))
            return False

        message = success(result) if callable(success) else success
        self._toasts.success(message)
        if refresh is not None:
            await refresh()
        return True
