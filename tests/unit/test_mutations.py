"""Tests for the confirm → request → toast → refetch runner."""

from unittest.mock import AsyncMock, MagicMock

from src.api.errors import ApiError
from src.dashboard.mutations import MutationRunner, always_confirm
from src.dashboard.toasts import ToastBus, ToastType


class TestMutationRunner:
    async def test_success_toasts_then_refreshes(self, toasts: ToastBus) -> None:
        action = AsyncMock(return_value={"message": "ok"})
        refresh = AsyncMock()
        runner = MutationRunner(toasts)
        ok = await runner.run(
            action, success="Job deleted successfully", failure="Failed", refresh=refresh,
        )
        assert ok is True
        action.assert_awaited_once()
        refresh.assert_awaited_once()
        assert [(t.type, t.message) for t in toasts.toasts] == [
            (ToastType.SUCCESS, "Job deleted successfully"),
        ]

    async def test_success_message_from_result(self, toasts: ToastBus) -> None:
        runner = MutationRunner(toasts)
        await runner.run(
            AsyncMock(return_value=3),
            success=lambda n: f"Deleted {n} application(s)",
            failure="Failed",
        )
        assert toasts.toasts[0].message == "Deleted 3 application(s)"

    async def test_declined_confirmation_sends_nothing(self, toasts: ToastBus) -> None:
        confirm = MagicMock(return_value=False)
        action = AsyncMock()
        refresh = AsyncMock()
        runner = MutationRunner(toasts, confirm)
        ok = await runner.run(
            action,
            confirm="Reject this candidate?",
            success="done",
            failure="Failed",
            refresh=refresh,
        )
        assert ok is False
        confirm.assert_called_once_with("Reject this candidate?")
        action.assert_not_awaited()
        refresh.assert_not_awaited()
        assert toasts.toasts == []

    async def test_no_prompt_without_confirm_text(self, toasts: ToastBus) -> None:
        confirm = MagicMock(return_value=False)
        runner = MutationRunner(toasts, confirm)
        assert await runner.run(AsyncMock(), success="done", failure="Failed") is True
        confirm.assert_not_called()

    async def test_server_error_shown_verbatim(self, toasts: ToastBus) -> None:
        error = ApiError("PUT /jobs/j1 returned 400", status_code=400, server_message="Job is archived")
        refresh = AsyncMock()
        runner = MutationRunner(toasts)
        ok = await runner.run(
            AsyncMock(side_effect=error),
            success="Job closed successfully",
            failure="Failed to close job",
            refresh=refresh,
        )
        assert ok is False
        refresh.assert_not_awaited()
        assert [(t.type, t.message) for t in toasts.toasts] == [(ToastType.ERROR, "Job is archived")]

    async def test_generic_failure_uses_fallback(self, toasts: ToastBus) -> None:
        runner = MutationRunner(toasts)
        await runner.run(
            AsyncMock(side_effect=ApiError("GET failed")),
            success="done",
            failure="Failed to delete job",
        )
        assert toasts.toasts[0].message == "Failed to delete job"

    def test_always_confirm(self) -> None:
        assert always_confirm("anything?") is True
