"""Candidate relationship screens: talent pool and per-application notes."""

import asyncio
import logging

from src.api.errors import ApiError
from src.api.resources import CRMAPI
from src.core.schemas import Application, CandidateNote, ReferralInfo, TimelineItem
from src.dashboard.mutations import MutationRunner
from src.dashboard.toasts import ToastBus

logger = logging.getLogger(__name__)


class TalentPoolView:
    """Candidates kept for future openings."""

    def __init__(self, crm: CRMAPI, runner: MutationRunner, toasts: ToastBus) -> None:
        self._crm = crm
        self._runner = runner
        self._toasts = toasts
        self.items: list[Application] = []
        self.loading = True

    async def load(self) -> None:
        try:
            self.items = await self._crm.talent_pool()
        except ApiError as e:
            logger.error("Failed to load talent pool: %s", e)
            self._toasts.error(e.user_message("Failed to load talent pool"))
        finally:
            self.loading = False

    async def remove(self, application: Application) -> bool:
        return await self._runner.run(
            lambda: self._crm.remove_from_talent_pool(application.id),
            confirm=f"Remove {application.full_name} from talent pool?",
            success="Removed from talent pool",
            failure="Failed to remove from talent pool",
            refresh=self.load,
        )


class CandidateNotesView:
    """Notes, referral details and timeline of one application."""

    def __init__(
        self,
        crm: CRMAPI,
        runner: MutationRunner,
        toasts: ToastBus,
        application_id: str,
    ) -> None:
        self._crm = crm
        self._runner = runner
        self._toasts = toasts
        self.application_id = application_id
        self.notes: list[CandidateNote] = []
        self.timeline: list[TimelineItem] = []

    async def load(self) -> None:
        try:
            self.notes, self.timeline = await asyncio.gather(
                self._crm.notes(self.application_id),
                self._crm.timeline(self.application_id),
            )
        except ApiError as e:
            logger.error("Failed to load notes for %s: %s", self.application_id, e)
            self._toasts.error(e.user_message("Failed to load candidate history"))

    async def add_note(self, text: str, *, is_private: bool = False) -> bool:
        if not text.strip():
            self._toasts.error("Please enter a note")
            return False
        return await self._runner.run(
            lambda: self._crm.add_note(self.application_id, text.strip(), is_private=is_private),
            success="Note added",
            failure="Failed to add note",
            refresh=self.load,
        )

    async def update_note(self, note_id: str, text: str, *, is_private: bool = False) -> bool:
        return await self._runner.run(
            lambda: self._crm.update_note(note_id, text, is_private=is_private),
            success="Note updated",
            failure="Failed to update note",
            refresh=self.load,
        )

    async def delete_note(self, note_id: str) -> bool:
        return await self._runner.run(
            lambda: self._crm.delete_note(note_id),
            confirm="Delete this note?",
            success="Note deleted",
            failure="Failed to delete note",
            refresh=self.load,
        )

    async def set_referral(self, referral: ReferralInfo) -> bool:
        return await self._runner.run(
            lambda: self._crm.update_referral(self.application_id, referral),
            success="Referral information updated",
            failure="Failed to update referral information",
            refresh=self.load,
        )

    async def add_to_talent_pool(self) -> bool:
        return await self._runner.run(
            lambda: self._crm.add_to_talent_pool(self.application_id),
            success="Added to talent pool",
            failure="Failed to add to talent pool",
            refresh=self.load,
        )
