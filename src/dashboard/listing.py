"""Filtered list view-model: initial load, debounced filter refetch, refresh.

Fetch protocol:
  1. ``load()`` fetches once with no filters, whatever the filter state.
  2. Filter changes before the initial load completes never fetch on their
     own; if any happened, one debounced filtered fetch follows the load.
  3. After that, each filter change restarts the quiet period; one filtered
     fetch with the latest filters runs when changes pause.
  4. Every fetch gets a sequence number. A response older than the newest
     fetch issued is discarded, so a slow early request can never overwrite
     a later one. In-flight requests are not cancelled.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from src.api.errors import ApiError
from src.dashboard.debounce import Debouncer

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
FiltersT = TypeVar("FiltersT", bound=BaseModel)


class FilteredList(Generic[ItemT, FiltersT]):
    """State for one list screen.

    ``loading`` is the initial-load flag; ``is_filtering`` is set from the
    first filter change until the debounced fetch settles. Views render the
    two phases differently.
    """

    def __init__(
        self,
        fetch: Callable[[FiltersT | None], Awaitable[list[ItemT]]],
        filters: FiltersT,
        *,
        debounce_s: float = 0.3,
        on_error: Callable[[ApiError], None] | None = None,
        name: str = "list",
    ) -> None:
        self._fetch = fetch
        self._on_error = on_error
        self._name = name
        self._debouncer = Debouncer(debounce_s, self._fetch_filtered)
        self._issued = 0
        self._changed_while_loading = False

        self.filters = filters
        self.items: list[ItemT] = []
        self.loading = True
        self.is_filtering = False
        self.last_error: ApiError | None = None

    @property
    def pending(self) -> bool:
        """A debounced fetch is scheduled or running."""
        return self._debouncer.pending or self._debouncer.running

    async def load(self) -> None:
        """Initial fetch, always unfiltered."""
        await self._run(None)
        if self._changed_while_loading:
            self._changed_while_loading = False
            self._schedule()

    def set_filters(self, **changes: Any) -> None:
        """Apply filter field changes and schedule a debounced refetch."""
        merged = {**self.filters.model_dump(), **changes}
        self.filters = type(self.filters).model_validate(merged)
        if self.loading:
            self._changed_while_loading = True
            return
        self._schedule()

    def clear_filters(self, *fields: str) -> None:
        """Reset the named fields (all fields when none given)."""
        names = fields or tuple(type(self.filters).model_fields)
        self.set_filters(**{name: None for name in names})

    async def refresh(self) -> None:
        """Refetch with the current filters. Used after mutations."""
        await self._run(self.filters)

    async def wait(self) -> None:
        """Wait for debounced fetches that already started."""
        await self._debouncer.wait()

    def close(self) -> None:
        self._debouncer.cancel()
        self._changed_while_loading = False
        if not self._debouncer.running:
            self.is_filtering = False

    def _schedule(self) -> None:
        self.is_filtering = True
        self._debouncer.trigger()

    async def _fetch_filtered(self) -> None:
        await self._run(self.filters)

    async def _run(self, filters: FiltersT | None) -> None:
        self._issued += 1
        seq = self._issued
        try:
            items = await self._fetch(filters)
        except ApiError as e:
            if seq == self._issued:
                logger.error("Failed to fetch %s: %s", self._name, e)
                self.last_error = e
                if self._on_error is not None:
                    self._on_error(e)
            return
        finally:
            if seq == self._issued:
                self.loading = False
                if not self._debouncer.pending:
                    self.is_filtering = False

        if seq != self._issued:
            logger.debug("Discarding stale %s response #%d (latest #%d)", self._name, seq, self._issued)
            return
        self.items = items
        self.last_error = None
        logger.debug("Fetched %d %s", len(items), self._name)
