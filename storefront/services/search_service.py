"""
Search-as-you-type suggestions.

Each keystroke starts a debounced lookup task and cancels the previous one.
Only the newest task may publish its results (latest wins); a superseded
request is discarded, never merged.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from storefront.core.constants import SEARCH_DEBOUNCE_SECONDS, SEARCH_MIN_QUERY_LENGTH
from storefront.core.exceptions import ApiException

logger = logging.getLogger(__name__)

SuggestionLookup = Callable[[str], Awaitable[list[dict[str, Any]]]]


class SuggestionSearch:
    """Debounced, cancellable product suggestion lookup."""

    def __init__(
        self,
        lookup: SuggestionLookup,
        debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
        min_query_length: int = SEARCH_MIN_QUERY_LENGTH,
        on_results: Callable[[list[dict[str, Any]]], None] | None = None,
    ):
        self._lookup = lookup
        self._debounce = max(debounce_seconds, 0.0)
        self._min_length = min_query_length
        self._on_results = on_results
        self._task: asyncio.Task | None = None
        self.query = ""
        self.suggestions: list[dict[str, Any]] = []
        self.visible = False

    def on_input(self, text: str) -> asyncio.Task | None:
        """Handle a new input value; must be called from the running loop."""
        self.cancel()
        self.query = text or ""

        if len(self.query) < self._min_length:
            self._apply([], visible=False)
            return None

        self._task = asyncio.get_running_loop().create_task(self._fetch(self.query))
        return self._task

    def cancel(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None

    def close(self) -> None:
        """Closing the search box hides suggestions and drops pending work."""
        self.cancel()
        self.visible = False

    async def wait(self) -> None:
        """Wait for the current lookup, if any, to finish or be cancelled."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _fetch(self, query: str) -> None:
        if self._debounce:
            await asyncio.sleep(self._debounce)
        try:
            results = await self._lookup(query)
        except ApiException as e:
            logger.error(f"Error fetching suggestions for {query!r}: {e.message}")
            results = None
        except Exception as e:
            logger.exception(f"Unexpected error fetching suggestions for {query!r}: {e}")
            results = None

        # A newer keystroke may have replaced this task while it awaited.
        if asyncio.current_task() is not self._task:
            return
        if results is None:
            self._apply([], visible=False)
        else:
            self._apply(list(results), visible=True)

    def _apply(self, results: list[dict[str, Any]], visible: bool) -> None:
        self.suggestions = results
        self.visible = visible
        if self._on_results is not None:
            self._on_results(results)
