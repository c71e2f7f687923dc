"""
Tests for debounced product suggestions.
"""
import asyncio

import pytest

from storefront.core.exceptions import ApiException
from storefront.services.search_service import SuggestionSearch


class ControlledLookup:
    """Lookup whose responses are released by the test, in any order."""

    def __init__(self):
        self.calls = []
        self.gates = {}

    async def __call__(self, query):
        self.calls.append(query)
        gate = self.gates.setdefault(query, asyncio.Event())
        await gate.wait()
        return [{"_id": query, "name": f"Result for {query}"}]

    def release(self, query):
        self.gates.setdefault(query, asyncio.Event()).set()


class TestSuggestionSearch:
    """Debounce, cancellation and latest-wins behaviour."""

    @pytest.mark.asyncio
    async def test_results_are_published(self):
        published = []

        async def lookup(query):
            return [{"_id": "p1", "name": "Tea"}]

        search = SuggestionSearch(lookup, debounce_seconds=0, on_results=published.append)
        search.on_input("te")
        await search.wait()

        assert search.suggestions == [{"_id": "p1", "name": "Tea"}]
        assert search.visible
        assert published == [[{"_id": "p1", "name": "Tea"}]]

    @pytest.mark.asyncio
    async def test_latest_query_wins(self):
        lookup = ControlledLookup()
        search = SuggestionSearch(lookup, debounce_seconds=0)

        search.on_input("te")
        await asyncio.sleep(0)
        search.on_input("tea")
        await asyncio.sleep(0)

        lookup.release("tea")
        lookup.release("te")
        await search.wait()

        assert search.query == "tea"
        assert search.suggestions == [{"_id": "tea", "name": "Result for tea"}]

    @pytest.mark.asyncio
    async def test_stale_response_is_discarded(self):
        published = []
        first_started = asyncio.Event()
        release_first = asyncio.Event()

        async def lookup(query):
            if query == "te":
                first_started.set()
                try:
                    await release_first.wait()
                except asyncio.CancelledError:
                    pass
                return [{"_id": "stale"}]
            return [{"_id": "fresh"}]

        search = SuggestionSearch(lookup, debounce_seconds=0, on_results=published.append)
        first = search.on_input("te")
        await first_started.wait()
        search.on_input("tea")
        await search.wait()
        await first

        assert published == [[{"_id": "fresh"}]]
        assert search.suggestions == [{"_id": "fresh"}]

    @pytest.mark.asyncio
    async def test_debounce_skips_intermediate_keystrokes(self):
        lookup = ControlledLookup()
        search = SuggestionSearch(lookup, debounce_seconds=0.05)

        for text in ("te", "tea", "teap"):
            search.on_input(text)
        lookup.release("teap")
        await search.wait()

        assert lookup.calls == ["teap"]

    @pytest.mark.asyncio
    async def test_short_query_clears_immediately(self):
        search = SuggestionSearch(ControlledLookup(), debounce_seconds=0)
        search.suggestions = [{"_id": "old"}]
        search.visible = True

        task = search.on_input("t")

        assert task is None
        assert search.suggestions == []
        assert not search.visible

    @pytest.mark.asyncio
    async def test_lookup_error_clears_suggestions(self):
        async def lookup(query):
            raise ApiException(500, "boom")

        search = SuggestionSearch(lookup, debounce_seconds=0)
        search.suggestions = [{"_id": "old"}]
        search.on_input("tea")
        await search.wait()

        assert search.suggestions == []
        assert not search.visible

    @pytest.mark.asyncio
    async def test_close_cancels_pending_lookup(self):
        lookup = ControlledLookup()
        search = SuggestionSearch(lookup, debounce_seconds=0)

        task = search.on_input("tea")
        search.close()
        await asyncio.gather(task, return_exceptions=True)

        assert task.cancelled()
        assert not search.visible

    @pytest.mark.asyncio
    async def test_unexpected_lookup_error_clears_suggestions(self):
        async def lookup(query):
            raise KeyError("data")

        search = SuggestionSearch(lookup, debounce_seconds=0)
        search.suggestions = [{"_id": "old"}]
        search.visible = True
        task = search.on_input("tea")
        await task

        assert task.exception() is None
        assert search.suggestions == []
        assert not search.visible
