import asyncio
import unittest
from unittest.mock import AsyncMock

from watchlist.client.catalog_search import DebouncedCatalogSearch
from watchlist.client.result import Result
from watchlist.schemas.catalog import CatalogEntry, CatalogSearchResponse

DELAY = 0.05


def _response(*titles: str) -> Result:
    results = [CatalogEntry(tmdb_id=i + 1, title=title) for i, title in enumerate(titles)]
    return Result.success(CatalogSearchResponse(results=results, page=1, total_pages=1))


class TestDebouncedCatalogSearch(unittest.IsolatedAsyncioTestCase):
    async def test_rapid_typing_issues_one_request_for_settled_query(self) -> None:
        search = AsyncMock(return_value=_response("Dune"))
        controller = DebouncedCatalogSearch(search, delay=DELAY)

        for partial in ("d", "du", "dun", "dune "):
            controller.set_query(partial)
            await asyncio.sleep(DELAY / 4)
        await controller.drain()

        search.assert_awaited_once_with("dune")
        self.assertTrue(controller.searched)
        self.assertFalse(controller.loading)
        self.assertEqual([e.title for e in controller.results], ["Dune"])

    async def test_blank_query_clears_without_request(self) -> None:
        search = AsyncMock(return_value=_response("Dune"))
        controller = DebouncedCatalogSearch(search, delay=DELAY)
        controller.set_query("dune")
        await controller.drain()

        controller.set_query("   ")
        await controller.drain()

        search.assert_awaited_once()
        self.assertEqual(controller.results, [])
        self.assertFalse(controller.searched)
        self.assertEqual(controller.error, "")

    async def test_error_is_surfaced(self) -> None:
        search = AsyncMock(return_value=Result.failure("Failed to search movies. Check your connection."))
        controller = DebouncedCatalogSearch(search, delay=DELAY)
        controller.set_query("dune")
        await controller.drain()

        self.assertEqual(controller.error, "Failed to search movies. Check your connection.")
        self.assertTrue(controller.searched)
        self.assertFalse(controller.loading)

    async def test_superseded_response_is_discarded(self) -> None:
        release_first = asyncio.Event()

        async def search(query: str) -> Result:
            if query == "alien":
                await release_first.wait()
                return _response("Alien")
            return _response("Aliens")

        controller = DebouncedCatalogSearch(search, delay=DELAY)
        controller.set_query("alien")
        await asyncio.sleep(DELAY * 3)  # first request now in flight
        controller.set_query("aliens")
        await asyncio.sleep(DELAY * 3)
        release_first.set()
        await controller.drain()

        self.assertEqual([e.title for e in controller.results], ["Aliens"])

    async def test_response_for_edited_query_is_discarded_before_next_timer(self) -> None:
        release_first = asyncio.Event()

        async def search(query: str) -> Result:
            if query == "alien":
                await release_first.wait()
                return _response("Alien")
            return _response("Aliens")

        controller = DebouncedCatalogSearch(search, delay=DELAY)
        controller.set_query("alien")
        await asyncio.sleep(DELAY * 3)  # first request now in flight
        controller.set_query("aliens")
        release_first.set()
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        self.assertEqual(controller.results, [])
        self.assertFalse(controller.searched)

        await controller.drain()
        self.assertEqual([e.title for e in controller.results], ["Aliens"])

    async def test_clearing_discards_in_flight_response(self) -> None:
        release = asyncio.Event()

        async def search(query: str) -> Result:
            await release.wait()
            return _response("Heat")

        controller = DebouncedCatalogSearch(search, delay=DELAY)
        controller.set_query("heat")
        await asyncio.sleep(DELAY * 3)
        controller.set_query("")
        release.set()
        await controller.drain()

        self.assertEqual(controller.results, [])
        self.assertFalse(controller.searched)
