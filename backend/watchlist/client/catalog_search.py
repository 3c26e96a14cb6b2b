"""
Search-as-you-type over the catalog.

Every keystroke restarts a debounce timer; only a query that stays unchanged
for the whole delay issues a request. Requests already in flight are not
cancelled, but each carries the token of the keystroke that issued it; a
response is applied only if no keystroke happened since.
"""
import asyncio
from collections.abc import Awaitable, Callable

from watchlist.client.result import Result
from watchlist.core.config import settings
from watchlist.schemas.catalog import CatalogEntry, CatalogSearchResponse

SearchCatalog = Callable[[str], Awaitable[Result[CatalogSearchResponse]]]


class DebouncedCatalogSearch:
    def __init__(
        self,
        search: SearchCatalog,
        delay: float | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._search = search
        self.delay = settings.SEARCH_DEBOUNCE_SECONDS if delay is None else delay
        self._on_change = on_change
        self._timer: asyncio.Task | None = None
        self._in_flight: set[asyncio.Task] = set()
        self._token = 0
        self.query = ""
        self.results: list[CatalogEntry] = []
        self.loading = False
        self.error = ""
        self.searched = False

    def set_query(self, query: str) -> None:
        """Record a keystroke. Must be called from inside a running event loop."""
        self.query = query
        # Any response issued for an earlier input is now stale.
        self._token += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        if not query.strip():
            self.results = []
            self.searched = False
            self.error = ""
            self.loading = False
            self._notify()
            return

        self._timer = asyncio.create_task(self._debounce(self._token, query.strip()))

    async def drain(self) -> None:
        """Wait for the pending timer and every in-flight request to settle."""
        if self._timer is not None:
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight))

    async def _debounce(self, token: int, query: str) -> None:
        await asyncio.sleep(self.delay)
        task = asyncio.create_task(self._run(token, query))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run(self, token: int, query: str) -> None:
        if token != self._token:
            return
        self.loading = True
        self.error = ""
        self._notify()

        result = await self._search(query)

        if token != self._token:
            return
        self.loading = False
        self.searched = True
        if result.ok:
            self.results = list(result.data.results) if result.data else []
        else:
            self.error = result.error or ""
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()
