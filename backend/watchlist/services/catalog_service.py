"""
Catalog Service
───────────────
Wraps the TMDB v3 REST API (search + details) with a v4 read-access token.

Flow:
  1. The client types into the browse search box (debounced client-side).
  2. /catalog/search proxies the query here; results are normalized into
     CatalogEntry rows used to pre-fill a new watchlist entry.
  3. Tapping a result fetches /catalog/{tmdb_id} for runtime + genre names.
"""
import httpx
from loguru import logger

from watchlist.core.config import settings
from watchlist.schemas.catalog import CatalogDetailEntry, CatalogSearchResponse
from watchlist.services.normalizer import catalog_entry_from_detail, catalog_entry_from_search

TMDB_TIMEOUT_SECONDS = 10.0

SEARCH_FAILED_MESSAGE = "Failed to search movies. Check your connection."
DETAILS_FAILED_MESSAGE = "Failed to load movie details."


class CatalogConfigError(Exception):
    """Raised when the catalog client is used without a read token."""


class CatalogUpstreamError(Exception):
    """Raised for TMDB non-2xx responses and transport failures."""


class CatalogNotFoundError(Exception):
    """Raised when TMDB has no movie with the requested id."""


class CatalogService:
    """
    Thin async wrapper around TMDB.

    *transport* lets tests plug an ``httpx.MockTransport`` in place of the
    network.
    """

    def __init__(
        self,
        read_token: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.read_token = read_token or settings.TMDB_READ_TOKEN
        if not self.read_token:
            raise CatalogConfigError(
                "TMDB_READ_TOKEN is not set. "
                "Add it to your .env file or pass it explicitly."
            )
        self.base_url = (base_url or settings.TMDB_BASE_URL).rstrip("/")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=TMDB_TIMEOUT_SECONDS,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.read_token}",
                "Content-Type": "application/json",
            },
        )

    async def search(self, query: str, page: int = 1) -> CatalogSearchResponse:
        """Search TMDB for movies whose title matches *query*."""
        cleaned_query = query.strip()
        if not cleaned_query:
            return CatalogSearchResponse(results=[], page=page, total_pages=0)

        params = {"query": cleaned_query, "page": page, "language": "en-US"}
        try:
            async with self._client() as client:
                response = await client.get("/search/movie", params=params)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(f"[Catalog] search failed with status {exc.response.status_code}")
            raise CatalogUpstreamError(SEARCH_FAILED_MESSAGE) from exc
        except httpx.RequestError as exc:
            logger.warning(f"[Catalog] search request failed: {exc!r}")
            raise CatalogUpstreamError(SEARCH_FAILED_MESSAGE) from exc

        payload = response.json()
        results = [
            catalog_entry_from_search(raw)
            for raw in payload.get("results", [])
            if raw.get("id") and raw.get("title")
        ]
        return CatalogSearchResponse(
            results=results,
            page=payload.get("page", page),
            total_pages=payload.get("total_pages", 0),
        )

    async def get_details(self, tmdb_id: int) -> CatalogDetailEntry:
        """Fetch details for one movie; raises CatalogNotFoundError on 404."""
        try:
            async with self._client() as client:
                response = await client.get(f"/movie/{tmdb_id}", params={"language": "en-US"})
                if response.status_code == 404:
                    raise CatalogNotFoundError(f"TMDB movie {tmdb_id} not found")
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(f"[Catalog] details failed with status {exc.response.status_code}")
            raise CatalogUpstreamError(DETAILS_FAILED_MESSAGE) from exc
        except httpx.RequestError as exc:
            logger.warning(f"[Catalog] details request failed: {exc!r}")
            raise CatalogUpstreamError(DETAILS_FAILED_MESSAGE) from exc

        return catalog_entry_from_detail(response.json())
