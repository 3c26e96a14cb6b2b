"""
Async HTTP client for the Watchlist API.

Every public method returns a Result; transport exceptions and error
envelopes are turned into user-facing messages here so nothing raw reaches
the view models.
"""
import base64
import mimetypes
from pathlib import Path
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from watchlist.client.result import Result
from watchlist.core.config import settings
from watchlist.schemas.auth import (
    AUTH_ERROR_MESSAGES,
    AuthErrorKind,
    SessionResponse,
    UserResponse,
    auth_error_message,
)
from watchlist.schemas.catalog import CatalogDetailEntry, CatalogSearchResponse
from watchlist.schemas.movies import (
    CreateMovieRequest,
    MovieCreatedResponse,
    MovieRecord,
    MovieStatsResponse,
    UpdateMovieRequest,
)
from watchlist.services.catalog_service import DETAILS_FAILED_MESSAGE, SEARCH_FAILED_MESSAGE
from watchlist.services.movie_service import (
    ADD_FAILED_MESSAGE,
    DELETE_FAILED_MESSAGE,
    DETAIL_FAILED_MESSAGE,
    LOAD_FAILED_MESSAGE,
    NOT_FOUND_MESSAGE,
    UPDATE_FAILED_MESSAGE,
)

CLIENT_TIMEOUT_SECONDS = 10.0
LOGOUT_FAILED_MESSAGE = "Failed to sign out. Please try again."


def image_data_from_file(path: str | Path) -> str:
    """Read a local image into a ``data:`` URI accepted by the movie endpoints."""
    path = Path(path)
    mime = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def _error_detail(response: httpx.Response) -> dict:
    """The ``{"code", "message"}`` part of an error envelope, or {}."""
    try:
        body = response.json()
    except ValueError:
        return {}
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, dict) and isinstance(detail.get("error"), dict):
        return detail["error"]
    return {}


def _error_code(response: httpx.Response) -> str | None:
    return _error_detail(response).get("code")


def _error_message(response: httpx.Response) -> str | None:
    return _error_detail(response).get("message")


class WatchlistClient:
    """
    Session-aware API client.

    The bearer token from register/login is kept on the instance and sent
    with every subsequent call. *transport* is for tests.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = CLIENT_TIMEOUT_SECONDS,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            transport=transport,
            timeout=timeout,
        )
        self.token = token
        self.user: UserResponse | None = None

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "WatchlistClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ── Plumbing ──────────────────────────────────────────────────────────────

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return await self._http.request(method, path, headers=headers, **kwargs)

    async def _call(
        self,
        method: str,
        path: str,
        failure_message: str,
        **kwargs: Any,
    ) -> Result[httpx.Response]:
        """Send a request; any transport error or non-2xx collapses to *failure_message*."""
        try:
            response = await self._send(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning(f"[Client] {method} {path} failed: {exc!r}")
            return Result.failure(failure_message)
        if response.is_error:
            logger.warning(f"[Client] {method} {path} returned {response.status_code}")
            return Result.failure(failure_message)
        return Result.success(response)

    # ── Auth ──────────────────────────────────────────────────────────────────

    async def _authenticate(self, path: str, email: str, password: str) -> Result[SessionResponse]:
        try:
            response = await self._send("POST", path, json={"email": email, "password": password})
        except httpx.HTTPError as exc:
            logger.warning(f"[Client] {path} failed: {exc!r}")
            return Result.failure(AUTH_ERROR_MESSAGES[AuthErrorKind.NETWORK_FAILURE])
        if response.is_error:
            return Result.failure(auth_error_message(_error_code(response)))

        session = SessionResponse.model_validate(response.json())
        self.token = session.access_token
        self.user = session.user
        return Result.success(session)

    async def register(self, email: str, password: str) -> Result[SessionResponse]:
        return await self._authenticate("/auth/register", email, password)

    async def login(self, email: str, password: str) -> Result[SessionResponse]:
        return await self._authenticate("/auth/login", email, password)

    async def logout(self) -> Result[None]:
        """Drop the local session. The server call is informational only."""
        result = await self._call("POST", "/auth/logout", LOGOUT_FAILED_MESSAGE)
        self.token = None
        self.user = None
        if not result.ok:
            return Result.failure(result.error)
        return Result.success(None)

    async def me(self) -> Result[UserResponse]:
        result = await self._call("GET", "/auth/me", auth_error_message(None))
        if not result.ok:
            return Result.failure(result.error)
        self.user = UserResponse.model_validate(result.data.json())
        return Result.success(self.user)

    # ── Movies ────────────────────────────────────────────────────────────────

    async def list_movies(self, owner_id: str) -> Result[list[MovieRecord]]:
        """
        Fetch every movie of *owner_id*.

        The server scopes by the bearer token, so *owner_id* must be the
        signed-in user.
        """
        if self.user is not None and str(self.user.id) != str(owner_id):
            logger.warning(f"[Client] refusing to list movies of another owner {owner_id}")
            return Result.failure(LOAD_FAILED_MESSAGE)

        result = await self._call("GET", "/movies", LOAD_FAILED_MESSAGE)
        if not result.ok:
            return Result.failure(result.error)
        try:
            movies = [MovieRecord.model_validate(raw) for raw in result.data.json()]
        except (ValueError, ValidationError):
            logger.exception("[Client] malformed movie list")
            return Result.failure(LOAD_FAILED_MESSAGE)
        return Result.success(movies)

    async def get_movie(self, movie_id: str) -> Result[MovieRecord]:
        try:
            response = await self._send("GET", f"/movies/{movie_id}")
        except httpx.HTTPError as exc:
            logger.warning(f"[Client] get movie failed: {exc!r}")
            return Result.failure(DETAIL_FAILED_MESSAGE)
        if response.status_code == 404:
            return Result.failure(NOT_FOUND_MESSAGE)
        if response.is_error:
            return Result.failure(DETAIL_FAILED_MESSAGE)
        return Result.success(MovieRecord.model_validate(response.json()))

    async def add_movie(self, payload: CreateMovieRequest) -> Result[str]:
        """Create a movie; returns the new id."""
        result = await self._call(
            "POST",
            "/movies",
            ADD_FAILED_MESSAGE,
            json=payload.model_dump(mode="json", exclude_none=True),
        )
        if not result.ok:
            return Result.failure(result.error)
        return Result.success(MovieCreatedResponse.model_validate(result.data.json()).id)

    async def update_movie(self, movie_id: str, payload: UpdateMovieRequest) -> Result[MovieRecord]:
        try:
            response = await self._send(
                "PATCH",
                f"/movies/{movie_id}",
                json=payload.model_dump(mode="json", exclude_unset=True),
            )
        except httpx.HTTPError as exc:
            logger.warning(f"[Client] update movie failed: {exc!r}")
            return Result.failure(UPDATE_FAILED_MESSAGE)
        if response.status_code == 400 and _error_code(response) == "IMAGE_UPLOAD_FAILED":
            return Result.failure(_error_message(response) or UPDATE_FAILED_MESSAGE)
        if response.status_code == 404:
            return Result.failure(NOT_FOUND_MESSAGE)
        if response.is_error:
            return Result.failure(UPDATE_FAILED_MESSAGE)
        return Result.success(MovieRecord.model_validate(response.json()))

    async def delete_movie(self, movie_id: str) -> Result[None]:
        result = await self._call("DELETE", f"/movies/{movie_id}", DELETE_FAILED_MESSAGE)
        if not result.ok:
            return Result.failure(result.error)
        return Result.success(None)

    async def movie_stats(self) -> MovieStatsResponse:
        """Never fails: any error reads as zero counts."""
        result = await self._call("GET", "/movies/stats", LOAD_FAILED_MESSAGE)
        if not result.ok:
            return MovieStatsResponse()
        try:
            return MovieStatsResponse.model_validate(result.data.json())
        except (ValueError, ValidationError):
            return MovieStatsResponse()

    # ── Catalog ───────────────────────────────────────────────────────────────

    async def search_catalog(self, query: str, page: int = 1) -> Result[CatalogSearchResponse]:
        result = await self._call(
            "GET",
            "/catalog/search",
            SEARCH_FAILED_MESSAGE,
            params={"q": query, "page": page},
        )
        if not result.ok:
            return Result.failure(result.error)
        return Result.success(CatalogSearchResponse.model_validate(result.data.json()))

    async def catalog_details(self, tmdb_id: int) -> Result[CatalogDetailEntry]:
        result = await self._call("GET", f"/catalog/{tmdb_id}", DETAILS_FAILED_MESSAGE)
        if not result.ok:
            return Result.failure(result.error)
        return Result.success(CatalogDetailEntry.model_validate(result.data.json()))
