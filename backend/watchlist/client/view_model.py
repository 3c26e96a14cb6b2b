"""
Watchlist view model — holds the authoritative movie set for one owner and
derives the filtered/sorted projection the list screen renders.

Parameter changes never hit the network; only load / silent_refresh do.
"""
import locale
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict

from watchlist.client.result import Result
from watchlist.schemas.movies import MovieRecord

ALL = "all"

StatusFilter = Literal["all", "watched", "unwatched"]
SortKey = Literal["newest", "oldest", "top-rated", "alphabetical"]

FetchMovies = Callable[[str], Awaitable[Result[list[MovieRecord]]]]

_collation_configured = False


def use_system_collation() -> None:
    """Adopt the user's LC_COLLATE once so title sorting follows their locale."""
    global _collation_configured
    if _collation_configured:
        return
    _collation_configured = True
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        logger.warning("[Client] system locale unavailable, titles sort by code point")


class ViewParameters(BaseModel):
    """User-chosen list criteria. Fresh defaults on every new view model."""

    search: str = ""
    status: StatusFilter = "all"
    genre: str | None = ALL
    sort: SortKey = "newest"

    model_config = ConfigDict(frozen=True, extra="forbid")

    def merge(self, **partial: Any) -> "ViewParameters":
        return ViewParameters.model_validate({**self.model_dump(), **partial})


# ── Derivation ────────────────────────────────────────────────────────────────


def _created_key(movie: MovieRecord) -> float:
    # Missing timestamps count as 0: last for newest, first for oldest.
    return movie.created_at.timestamp() if movie.created_at else 0.0


def _rating_key(movie: MovieRecord) -> int:
    return movie.rating or 0


def _title_key(movie: MovieRecord) -> tuple[str, str]:
    title = movie.title or ""
    return locale.strxfrm(title.casefold()), locale.strxfrm(title)


_SORTS: dict[str, tuple[Callable[[MovieRecord], Any], bool]] = {
    "newest": (_created_key, True),
    "oldest": (_created_key, False),
    "top-rated": (_rating_key, True),
    "alphabetical": (_title_key, False),
}


def project(records: Iterable[MovieRecord], params: ViewParameters) -> list[MovieRecord]:
    """
    Filter then sort *records* under *params*.

    Status, then genre (exact match), then case-insensitive title substring;
    the sort is stable, so equal keys keep their filtered order. *records* is
    not mutated.
    """
    movies = list(records)

    if params.status == "watched":
        movies = [m for m in movies if m.watched is True]
    elif params.status == "unwatched":
        movies = [m for m in movies if m.watched is not True]

    if params.genre and params.genre != ALL:
        movies = [m for m in movies if m.genre == params.genre]

    needle = params.search.strip().lower()
    if needle:
        movies = [m for m in movies if needle in (m.title or "").lower()]

    key, descending = _SORTS[params.sort]
    return sorted(movies, key=key, reverse=descending)


def genre_options(records: Iterable[MovieRecord]) -> list[str]:
    """The "all" sentinel followed by the distinct genres present, sorted."""
    return [ALL, *sorted({m.genre for m in records if m.genre})]


# ── State container ───────────────────────────────────────────────────────────


class WatchlistViewModel:
    """
    Screen-scoped state: authoritative set, view parameters, loading/error.

    Each fetch is numbered. A response is applied only if it is newer than
    the last one applied, so a slow load cannot overwrite a fresher silent
    refresh (or the reverse).
    """

    def __init__(
        self,
        fetch_movies: FetchMovies,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        use_system_collation()
        self._fetch_movies = fetch_movies
        self._on_change = on_change
        self._records: tuple[MovieRecord, ...] = ()
        self._params = ViewParameters()
        self._projection: list[MovieRecord] = []
        self._owner_id: str | None = None
        self._issued = 0
        self._applied = 0
        self._latest_load = 0
        self.loading = False
        self.error: str | None = None

    # ── Read side ─────────────────────────────────────────────────────────────

    @property
    def movies(self) -> tuple[MovieRecord, ...]:
        return self._records

    @property
    def params(self) -> ViewParameters:
        return self._params

    @property
    def projection(self) -> list[MovieRecord]:
        return list(self._projection)

    @property
    def genre_options(self) -> list[str]:
        return genre_options(self._records)

    # ── Commands ──────────────────────────────────────────────────────────────

    def set_view_parameters(self, **partial: Any) -> None:
        self._params = self._params.merge(**partial)
        self._recompute()
        self._notify()

    async def load(self, owner_id: str | None) -> None:
        """Foreground fetch: toggles *loading* and surfaces errors."""
        if not owner_id:
            return
        self._owner_id = owner_id
        seq = self._next_seq()
        self._latest_load = seq
        self.loading = True
        self.error = None
        self._notify()

        result = await self._fetch_movies(owner_id)

        if seq == self._latest_load:
            self.loading = False
        if seq > self._applied:
            if result.ok:
                self._apply(seq, result.data or [])
            else:
                self.error = result.error
        self._notify()

    async def silent_refresh(self, owner_id: str | None) -> None:
        """Background fetch: no loading flag, failures keep the current set."""
        if not owner_id:
            return
        seq = self._next_seq()
        result = await self._fetch_movies(owner_id)
        if result.ok and seq > self._applied:
            self._apply(seq, result.data or [])
            self._notify()

    async def refresh(self) -> None:
        """Retry the last foreground load."""
        await self.load(self._owner_id)

    # ── Internals ─────────────────────────────────────────────────────────────

    def _next_seq(self) -> int:
        self._issued += 1
        return self._issued

    def _apply(self, seq: int, movies: Iterable[MovieRecord]) -> None:
        self._applied = seq
        self._records = tuple(movies)
        self._recompute()

    def _recompute(self) -> None:
        self._projection = project(self._records, self._params)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()
