"""
Record normalizer — pure mappings from TMDB payloads and stored rows into the
internal shapes. No I/O, no side effects.
"""
from collections.abc import Iterable, Mapping
from typing import Any

from watchlist.core.config import settings
from watchlist.db.models import GenreEnum, Movie
from watchlist.schemas.catalog import CatalogDetailEntry, CatalogEntry
from watchlist.schemas.movies import MovieRecord

# TMDB genre id -> internal genre label. Several TMDB genres fold into one label.
TMDB_GENRE_MAP: dict[int, str] = {
    28: GenreEnum.ACTION.value,
    12: GenreEnum.ACTION.value,       # Adventure
    16: GenreEnum.ANIMATION.value,
    35: GenreEnum.COMEDY.value,
    80: GenreEnum.DRAMA.value,        # Crime
    99: GenreEnum.DOCUMENTARY.value,
    18: GenreEnum.DRAMA.value,
    10751: GenreEnum.DRAMA.value,     # Family
    14: GenreEnum.DRAMA.value,        # Fantasy
    36: GenreEnum.DRAMA.value,        # History
    27: GenreEnum.HORROR.value,
    10402: GenreEnum.DRAMA.value,     # Music
    9648: GenreEnum.THRILLER.value,   # Mystery
    10749: GenreEnum.ROMANCE.value,
    878: GenreEnum.SCI_FI.value,
    10770: GenreEnum.DRAMA.value,     # TV Movie
    53: GenreEnum.THRILLER.value,
    10752: GenreEnum.ACTION.value,    # War
    37: GenreEnum.ACTION.value,       # Western
}


def map_tmdb_genre(genre_ids: Iterable[int] | None) -> str:
    """First id with a mapping wins; "Other" when none match or the list is empty."""
    for genre_id in genre_ids or ():
        label = TMDB_GENRE_MAP.get(genre_id)
        if label:
            return label
    return GenreEnum.OTHER.value


def poster_url(path: str | None, large: bool = False) -> str | None:
    """Prefix a TMDB image base onto a poster path (w780 when *large*)."""
    if not path:
        return None
    base = settings.TMDB_IMAGE_W780 if large else settings.TMDB_IMAGE_W342
    return f"{base}{path}"


def release_year(release_date: str | None) -> str:
    return release_date[:4] if release_date else ""


def catalog_entry_from_search(raw: Mapping[str, Any]) -> CatalogEntry:
    """Normalize one row of TMDB /search/movie results."""
    genre_ids = list(raw.get("genre_ids") or [])
    return CatalogEntry(
        tmdb_id=raw["id"],
        title=raw.get("title") or "",
        year=release_year(raw.get("release_date")),
        poster_path=raw.get("poster_path"),
        poster_url=poster_url(raw.get("poster_path")),
        overview=raw.get("overview"),
        tmdb_rating=raw.get("vote_average"),
        genre_ids=genre_ids,
        genre=map_tmdb_genre(genre_ids),
    )


def catalog_entry_from_detail(raw: Mapping[str, Any]) -> CatalogDetailEntry:
    """Normalize a TMDB /movie/{id} payload.

    Detail responses carry ``genres`` as ``[{"id", "name"}]`` rather than
    ``genre_ids``; the internal label is derived from those ids with the same
    first-match rule as search results.
    """
    genres = raw.get("genres") or []
    genre_ids = [g["id"] for g in genres if g.get("id") is not None]
    return CatalogDetailEntry(
        tmdb_id=raw["id"],
        title=raw.get("title") or "",
        year=release_year(raw.get("release_date")),
        poster_path=raw.get("poster_path"),
        poster_url=poster_url(raw.get("poster_path"), large=True),
        overview=raw.get("overview"),
        tmdb_rating=raw.get("vote_average"),
        genre_ids=genre_ids,
        genre=map_tmdb_genre(genre_ids),
        runtime=raw.get("runtime"),
        genres=[g["name"] for g in genres if g.get("name")],
    )


def movie_record_from_document(doc_id: Any, fields: Mapping[str, Any]) -> MovieRecord:
    """Spread the store-assigned id onto the raw stored fields."""
    return MovieRecord.model_validate({**fields, "id": doc_id})


def movie_record_from_row(row: Movie) -> MovieRecord:
    return MovieRecord.model_validate(row)
