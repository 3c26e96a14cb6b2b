"""
Catalog (TMDB) schemas.
"""
from pydantic import BaseModel, Field


class CatalogEntry(BaseModel):
    """A TMDB search hit, reshaped for pre-filling a new watchlist entry."""

    tmdb_id: int
    title: str
    year: str = ""
    poster_path: str | None = None
    poster_url: str | None = None
    overview: str | None = None
    tmdb_rating: float | None = None
    genre_ids: list[int] = Field(default_factory=list)
    genre: str = "Other"


class CatalogDetailEntry(CatalogEntry):
    """A TMDB detail payload. *genres* is for display only."""

    runtime: int | None = None
    genres: list[str] = Field(default_factory=list)


class CatalogSearchResponse(BaseModel):
    """Response envelope for /catalog/search."""

    results: list[CatalogEntry]
    page: int = 1
    total_pages: int = 0
