"""
Watchlist movie request/response schemas.
"""
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from watchlist.db.models import GenreEnum


def _clean_title(value: str) -> str:
    title = " ".join(value.strip().split())
    if not title:
        raise ValueError("title cannot be empty")
    if len(title) > 150:
        raise ValueError("title cannot exceed 150 characters")
    return title


class MovieRecord(BaseModel):
    """
    A stored watchlist entry as the client sees it.

    Stored rows may lack any optional attribute; absence is an explicit None
    rather than a missing key.
    """

    id: str
    owner_id: str
    title: str
    genre: str | None = None
    description: str | None = None
    rating: int | None = None
    watched: bool | None = None
    watch_date: date | None = None
    image_url: str | None = None
    tmdb_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("id", "owner_id", mode="before")
    @classmethod
    def stringify_ids(cls, value: object) -> str:
        return str(value)


class CreateMovieRequest(BaseModel):
    """Payload for POST /movies."""

    title: str
    genre: GenreEnum = GenreEnum.OTHER
    description: str = Field(default="", max_length=500)
    rating: int = Field(..., ge=1, le=5)
    watched: bool = False
    watch_date: date | None = None
    tmdb_id: int | None = Field(default=None, ge=1)
    # External poster (e.g. TMDB) kept when no image_data is uploaded.
    image_url: str | None = Field(default=None, max_length=2048)
    # Base64 image body, optionally as a data: URI.
    image_data: str | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _clean_title(value)


# Columns that are NOT NULL; a PATCH may omit them but not send null.
_REQUIRED_ON_UPDATE = ("title", "genre", "description", "rating", "watched")


class UpdateMovieRequest(BaseModel):
    """Payload for PATCH /movies/{id}. Only fields that are sent are written."""

    title: str | None = None
    genre: GenreEnum | None = None
    description: str | None = Field(default=None, max_length=500)
    rating: int | None = Field(default=None, ge=1, le=5)
    watched: bool | None = None
    watch_date: date | None = None
    image_data: str | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _clean_title(value)

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "UpdateMovieRequest":
        nulled = sorted(
            name for name in _REQUIRED_ON_UPDATE
            if name in self.model_fields_set and getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self

    def patch_fields(self) -> dict:
        """Fields explicitly sent by the caller, image payload excluded."""
        fields = self.model_dump(exclude_unset=True, exclude={"image_data"})
        if isinstance(fields.get("genre"), GenreEnum):
            fields["genre"] = fields["genre"].value
        return fields


class MovieCreatedResponse(BaseModel):
    id: str


class MovieStatsResponse(BaseModel):
    """Counts shown on the profile screen."""

    total: int = 0
    watched: int = 0
