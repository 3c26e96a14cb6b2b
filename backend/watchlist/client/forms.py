"""
Form schemas for the login, register and movie-edit screens.

Each field failure carries the message shown under the input;
*validate_form* collects them per field.
"""
import re
from datetime import date

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from watchlist.db.models import GENRE_LABELS, GenreEnum
from watchlist.schemas.catalog import CatalogEntry
from watchlist.schemas.movies import CreateMovieRequest, UpdateMovieRequest

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class _Form(BaseModel):
    # Empty inputs arrive as defaults and must still hit the validators.
    model_config = ConfigDict(validate_default=True)


def _check_email(value: str) -> str:
    if not value:
        raise ValueError("Email is required")
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Please enter a valid email address")
    return value


class LoginForm(_Form):
    email: str = ""
    password: str = ""

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return _check_email(v.strip())

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class RegisterForm(_Form):
    email: str = ""
    password: str = ""
    confirm_password: str = ""

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return _check_email(v.strip())

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        if len(v) > 72:
            raise ValueError("Password must be 72 characters or fewer")
        return v

    @field_validator("confirm_password")
    @classmethod
    def validate_confirm(cls, v: str) -> str:
        if not v:
            raise ValueError("Please confirm your password")
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterForm":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class MovieForm(_Form):
    title: str = ""
    genre: str = ""
    description: str = ""
    rating: int = 0
    watched: bool = False
    watch_date: str = ""

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v:
            raise ValueError("Title is required")
        if len(v) < 2:
            raise ValueError("Title must be at least 2 characters")
        if len(v) > 150:
            raise ValueError("Title must be 150 characters or fewer")
        return v

    @field_validator("genre")
    @classmethod
    def validate_genre(cls, v: str) -> str:
        if not v or v not in GENRE_LABELS:
            raise ValueError("Please select a genre")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        if not v:
            raise ValueError("Description is required")
        if len(v) > 500:
            raise ValueError("Description must be 500 characters or fewer")
        return v

    @field_validator("rating")
    @classmethod
    def validate_rating(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Please give a rating")
        if v > 5:
            raise ValueError("Rating cannot exceed 5")
        return v

    @field_validator("watch_date")
    @classmethod
    def validate_watch_date(cls, v: str) -> str:
        if not v:
            raise ValueError("Watch date is required")
        if not _DATE_RE.match(v):
            raise ValueError("Date must be in YYYY-MM-DD format")
        try:
            date.fromisoformat(v)
        except ValueError:
            raise ValueError("Date must be in YYYY-MM-DD format")
        return v

    def to_create_request(
        self,
        image_data: str | None = None,
        tmdb_id: int | None = None,
    ) -> CreateMovieRequest:
        return CreateMovieRequest(
            title=self.title,
            genre=GenreEnum(self.genre),
            description=self.description,
            rating=self.rating,
            watched=self.watched,
            watch_date=date.fromisoformat(self.watch_date),
            tmdb_id=tmdb_id,
            image_data=image_data,
        )

    def to_update_request(self, image_data: str | None = None) -> UpdateMovieRequest:
        """Every form field is written; the poster only when a new image was picked."""
        fields = self.to_create_request().model_dump(
            include={"title", "genre", "description", "rating", "watched", "watch_date"},
        )
        if image_data:
            fields["image_data"] = image_data
        return UpdateMovieRequest(**fields)


def create_request_from_catalog(
    entry: CatalogEntry,
    rating: int,
    watched: bool = False,
    watch_date: date | None = None,
    poster_url: str | None = None,
) -> CreateMovieRequest:
    """
    Pre-fill a new watchlist entry from a catalog result.

    The overview becomes the description (clipped to 500 characters) and
    the watch date defaults to today.
    """
    return CreateMovieRequest(
        title=entry.title,
        genre=GenreEnum(entry.genre),
        description=(entry.overview or "")[:500],
        rating=rating,
        watched=watched,
        watch_date=watch_date or date.today(),
        tmdb_id=entry.tmdb_id,
        image_url=poster_url or entry.poster_url,
    )


def validate_form(form_cls: type[BaseModel], data: dict) -> tuple[BaseModel | None, dict[str, str]]:
    """
    Validate *data* against *form_cls*.

    Returns ``(form, {})`` on success or ``(None, {field: message})`` with
    the first message per field. Whole-form failures from RegisterForm are
    reported on ``confirm_password``.
    """
    try:
        return form_cls.model_validate(data), {}
    except ValidationError as exc:
        errors: dict[str, str] = {}
        for err in exc.errors():
            field = str(err["loc"][0]) if err["loc"] else "confirm_password"
            ctx_error = err.get("ctx", {}).get("error")
            message = str(ctx_error) if ctx_error is not None else err["msg"]
            errors.setdefault(field, message)
        return None, errors
