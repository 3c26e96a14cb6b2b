"""
Watchlist movie business logic — owner-scoped CRUD plus poster handling.

All DB writes go through this layer (not directly in routes). Every query is
filtered on owner_id; a movie owned by someone else is reported as missing.
"""
from uuid import UUID

from loguru import logger
from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from watchlist.db.models import Movie
from watchlist.schemas.movies import CreateMovieRequest, MovieStatsResponse, UpdateMovieRequest
from watchlist.services.storage_service import PosterStorage, PosterUploadError, poster_path

LOAD_FAILED_MESSAGE = "Failed to load movies. Please try again."
DETAIL_FAILED_MESSAGE = "Failed to load movie details."
ADD_FAILED_MESSAGE = "Failed to add movie. Please try again."
UPDATE_FAILED_MESSAGE = "Failed to update movie. Please try again."
DELETE_FAILED_MESSAGE = "Failed to delete movie. Please try again."
NOT_FOUND_MESSAGE = "Movie not found."


# ── Custom exceptions ────────────────────────────────────────────────────────


class MovieNotFoundError(Exception):
    """Raised when a movie does not exist for the requesting owner."""


class MovieStoreError(Exception):
    """Raised when a store operation fails; the message is user-facing."""


# ── Reads ─────────────────────────────────────────────────────────────────────


def list_movies(db: Session, owner_id: UUID) -> list[Movie]:
    """All movies for *owner_id*, newest first."""
    try:
        return (
            db.query(Movie)
            .filter(Movie.owner_id == owner_id)
            .order_by(Movie.created_at.desc(), Movie.id.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception(f"[Movies] list failed for owner {owner_id}")
        raise MovieStoreError(LOAD_FAILED_MESSAGE) from exc


def get_movie(db: Session, owner_id: UUID, movie_id: UUID) -> Movie:
    try:
        row = (
            db.query(Movie)
            .filter(Movie.id == movie_id, Movie.owner_id == owner_id)
            .first()
        )
    except SQLAlchemyError as exc:
        logger.exception(f"[Movies] get failed for {movie_id}")
        raise MovieStoreError(DETAIL_FAILED_MESSAGE) from exc
    if row is None:
        raise MovieNotFoundError(NOT_FOUND_MESSAGE)
    return row


def count_by_owner(db: Session, owner_id: UUID) -> MovieStatsResponse:
    """
    Total and watched counts for the profile screen.

    Never raises: a failing query is logged and reported as zeros.
    """
    try:
        total, watched = (
            db.query(
                func.count(Movie.id),
                func.coalesce(func.sum(case((Movie.watched.is_(True), 1), else_=0)), 0),
            )
            .filter(Movie.owner_id == owner_id)
            .one()
        )
    except SQLAlchemyError:
        logger.exception(f"[Movies] stats failed for owner {owner_id}")
        return MovieStatsResponse(total=0, watched=0)
    return MovieStatsResponse(total=int(total or 0), watched=int(watched or 0))


# ── Writes ────────────────────────────────────────────────────────────────────


def create_movie(
    db: Session,
    owner_id: UUID,
    payload: CreateMovieRequest,
    storage: PosterStorage,
) -> Movie:
    """
    Insert a movie for *owner_id*.

    A poster that fails to upload does not block the insert: the movie is
    saved without image_url and the failure is only logged.
    """
    image_url = payload.image_url
    if payload.image_data:
        try:
            image_url = storage.upload(payload.image_data, poster_path(owner_id))
        except PosterUploadError:
            logger.warning("[Movies] image upload failed, saving movie without poster")

    row = Movie(
        owner_id=owner_id,
        title=payload.title,
        genre=payload.genre.value,
        description=payload.description,
        rating=payload.rating,
        watched=payload.watched,
        watch_date=payload.watch_date,
        tmdb_id=payload.tmdb_id,
        image_url=image_url,
    )
    db.add(row)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("[Movies] insert failed")
        storage.delete(image_url)
        raise MovieStoreError(ADD_FAILED_MESSAGE) from exc

    db.refresh(row)
    return row


def update_movie(
    db: Session,
    owner_id: UUID,
    movie_id: UUID,
    payload: UpdateMovieRequest,
    storage: PosterStorage,
) -> Movie:
    """
    Patch a movie, replacing its poster when *image_data* is sent.

    Order: upload new poster, delete old poster, write the patch. An upload
    failure raises PosterUploadError before the row is touched. A failed
    write removes the newly uploaded poster.
    """
    row = get_movie(db, owner_id, movie_id)
    patch = payload.patch_fields()
    new_url = None

    if payload.image_data:
        new_url = storage.upload(payload.image_data, poster_path(movie_id))
        if row.image_url:
            storage.delete(row.image_url)
        patch["image_url"] = new_url

    for field, value in patch.items():
        setattr(row, field, value)

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(f"[Movies] update failed for {movie_id}")
        storage.delete(new_url)
        raise MovieStoreError(UPDATE_FAILED_MESSAGE) from exc

    db.refresh(row)
    return row


def delete_movie(
    db: Session,
    owner_id: UUID,
    movie_id: UUID,
    storage: PosterStorage,
) -> None:
    """Remove a movie, then its poster (best-effort)."""
    row = get_movie(db, owner_id, movie_id)
    image_url = row.image_url
    try:
        db.delete(row)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(f"[Movies] delete failed for {movie_id}")
        raise MovieStoreError(DELETE_FAILED_MESSAGE) from exc

    storage.delete(image_url)
