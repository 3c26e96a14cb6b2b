"""
Movies API — /movies
─────────────────────
Owner-scoped watchlist entries. Every route requires a bearer token.

Endpoints:
  GET    /movies             — All of my movies
  POST   /movies             — Add a movie (optional poster as base64)
  GET    /movies/stats       — Total / watched counts
  GET    /movies/{movie_id}  — Single movie
  PATCH  /movies/{movie_id}  — Update fields, optionally replace the poster
  DELETE /movies/{movie_id}  — Delete movie and its poster
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from watchlist.api.errors import error_envelope
from watchlist.db.models import User
from watchlist.db.session import get_db
from watchlist.deps.auth import get_current_user
from watchlist.schemas.movies import (
    CreateMovieRequest,
    MovieCreatedResponse,
    MovieRecord,
    MovieStatsResponse,
    UpdateMovieRequest,
)
from watchlist.services.movie_service import (
    MovieNotFoundError,
    MovieStoreError,
    count_by_owner,
    create_movie,
    delete_movie,
    get_movie,
    list_movies,
    update_movie,
)
from watchlist.services.normalizer import movie_record_from_row
from watchlist.services.storage_service import PosterStorage, PosterUploadError, get_storage

router = APIRouter()


def _not_found(exc: MovieNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error_envelope("MOVIE_NOT_FOUND", str(exc)),
    )


def _store_failed(exc: MovieStoreError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error_envelope("MOVIE_STORE_FAILED", str(exc)),
    )


# ── Routes ────────────────────────────────────────────────────────────────────


@router.get("", response_model=list[MovieRecord])
def list_my_movies(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[MovieRecord]:
    try:
        rows = list_movies(db, current_user.id)
    except MovieStoreError as exc:
        raise _store_failed(exc) from exc
    return [movie_record_from_row(row) for row in rows]


@router.post("", response_model=MovieCreatedResponse, status_code=status.HTTP_201_CREATED)
def add_movie(
    payload: CreateMovieRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: PosterStorage = Depends(get_storage),
) -> MovieCreatedResponse:
    """
    Add a movie. A poster that cannot be stored is dropped; the movie is
    still created.
    """
    try:
        row = create_movie(db, current_user.id, payload, storage)
    except MovieStoreError as exc:
        raise _store_failed(exc) from exc
    return MovieCreatedResponse(id=str(row.id))


@router.get("/stats", response_model=MovieStatsResponse)
def movie_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MovieStatsResponse:
    return count_by_owner(db, current_user.id)


@router.get("/{movie_id}", response_model=MovieRecord)
def get_my_movie(
    movie_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MovieRecord:
    try:
        row = get_movie(db, current_user.id, movie_id)
    except MovieNotFoundError as exc:
        raise _not_found(exc) from exc
    except MovieStoreError as exc:
        raise _store_failed(exc) from exc
    return movie_record_from_row(row)


@router.patch("/{movie_id}", response_model=MovieRecord)
def patch_movie(
    movie_id: UUID,
    payload: UpdateMovieRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: PosterStorage = Depends(get_storage),
) -> MovieRecord:
    """Update a movie. A poster upload failure aborts with 400 and writes nothing."""
    try:
        row = update_movie(db, current_user.id, movie_id, payload, storage)
    except MovieNotFoundError as exc:
        raise _not_found(exc) from exc
    except PosterUploadError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_envelope("IMAGE_UPLOAD_FAILED", str(exc)),
        ) from exc
    except MovieStoreError as exc:
        raise _store_failed(exc) from exc
    return movie_record_from_row(row)


@router.delete("/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_movie(
    movie_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: PosterStorage = Depends(get_storage),
) -> Response:
    try:
        delete_movie(db, current_user.id, movie_id, storage)
    except MovieNotFoundError as exc:
        raise _not_found(exc) from exc
    except MovieStoreError as exc:
        raise _store_failed(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
