import base64
import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock
from uuid import uuid4

from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from db_support import add_user, make_session
from watchlist.db.models import GenreEnum, Movie
from watchlist.schemas.movies import CreateMovieRequest, UpdateMovieRequest
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
from watchlist.services.storage_service import PosterStorage, PosterUploadError

MEDIA_URL = "http://testserver/media"
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-poster"
IMAGE_DATA = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()
BAD_IMAGE_DATA = "data:image/png;base64,@@not-base64@@"


def _create_payload(**overrides) -> CreateMovieRequest:
    base = {
        "title": "Inception",
        "genre": GenreEnum.SCI_FI,
        "description": "Dreams within dreams.",
        "rating": 5,
        "watched": True,
        "watch_date": date(2024, 5, 1),
    }
    base.update(overrides)
    return CreateMovieRequest(**base)


class MovieServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        self.owner = add_user(self.db)
        self.other = add_user(self.db, email="someone@example.com")
        self._tmp = tempfile.TemporaryDirectory()
        self.media_root = Path(self._tmp.name)
        self.storage = PosterStorage(root=self.media_root, base_url=MEDIA_URL)

    def tearDown(self) -> None:
        self.db.close()
        self._tmp.cleanup()

    def _file_for(self, url: str) -> Path:
        return self.media_root / url[len(MEDIA_URL) + 1:]


class TestCreateMovie(MovieServiceTestCase):
    def test_create_without_image(self) -> None:
        row = create_movie(self.db, self.owner.id, _create_payload(), self.storage)
        self.assertIsNotNone(row.id)
        self.assertEqual(row.owner_id, self.owner.id)
        self.assertEqual(row.genre, "Sci-Fi")
        self.assertIsNone(row.image_url)
        self.assertIsNotNone(row.created_at)

    def test_create_with_image_stores_poster(self) -> None:
        row = create_movie(self.db, self.owner.id, _create_payload(image_data=IMAGE_DATA), self.storage)
        self.assertTrue(row.image_url.startswith(f"{MEDIA_URL}/posters/"))
        self.assertEqual(self._file_for(row.image_url).read_bytes(), PNG_BYTES)

    def test_failed_upload_still_creates_movie_without_image(self) -> None:
        row = create_movie(
            self.db, self.owner.id, _create_payload(image_data=BAD_IMAGE_DATA), self.storage
        )
        stored = get_movie(self.db, self.owner.id, row.id)
        self.assertEqual(stored.title, "Inception")
        self.assertIsNone(stored.image_url)

    def test_external_poster_url_is_kept(self) -> None:
        row = create_movie(
            self.db,
            self.owner.id,
            _create_payload(image_url="https://image.tmdb.org/t/p/w780/p.jpg", tmdb_id=27205),
            self.storage,
        )
        self.assertEqual(row.image_url, "https://image.tmdb.org/t/p/w780/p.jpg")
        self.assertEqual(row.tmdb_id, 27205)


class TestReadMovies(MovieServiceTestCase):
    def test_list_is_owner_scoped(self) -> None:
        create_movie(self.db, self.owner.id, _create_payload(title="Mine"), self.storage)
        create_movie(self.db, self.other.id, _create_payload(title="Theirs"), self.storage)
        titles = [m.title for m in list_movies(self.db, self.owner.id)]
        self.assertEqual(titles, ["Mine"])

    def test_get_other_owners_movie_is_not_found(self) -> None:
        row = create_movie(self.db, self.other.id, _create_payload(), self.storage)
        with self.assertRaises(MovieNotFoundError) as ctx:
            get_movie(self.db, self.owner.id, row.id)
        self.assertEqual(str(ctx.exception), "Movie not found.")

    def test_get_unknown_id(self) -> None:
        with self.assertRaises(MovieNotFoundError):
            get_movie(self.db, self.owner.id, uuid4())

    def test_count_by_owner(self) -> None:
        create_movie(self.db, self.owner.id, _create_payload(watched=True), self.storage)
        create_movie(self.db, self.owner.id, _create_payload(watched=False), self.storage)
        create_movie(self.db, self.other.id, _create_payload(watched=True), self.storage)
        stats = count_by_owner(self.db, self.owner.id)
        self.assertEqual((stats.total, stats.watched), (2, 1))

    def test_count_by_owner_empty(self) -> None:
        stats = count_by_owner(self.db, uuid4())
        self.assertEqual((stats.total, stats.watched), (0, 0))

    def test_count_by_owner_never_raises(self) -> None:
        broken = MagicMock()
        broken.query.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        stats = count_by_owner(broken, self.owner.id)
        self.assertEqual((stats.total, stats.watched), (0, 0))


class TestUpdateMovie(MovieServiceTestCase):
    def test_patch_only_sent_fields(self) -> None:
        row = create_movie(self.db, self.owner.id, _create_payload(), self.storage)
        updated = update_movie(
            self.db, self.owner.id, row.id, UpdateMovieRequest(rating=2, watched=False), self.storage
        )
        self.assertEqual(updated.rating, 2)
        self.assertFalse(updated.watched)
        self.assertEqual(updated.title, "Inception")
        self.assertEqual(updated.description, "Dreams within dreams.")

    def test_new_image_replaces_and_deletes_old(self) -> None:
        row = create_movie(self.db, self.owner.id, _create_payload(image_data=IMAGE_DATA), self.storage)
        old_url = row.image_url
        old_file = self._file_for(old_url)
        self.assertTrue(old_file.exists())

        updated = update_movie(
            self.db,
            self.owner.id,
            row.id,
            UpdateMovieRequest(image_data=IMAGE_DATA),
            self.storage,
        )
        self.assertNotEqual(updated.image_url, old_url)
        self.assertTrue(self._file_for(updated.image_url).exists())
        self.assertFalse(old_file.exists())

    def test_failed_upload_aborts_and_leaves_row_unchanged(self) -> None:
        row = create_movie(self.db, self.owner.id, _create_payload(), self.storage)
        with self.assertRaises(PosterUploadError):
            update_movie(
                self.db,
                self.owner.id,
                row.id,
                UpdateMovieRequest(title="Renamed", rating=1, image_data=BAD_IMAGE_DATA),
                self.storage,
            )

        self.db.expire_all()
        stored = self.db.query(Movie).filter(Movie.id == row.id).one()
        self.assertEqual(stored.title, "Inception")
        self.assertEqual(stored.rating, 5)
        self.assertIsNone(stored.image_url)

    def test_null_for_required_field_is_rejected(self) -> None:
        for field in ("title", "genre", "description", "rating", "watched"):
            with self.subTest(field=field), self.assertRaises(ValidationError):
                UpdateMovieRequest.model_validate({field: None, "image_data": IMAGE_DATA})

    def test_null_watch_date_is_allowed(self) -> None:
        payload = UpdateMovieRequest.model_validate({"watch_date": None})
        self.assertEqual(payload.patch_fields(), {"watch_date": None})

    def test_failed_write_removes_new_poster(self) -> None:
        row = create_movie(self.db, self.owner.id, _create_payload(), self.storage)
        # Bypasses validation to force a NOT NULL violation at commit.
        payload = UpdateMovieRequest.model_construct(title=None, image_data=IMAGE_DATA)

        with self.assertRaises(MovieStoreError):
            update_movie(self.db, self.owner.id, row.id, payload, self.storage)

        self.assertEqual(list(self.media_root.rglob("*.jpg")), [])
        self.db.expire_all()
        stored = self.db.query(Movie).filter(Movie.id == row.id).one()
        self.assertEqual(stored.title, "Inception")
        self.assertIsNone(stored.image_url)

    def test_update_other_owners_movie_is_not_found(self) -> None:
        row = create_movie(self.db, self.other.id, _create_payload(), self.storage)
        with self.assertRaises(MovieNotFoundError):
            update_movie(self.db, self.owner.id, row.id, UpdateMovieRequest(rating=1), self.storage)


class TestDeleteMovie(MovieServiceTestCase):
    def test_delete_removes_row_and_poster(self) -> None:
        row = create_movie(self.db, self.owner.id, _create_payload(image_data=IMAGE_DATA), self.storage)
        poster = self._file_for(row.image_url)

        delete_movie(self.db, self.owner.id, row.id, self.storage)

        self.assertFalse(poster.exists())
        with self.assertRaises(MovieNotFoundError):
            get_movie(self.db, self.owner.id, row.id)

    def test_delete_tolerates_missing_poster_file(self) -> None:
        row = create_movie(self.db, self.owner.id, _create_payload(image_data=IMAGE_DATA), self.storage)
        self._file_for(row.image_url).unlink()
        delete_movie(self.db, self.owner.id, row.id, self.storage)
        self.assertEqual(list_movies(self.db, self.owner.id), [])
