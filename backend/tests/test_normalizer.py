import unittest
from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

from watchlist.services.normalizer import (
    catalog_entry_from_detail,
    catalog_entry_from_search,
    map_tmdb_genre,
    movie_record_from_document,
    movie_record_from_row,
    poster_url,
)


def _search_row(**overrides) -> dict:
    base = {
        "id": 438631,
        "title": "Dune",
        "release_date": "2021-09-15",
        "poster_path": "/d5NXSklXo0qyIYkgV94XAgMIckC.jpg",
        "overview": "Paul Atreides...",
        "vote_average": 7.8,
        "genre_ids": [878, 12],
    }
    base.update(overrides)
    return base


class TestGenreMapping(unittest.TestCase):
    def test_first_mapped_id_wins(self) -> None:
        self.assertEqual(map_tmdb_genre([10749, 878]), "Romance")
        self.assertEqual(map_tmdb_genre([878, 10749]), "Sci-Fi")

    def test_unmapped_ids_are_skipped(self) -> None:
        self.assertEqual(map_tmdb_genre([424242, 27]), "Horror")

    def test_defaults_to_other(self) -> None:
        self.assertEqual(map_tmdb_genre([]), "Other")
        self.assertEqual(map_tmdb_genre(None), "Other")
        self.assertEqual(map_tmdb_genre([424242]), "Other")

    def test_folded_genres(self) -> None:
        self.assertEqual(map_tmdb_genre([80]), "Drama")
        self.assertEqual(map_tmdb_genre([9648]), "Thriller")
        self.assertEqual(map_tmdb_genre([37]), "Action")


class TestCatalogEntries(unittest.TestCase):
    def test_search_row(self) -> None:
        entry = catalog_entry_from_search(_search_row())
        self.assertEqual(entry.tmdb_id, 438631)
        self.assertEqual(entry.year, "2021")
        self.assertEqual(entry.genre, "Sci-Fi")
        self.assertEqual(entry.tmdb_rating, 7.8)
        self.assertEqual(
            entry.poster_url,
            "https://image.tmdb.org/t/p/w342/d5NXSklXo0qyIYkgV94XAgMIckC.jpg",
        )

    def test_search_row_without_date_or_poster(self) -> None:
        entry = catalog_entry_from_search(
            _search_row(release_date="", poster_path=None, genre_ids=[])
        )
        self.assertEqual(entry.year, "")
        self.assertIsNone(entry.poster_url)
        self.assertEqual(entry.genre, "Other")

    def test_detail_payload(self) -> None:
        entry = catalog_entry_from_detail({
            "id": 438631,
            "title": "Dune",
            "release_date": "2021-09-15",
            "poster_path": "/p.jpg",
            "overview": "Paul Atreides...",
            "vote_average": 7.8,
            "runtime": 155,
            "genres": [{"id": 878, "name": "Science Fiction"}, {"id": 12, "name": "Adventure"}],
        })
        self.assertEqual(entry.runtime, 155)
        self.assertEqual(entry.genres, ["Science Fiction", "Adventure"])
        self.assertEqual(entry.genre, "Sci-Fi")
        self.assertEqual(entry.poster_url, "https://image.tmdb.org/t/p/w780/p.jpg")

    def test_search_and_detail_agree_on_genre(self) -> None:
        for ids in ([878, 12], [12, 878], [424242, 53], [], [10770]):
            search = catalog_entry_from_search(_search_row(genre_ids=ids))
            detail = catalog_entry_from_detail({
                "id": 438631,
                "title": "Dune",
                "genres": [{"id": gid, "name": str(gid)} for gid in ids],
            })
            self.assertEqual(search.genre, detail.genre, ids)

    def test_poster_url_sizes(self) -> None:
        self.assertIsNone(poster_url(None))
        self.assertTrue(poster_url("/x.jpg").endswith("/w342/x.jpg"))
        self.assertTrue(poster_url("/x.jpg", large=True).endswith("/w780/x.jpg"))


class TestMovieRecords(unittest.TestCase):
    def test_document_spreads_id_without_transforming_values(self) -> None:
        record = movie_record_from_document(
            "doc-1",
            {"owner_id": "owner-1", "title": "  Heat ", "rating": 4, "watched": True},
        )
        self.assertEqual(record.id, "doc-1")
        self.assertEqual(record.title, "  Heat ")
        self.assertEqual(record.rating, 4)
        self.assertIsNone(record.genre)
        self.assertIsNone(record.image_url)

    def test_row_ids_become_strings(self) -> None:
        movie_id, owner_id = uuid4(), uuid4()
        row = SimpleNamespace(
            id=movie_id,
            owner_id=owner_id,
            title="Heat",
            genre="Action",
            description="",
            rating=5,
            watched=False,
            watch_date=None,
            image_url=None,
            tmdb_id=None,
            created_at=datetime.now(timezone.utc),
            updated_at=datetime.now(timezone.utc),
        )
        record = movie_record_from_row(row)
        self.assertEqual(record.id, str(movie_id))
        self.assertEqual(record.owner_id, str(owner_id))
