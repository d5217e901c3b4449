import json

import pytest

from src.catalog.service import CatalogService
from src.db.database import BookRepository, DatabaseManager


DUNE_DOC = {
    "key": "/works/OL893415W",
    "title": "Dune",
    "subtitle": "The Desert Planet",
    "author_name": ["Frank Herbert"],
    "subject": ["Science fiction", "Arrakis (Imaginary place)", "Deserts"],
    "isbn": ["9780441013593", "0441013597"],
    "publisher": ["Ace Books", "Chilton Books"],
    "language": ["eng", "spa"],
    "first_publish_year": 1965,
    "number_of_pages_median": 612,
    "format": ["Paperback"],
    "cover_i": 11481354,
}


def search_body(*docs) -> str:
    return json.dumps({"numFound": len(docs), "start": 0, "docs": list(docs)})


class FakeOpenLibraryClient:
    def __init__(self, body: str = '{"docs": []}'):
        self.search_body = body
        self.search_error = None
        self.cover_error = None
        self.covers = {}
        self.olid_covers = {}
        self.search_calls = []
        self.cover_calls = []

    def search(self, title=None, author=None, isbn=None):
        self.search_calls.append((title, author, isbn))
        if self.search_error:
            raise self.search_error
        return self.search_body

    def fetch_cover(self, cover_id):
        self.cover_calls.append(cover_id)
        if self.cover_error:
            raise self.cover_error
        return self.covers.get(cover_id)

    def fetch_cover_by_olid(self, olid):
        self.cover_calls.append(olid)
        if self.cover_error:
            raise self.cover_error
        return self.olid_covers.get(olid)


@pytest.fixture
def db(tmp_path):
    """Fresh SQLite database per test."""
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'bookshelf_test.db'}")
    manager.init_db()
    yield manager
    manager.close()


@pytest.fixture
def repository(db):
    return BookRepository(db)


@pytest.fixture
def fake_client():
    return FakeOpenLibraryClient()


@pytest.fixture
def service(repository, fake_client):
    return CatalogService(repository, fake_client)
