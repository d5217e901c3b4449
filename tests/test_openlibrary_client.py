"""
Tests for the Open Library HTTP client.
"""
import unittest
from unittest import mock

import requests
from requests.adapters import BaseAdapter

from src.enrichment.openlibrary import CatalogUnavailableError, OpenLibraryClient, olid_from_key


class RecordingAdapter(BaseAdapter):
    """Transport adapter that answers every request with a canned response."""

    def __init__(self, status_code=200, content=b'{"docs": []}'):
        super().__init__()
        self.status_code = status_code
        self.content = content
        self.requests = []

    def send(self, request, **kwargs):
        self.requests.append((request, kwargs))
        resp = requests.Response()
        resp.status_code = self.status_code
        resp._content = self.content
        resp.url = request.url
        resp.request = request
        resp.encoding = "utf-8"
        return resp

    def close(self):
        pass


def _response(status_code=200, content=b""):
    resp = mock.Mock()
    resp.status_code = status_code
    resp.content = content
    resp.text = content.decode("utf-8", errors="ignore")
    return resp


class TestOpenLibraryClient(unittest.TestCase):
    def setUp(self):
        self.session = mock.MagicMock()
        self.session.headers = {}
        self.client = OpenLibraryClient(session=self.session)

    def test_sets_user_agent(self):
        self.assertIn("Bookshelf", self.session.headers["User-Agent"])

    def test_search_sends_filters_with_timeout(self):
        self.session.get.return_value = _response(content=b'{"docs": []}')

        body = self.client.search(title="Dune", author="Frank Herbert")

        self.assertEqual(body, '{"docs": []}')
        self.session.get.assert_called_once_with(
            "https://openlibrary.org/search.json",
            params={"title": "Dune", "author": "Frank Herbert"},
            timeout=(10.0, 10.0),
        )

    def test_search_omits_missing_filters(self):
        self.session.get.return_value = _response(content=b'{"docs": []}')

        self.client.search(isbn="0441013597")

        _, kwargs = self.session.get.call_args
        self.assertEqual(kwargs["params"], {"isbn": "0441013597"})

    def test_search_transport_error(self):
        self.session.get.side_effect = requests.ConnectionError("connection refused")

        with self.assertRaises(CatalogUnavailableError):
            self.client.search(title="Dune")

    def test_search_timeout(self):
        self.session.get.side_effect = requests.Timeout("read timed out")

        with self.assertRaises(CatalogUnavailableError):
            self.client.search(title="Dune")

    def test_search_bad_status(self):
        self.session.get.return_value = _response(status_code=503)

        with self.assertRaises(CatalogUnavailableError):
            self.client.search(title="Dune")

    def test_fetch_cover(self):
        self.session.get.return_value = _response(content=b"\xff\xd8\xff")

        cover = self.client.fetch_cover(8231856)

        self.assertEqual(cover, b"\xff\xd8\xff")
        self.session.get.assert_called_once_with(
            "https://covers.openlibrary.org/b/id/8231856-L.jpg",
            params={"default": "false"},
            timeout=(10.0, 10.0),
        )

    def test_fetch_cover_missing(self):
        self.session.get.return_value = _response(status_code=404)

        self.assertIsNone(self.client.fetch_cover(1))

    def test_fetch_cover_server_error(self):
        self.session.get.return_value = _response(status_code=500)

        with self.assertRaises(CatalogUnavailableError):
            self.client.fetch_cover(1)

    def test_fetch_cover_by_work_key(self):
        self.session.get.return_value = _response(content=b"jpeg")

        self.client.fetch_cover_by_olid("/works/OL45883W")

        args, _ = self.session.get.call_args
        self.assertEqual(args[0], "https://covers.openlibrary.org/b/olid/OL45883W-L.jpg")

    def test_custom_endpoints_and_timeout(self):
        client = OpenLibraryClient(
            base_url="http://localhost:9000/",
            covers_url="http://localhost:9001",
            timeout=(2.0, 5.0),
            session=self.session,
        )
        self.session.get.return_value = _response(content=b"{}")

        client.search(title="Emma")

        self.session.get.assert_called_once_with(
            "http://localhost:9000/search.json", params={"title": "Emma"}, timeout=(2.0, 5.0)
        )


class TestQueryEncoding(unittest.TestCase):
    def test_title_and_author_are_percent_encoded(self):
        adapter = RecordingAdapter()
        session = requests.Session()
        session.mount("https://", adapter)
        client = OpenLibraryClient(session=session)

        client.search(title="Pride & Prejudice", author="Jane Austen")

        request, kwargs = adapter.requests[0]
        self.assertIn("title=Pride+%26+Prejudice", request.url)
        self.assertIn("author=Jane+Austen", request.url)
        self.assertEqual(kwargs["timeout"], (10.0, 10.0))


class TestOlidFromKey(unittest.TestCase):
    def test_strips_path(self):
        self.assertEqual(olid_from_key("/works/OL45883W"), "OL45883W")
        self.assertEqual(olid_from_key("/books/OL7353617M/"), "OL7353617M")
        self.assertEqual(olid_from_key("OL7353617M"), "OL7353617M")


if __name__ == '__main__':
    unittest.main()
