"""
Open Library API Integration
----------------------------
Searches the Open Library catalog and downloads cover images.
"""

import requests
from typing import Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class CatalogError(RuntimeError):
    pass


class CatalogUnavailableError(CatalogError):
    """Transport failure, timeout or unexpected status from Open Library."""


def olid_from_key(key: str) -> str:
    """Reduce ``/works/OL45883W`` or ``/books/OL7353617M`` to the bare OLID."""
    return key.strip().rstrip("/").split("/")[-1]


class OpenLibraryClient:
    """Client for Open Library API"""

    BASE_URL = "https://openlibrary.org"
    COVERS_URL = "https://covers.openlibrary.org"

    def __init__(
        self,
        base_url: Optional[str] = None,
        covers_url: Optional[str] = None,
        timeout: Tuple[float, float] = (10.0, 10.0),
        user_agent: str = "Bookshelf/1.0 (Personal Book Catalog)",
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.covers_url = (covers_url or self.COVERS_URL).rstrip("/")
        # (connect, read) seconds
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent
        })

    def _get(self, url: str, params: Optional[dict] = None) -> requests.Response:
        try:
            return self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise CatalogUnavailableError(f"Request to {url} failed: {e}") from e

    def search(
        self,
        title: Optional[str] = None,
        author: Optional[str] = None,
        isbn: Optional[str] = None,
    ) -> str:
        """
        Query ``search.json`` and return the raw response body.
        """
        params = {}
        if title:
            params["title"] = title
        if author:
            params["author"] = author
        if isbn:
            params["isbn"] = isbn

        url = f"{self.base_url}/search.json"
        resp = self._get(url, params=params)
        if resp.status_code != 200:
            raise CatalogUnavailableError(
                f"Open Library search returned status {resp.status_code}"
            )
        logger.debug("Open Library search params=%s bytes=%s", params, len(resp.content))
        return resp.text

    def _fetch_image(self, url: str) -> Optional[bytes]:
        # default=false makes Open Library answer 404 instead of a blank placeholder
        resp = self._get(url, params={"default": "false"})
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise CatalogUnavailableError(
                f"Open Library cover request returned status {resp.status_code}"
            )
        return resp.content or None

    def fetch_cover(self, cover_id: int) -> Optional[bytes]:
        """
        Download the large cover for a numeric ``cover_i`` id.
        """
        return self._fetch_image(f"{self.covers_url}/b/id/{int(cover_id)}-L.jpg")

    def fetch_cover_by_olid(self, olid: str) -> Optional[bytes]:
        """
        Download the large cover for an Open Library key or OLID.
        """
        bare = olid_from_key(olid)
        if not bare:
            return None
        return self._fetch_image(f"{self.covers_url}/b/olid/{bare}-L.jpg")

    def close(self):
        self.session.close()
