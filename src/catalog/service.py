"""
Service module for the book catalog.
"""
import logging
from typing import Dict, List, Optional

from src.catalog.errors import BookAlreadyExistsError, BookNotFoundError
from src.db.database import BookRepository
from src.db.models import Book
from src.enrichment.extractor import BookMetadata, extract, extract_all, parse_search_response
from src.enrichment.openlibrary import CatalogError, OpenLibraryClient

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, repository: BookRepository, client: OpenLibraryClient):
        self.repository = repository
        self.client = client

    def list_all(self) -> List[Book]:
        return self.repository.find_all()

    def get_by_id(self, book_id: int) -> Book:
        book = self.repository.find_by_id(book_id)
        if book is None:
            raise BookNotFoundError(book_id)
        return book

    def create(self, title: str, author: str) -> Book:
        """
        Store a new book and enrich it from the first Open Library match.

        Upstream failures are logged and leave the record with only the
        caller-supplied title and author.
        """
        if title is None or author is None or not title.strip() or not author.strip():
            raise ValueError("title and author are required")
        if self.repository.exists_by_title_and_author(title, author):
            raise BookAlreadyExistsError(title, author)

        fields: Dict = {"title": title, "author": author}
        meta = self._first_match(title, author)
        if meta is not None:
            enriched = meta.to_fields()
            enriched.pop("title", None)
            enriched.pop("author", None)
            fields.update(enriched)
            if meta.cover_id is not None:
                cover = self._fetch_cover(meta.cover_id)
                if cover is not None:
                    fields["cover_image"] = cover

        book = self.repository.insert(fields)
        logger.info(
            "Created book id=%s title=%r author=%r enriched=%s",
            book.id,
            title,
            author,
            meta is not None,
        )
        return book

    def _first_match(self, title: str, author: str) -> Optional[BookMetadata]:
        try:
            raw = self.client.search(title=title, author=author)
        except CatalogError as e:
            logger.warning("Enrichment search failed for %r by %r: %s", title, author, e)
            return None
        result = parse_search_response(raw)
        if not result.ok:
            logger.warning("Malformed Open Library response for %r by %r: %s", title, author, result.error)
            return None
        if not result.documents:
            logger.info("No Open Library match for %r by %r", title, author)
            return None
        return extract(result.documents[0], include_title=False)

    def _fetch_cover(self, cover_id: int) -> Optional[bytes]:
        try:
            return self.client.fetch_cover(cover_id)
        except CatalogError as e:
            logger.warning("Cover download failed for cover_id=%s: %s", cover_id, e)
            return None

    def update(self, book_id: int, replacement: Dict) -> Book:
        book = self.repository.replace(book_id, replacement)
        if book is None:
            raise BookNotFoundError(book_id)
        logger.info("Updated book id=%s", book_id)
        return book

    def delete(self, book_id: int) -> None:
        removed = self.repository.delete_by_id(book_id)
        logger.info("Delete book id=%s removed=%s", book_id, removed)

    def delete_all(self) -> int:
        removed = self.repository.delete_all()
        logger.info("Deleted all books count=%s", removed)
        return removed

    def search(
        self,
        title: Optional[str] = None,
        author: Optional[str] = None,
        isbn: Optional[str] = None,
    ) -> List[BookMetadata]:
        """
        Map every Open Library match for the given filters. Nothing is stored.
        """
        if not (title or author or isbn):
            return []
        try:
            raw = self.client.search(title=title, author=author, isbn=isbn)
        except CatalogError as e:
            logger.warning("Open Library search failed title=%r author=%r isbn=%r: %s", title, author, isbn, e)
            return []
        result = parse_search_response(raw)
        if not result.ok:
            logger.warning("Malformed Open Library response title=%r author=%r isbn=%r: %s",
                           title, author, isbn, result.error)
            return []
        return extract_all(result)

    def fetch_cover(self, open_library_id: Optional[str]) -> Optional[bytes]:
        if not open_library_id or not open_library_id.strip():
            return None
        try:
            return self.client.fetch_cover_by_olid(open_library_id)
        except CatalogError as e:
            logger.warning("Cover lookup failed for olid=%s: %s", open_library_id, e)
            return None
