"""
Maps Open Library search documents onto book attributes.
"""
import logging
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from src.enrichment.schema import SearchDoc, search_response_adapter

logger = logging.getLogger(__name__)


@dataclass
class BookMetadata:
    """Book attributes derived from one search document. ``None`` means unset."""
    title: Optional[str] = None
    author: Optional[str] = None
    genre: Optional[str] = None
    isbn: Optional[str] = None
    publication_date: Optional[str] = None
    description: Optional[str] = None
    publisher: Optional[str] = None
    language: Optional[str] = None
    page_count: int = 0
    format: Optional[str] = None
    subjects: Optional[List[str]] = None
    open_library_id: Optional[str] = None
    contributors: Optional[List[str]] = None
    cover_id: Optional[int] = None

    def to_fields(self) -> Dict:
        """Attributes suitable for a book record, without unset values."""
        data = {}
        for f in fields(self):
            if f.name == "cover_id":
                continue
            value = getattr(self, f.name)
            if value is not None:
                data[f.name] = value
        return data


@dataclass
class SearchParseResult:
    documents: List[SearchDoc] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _first(values: Optional[List[str]]) -> Optional[str]:
    if values:
        return values[0]
    return None


def parse_search_response(raw: Union[str, bytes, None]) -> SearchParseResult:
    """
    Decode a raw ``search.json`` body. Never raises; a malformed body is
    reported through ``SearchParseResult.error``.
    """
    if raw is None or not raw.strip():
        return SearchParseResult(error="empty response body")
    try:
        response = search_response_adapter.validate_json(raw)
    except ValidationError as e:
        first = e.errors()[0]
        return SearchParseResult(error=f"{first['type']}: {first['msg']}")
    return SearchParseResult(documents=response.docs)


def extract(doc: SearchDoc, include_title: bool = True) -> BookMetadata:
    """
    Build ``BookMetadata`` from a single document.

    With ``include_title`` false the document's title is skipped, leaving
    the caller-supplied one in place.
    """
    meta = BookMetadata()

    if include_title and doc.title is not None:
        meta.title = doc.title
    meta.author = _first(doc.author_name)
    # First subject rather than the whole list rendered as text
    meta.genre = _first(doc.subject)
    meta.isbn = _first(doc.isbn)
    if doc.first_publish_year is not None:
        meta.publication_date = str(doc.first_publish_year)
    meta.description = doc.subtitle
    meta.publisher = _first(doc.publisher)
    meta.language = _first(doc.language)
    meta.page_count = doc.number_of_pages_median or 0
    meta.format = doc.format
    if doc.subject:
        meta.subjects = list(doc.subject)
    meta.open_library_id = doc.key
    if doc.author_name:
        meta.contributors = list(doc.author_name)
    if doc.cover_i is not None and doc.cover_i > 0:
        meta.cover_id = doc.cover_i

    return meta


def extract_all(result: SearchParseResult) -> List[BookMetadata]:
    return [extract(doc) for doc in result.documents]
