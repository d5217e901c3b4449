"""
Typed view of an Open Library ``search.json`` response.

Only the fields used for enrichment are declared; everything else in a
document is ignored. Validators are lenient: a field with an unexpected
shape is treated as absent instead of failing the whole document.
"""
import math
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return None
    elif not isinstance(value, int):
        return None
    # Anything outside a 32-bit INTEGER column counts as absent
    if not _INT_MIN <= value <= _INT_MAX:
        return None
    return value


class SearchDoc(BaseModel):
    """One entry of the ``docs`` array."""

    model_config = ConfigDict(extra="ignore")

    key: Optional[str] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None
    author_name: Optional[List[str]] = None
    subject: Optional[List[str]] = None
    isbn: Optional[List[str]] = None
    publisher: Optional[List[str]] = None
    language: Optional[List[str]] = None
    first_publish_year: Optional[int] = None
    number_of_pages_median: Optional[int] = None
    format: Optional[str] = None
    cover_i: Optional[int] = None

    @field_validator("key", "title", "subtitle", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Optional[str]:
        return _as_text(value)

    @field_validator("format", mode="before")
    @classmethod
    def _format(cls, value: Any) -> Optional[str]:
        # Upstream sends a list of formats for most editions
        if isinstance(value, list):
            value = next((item for item in value if _as_text(item)), None)
        return _as_text(value)

    @field_validator("author_name", "subject", "isbn", "publisher", "language", mode="before")
    @classmethod
    def _text_list(cls, value: Any) -> Optional[List[str]]:
        if value is None:
            return None
        if not isinstance(value, list):
            value = [value]
        items = [_as_text(item) for item in value]
        return [item for item in items if item is not None]

    @field_validator("first_publish_year", "number_of_pages_median", "cover_i", mode="before")
    @classmethod
    def _lenient_int(cls, value: Any) -> Optional[int]:
        return _as_int(value)


class SearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    num_found: Optional[int] = Field(default=None, alias="numFound")
    docs: List[SearchDoc] = Field(default_factory=list)

    @field_validator("num_found", mode="before")
    @classmethod
    def _num_found(cls, value: Any) -> Optional[int]:
        return _as_int(value)

    @field_validator("docs", mode="before")
    @classmethod
    def _docs(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [doc for doc in value if isinstance(doc, dict)]


# Built once and shared; validation is stateless.
search_response_adapter: TypeAdapter[SearchResponse] = TypeAdapter(SearchResponse)
