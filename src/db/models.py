"""
SQLAlchemy Models for Bookshelf
"""

import base64
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, Text, JSON, LargeBinary, Index, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    pass


# Every attribute a full update replaces; the identifier is never part of it.
BOOK_FIELDS = (
    "title",
    "author",
    "cover_image",
    "genre",
    "isbn",
    "publication_date",
    "description",
    "publisher",
    "language",
    "page_count",
    "format",
    "subjects",
    "open_library_id",
    "contributors",
)


class Book(Base):
    __tablename__ = "books"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Supplied by the caller on creation
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str] = mapped_column(String(500), nullable=False)

    # Enrichment metadata from Open Library
    cover_image: Mapped[Optional[bytes]] = mapped_column(LargeBinary)
    genre: Mapped[Optional[str]] = mapped_column(Text)
    isbn: Mapped[Optional[str]] = mapped_column(String(32))
    publication_date: Mapped[Optional[str]] = mapped_column(String(50))
    description: Mapped[Optional[str]] = mapped_column(Text)
    publisher: Mapped[Optional[str]] = mapped_column(Text)
    language: Mapped[Optional[str]] = mapped_column(String(50))
    page_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    format: Mapped[Optional[str]] = mapped_column(String(100))
    subjects: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    open_library_id: Mapped[Optional[str]] = mapped_column(String(100))
    contributors: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("title", "author", name="uq_books_title_author"),
        Index("idx_books_open_library_id", "open_library_id"),
    )

    def __repr__(self):
        return f"<Book(id={self.id}, title='{self.title}', author='{self.author}')>"

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            'id': self.id,
            'title': self.title,
            'author': self.author,
            'cover_image': base64.b64encode(self.cover_image).decode("ascii") if self.cover_image else None,
            'genre': self.genre,
            'isbn': self.isbn,
            'publication_date': self.publication_date,
            'description': self.description,
            'publisher': self.publisher,
            'language': self.language,
            'page_count': self.page_count or 0,
            'format': self.format,
            'subjects': list(self.subjects or []),
            'open_library_id': self.open_library_id,
            'contributors': list(self.contributors or []),
        }
