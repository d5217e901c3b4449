import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from sqlalchemy import create_engine, delete, event, exists, func, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from src.catalog.errors import BookAlreadyExistsError
from src.config import build_database_url
from src.db.models import BOOK_FIELDS, Base, Book


logger = logging.getLogger(__name__)


class DatabaseManager:
    def __init__(self, url: Optional[str] = None, use_sqlite: bool = False, echo: bool = False):
        self.url = url or build_database_url(use_sqlite or None)
        backend = make_url(self.url)
        self.is_sqlite = backend.get_backend_name() == "sqlite"
        connect_args = {}
        if self.is_sqlite:
            if backend.database and backend.database != ":memory:":
                Path(backend.database).parent.mkdir(parents=True, exist_ok=True)
            # The API hands sessions to a threadpool.
            connect_args["check_same_thread"] = False
        self.engine = create_engine(self.url, echo=echo, future=True, connect_args=connect_args)
        self._sessionmaker = sessionmaker(self.engine, expire_on_commit=False)

        if self.is_sqlite:
            @event.listens_for(self.engine, "connect")
            def _enable_wal(dbapi_connection, _connection_record) -> None:
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA journal_mode=WAL;")
                cursor.close()

    def init_db(self) -> None:
        Base.metadata.create_all(self.engine)
        logger.info("Initialized database schema at %s", self.engine.url.render_as_string(hide_password=True))

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)

    @contextmanager
    def get_session(self) -> Iterator[Session]:
        session = self._sessionmaker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        self.engine.dispose()


class BookRepository:
    """Store for book records backed by a ``DatabaseManager``."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def find_all(self) -> List[Book]:
        with self.db.get_session() as session:
            return list(session.execute(select(Book).order_by(Book.id)).scalars().all())

    def find_by_id(self, book_id: int) -> Optional[Book]:
        with self.db.get_session() as session:
            return session.get(Book, book_id)

    def exists_by_title_and_author(self, title: str, author: str) -> bool:
        with self.db.get_session() as session:
            stmt = select(exists().where(Book.title == title, Book.author == author))
            return bool(session.execute(stmt).scalar())

    def count(self) -> int:
        with self.db.get_session() as session:
            return session.execute(select(func.count()).select_from(Book)).scalar_one()

    def insert(self, fields: Dict) -> Book:
        book = Book(**{name: fields[name] for name in BOOK_FIELDS if name in fields})
        try:
            with self.db.get_session() as session:
                session.add(book)
                session.flush()
                session.refresh(book)
        except IntegrityError as exc:
            raise BookAlreadyExistsError(fields.get("title"), fields.get("author")) from exc
        return book

    def replace(self, book_id: int, fields: Dict) -> Optional[Book]:
        try:
            with self.db.get_session() as session:
                book = session.get(Book, book_id)
                if book is None:
                    return None
                for name in BOOK_FIELDS:
                    setattr(book, name, fields.get(name))
                if book.page_count is None:
                    book.page_count = 0
                if book.subjects is None:
                    book.subjects = []
                if book.contributors is None:
                    book.contributors = []
                session.flush()
                session.refresh(book)
        except IntegrityError as exc:
            raise BookAlreadyExistsError(fields.get("title"), fields.get("author")) from exc
        return book

    def delete_by_id(self, book_id: int) -> bool:
        with self.db.get_session() as session:
            result = session.execute(delete(Book).where(Book.id == book_id))
            return result.rowcount > 0

    def delete_all(self) -> int:
        with self.db.get_session() as session:
            result = session.execute(delete(Book))
            return result.rowcount or 0
