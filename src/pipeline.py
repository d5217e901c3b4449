import argparse
import os

from src.catalog.errors import CatalogServiceError
from src.catalog.service import CatalogService
from src.config import configure_logging, load_settings
from src.db.database import BookRepository, DatabaseManager
from src.enrichment.openlibrary import OpenLibraryClient


def build_service(use_sqlite: bool = False) -> tuple[CatalogService, DatabaseManager]:
    settings = load_settings(use_sqlite or None)
    db = DatabaseManager(settings.database_url)
    db.init_db()
    client = OpenLibraryClient(
        base_url=settings.openlibrary_base_url,
        covers_url=settings.openlibrary_covers_url,
        timeout=(settings.connect_timeout, settings.read_timeout),
        user_agent=settings.user_agent,
    )
    return CatalogService(BookRepository(db), client), db


def init_db(use_sqlite: bool = False):
    settings = load_settings(use_sqlite or None)
    db = DatabaseManager(settings.database_url)
    db.init_db()
    db.close()
    print("Database schema ready")


def search(title: str | None, author: str | None, isbn: str | None, use_sqlite: bool = False):
    service, db = build_service(use_sqlite)
    try:
        results = service.search(title, author, isbn)
        if not results:
            print("No matches")
        for meta in results:
            year = meta.publication_date or "----"
            print(f"[{year}] {meta.title or 'Unknown'} by {meta.author or 'Unknown'} ({meta.open_library_id or '-'})")
    finally:
        db.close()


def add(title: str, author: str, use_sqlite: bool = False):
    service, db = build_service(use_sqlite)
    try:
        book = service.create(title, author)
        cover = f"{len(book.cover_image)} bytes" if book.cover_image else "none"
        print(f"Created book id={book.id}: {book.title} by {book.author}")
        print(f"  ISBN: {book.isbn or '-'}  Published: {book.publication_date or '-'}  Cover: {cover}")
    except CatalogServiceError as e:
        print(f"Not created: {e}")
    finally:
        db.close()


def list_books(use_sqlite: bool = False):
    service, db = build_service(use_sqlite)
    try:
        books = service.list_all()
        for book in books:
            print(f"{book.id:>5}  {book.title} by {book.author}")
        print(f"{len(books)} book(s)")
    finally:
        db.close()


def run_api(host: str = "0.0.0.0", port: int = 8000, use_sqlite: bool = False, reload: bool = False):
    import uvicorn

    if use_sqlite:
        os.environ["USE_SQLITE"] = "1"
        print(f"Starting API in SQLite mode ({os.getenv('SQLITE_DB_PATH', 'data/bookshelf.db')})")
    else:
        print("Starting API in PostgreSQL mode")

    uvicorn.run("src.api.main:app", host=host, port=port, reload=reload)


def main():
    parser = argparse.ArgumentParser(description="Bookshelf Catalog CLI")
    subparsers = parser.add_subparsers(dest='command', required=True)

    api_parser = subparsers.add_parser('api', help='Run the REST API')
    api_parser.add_argument('--host', default="0.0.0.0")
    api_parser.add_argument('--port', type=int, default=8000)
    api_parser.add_argument('--reload', action='store_true', help='Reload on code changes')
    api_parser.add_argument('--sqlite', action='store_true', help='Use SQLite instead of PostgreSQL')

    init_parser = subparsers.add_parser('init-db', help='Create the database schema')
    init_parser.add_argument('--sqlite', action='store_true', help='Use SQLite instead of PostgreSQL')

    search_parser = subparsers.add_parser('search', help='Search Open Library')
    search_parser.add_argument('--title')
    search_parser.add_argument('--author')
    search_parser.add_argument('--isbn')
    search_parser.add_argument('--sqlite', action='store_true', help='Use SQLite instead of PostgreSQL')

    add_parser = subparsers.add_parser('add', help='Add a book and enrich it from Open Library')
    add_parser.add_argument('title')
    add_parser.add_argument('author')
    add_parser.add_argument('--sqlite', action='store_true', help='Use SQLite instead of PostgreSQL')

    list_parser = subparsers.add_parser('list', help='List stored books')
    list_parser.add_argument('--sqlite', action='store_true', help='Use SQLite instead of PostgreSQL')

    args = parser.parse_args()
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    if args.command == 'api':
        run_api(args.host, args.port, args.sqlite, args.reload)
    elif args.command == 'init-db':
        init_db(args.sqlite)
    elif args.command == 'search':
        if not (args.title or args.author or args.isbn):
            parser.error("search needs at least one of --title, --author, --isbn")
        search(args.title, args.author, args.isbn, args.sqlite)
    elif args.command == 'add':
        add(args.title, args.author, args.sqlite)
    elif args.command == 'list':
        list_books(args.sqlite)


if __name__ == '__main__':
    main()
