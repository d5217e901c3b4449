import base64
import binascii
import logging
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional
from contextlib import asynccontextmanager

from src.catalog.errors import BookAlreadyExistsError, BookNotFoundError, CatalogServiceError
from src.catalog.service import CatalogService
from src.config import configure_logging, load_settings
from src.db.database import BookRepository, DatabaseManager
from src.enrichment.openlibrary import OpenLibraryClient


logger = logging.getLogger(__name__)

settings = load_settings()
database: DatabaseManager | None = None
service: CatalogService | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global database, service
    configure_logging(settings.log_level)
    database = DatabaseManager(settings.database_url)
    database.init_db()
    client = OpenLibraryClient(
        base_url=settings.openlibrary_base_url,
        covers_url=settings.openlibrary_covers_url,
        timeout=(settings.connect_timeout, settings.read_timeout),
        user_agent=settings.user_agent,
    )
    service = CatalogService(BookRepository(database), client)
    yield
    client.close()
    database.close()


app = FastAPI(title="Bookshelf Catalog API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class BookFields(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: Optional[str] = None
    author: Optional[str] = None
    cover_image: Optional[str] = Field(default=None, description="Base64 encoded image")
    genre: Optional[str] = None
    isbn: Optional[str] = None
    publication_date: Optional[str] = None
    description: Optional[str] = None
    publisher: Optional[str] = None
    language: Optional[str] = None
    page_count: int = Field(default=0, ge=-(2**31), le=2**31 - 1)
    format: Optional[str] = None
    subjects: List[str] = Field(default_factory=list)
    open_library_id: Optional[str] = None
    contributors: List[str] = Field(default_factory=list)


class BookOut(BookFields):
    id: Optional[int] = None


class BookUpdate(BookFields):
    title: str
    author: str

    @field_validator("cover_image")
    @classmethod
    def _check_base64(cls, value: Optional[str]) -> Optional[str]:
        if value:
            try:
                base64.b64decode(value, validate=True)
            except (binascii.Error, ValueError):
                raise ValueError("coverImage must be base64 encoded")
        return value

    def to_fields(self) -> dict:
        data = self.model_dump()
        cover = data.get("cover_image")
        data["cover_image"] = base64.b64decode(cover) if cover else None
        return data


def get_service() -> CatalogService:
    if service is None:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return service


@app.exception_handler(BookNotFoundError)
async def book_not_found_handler(request: Request, exc: BookNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(BookAlreadyExistsError)
async def book_exists_handler(request: Request, exc: BookAlreadyExistsError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.get("/")
async def root():
    return {"message": "Bookshelf Catalog API"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


@app.get("/api/books/all", response_model=List[BookOut])
def get_all_books():
    return [book.to_dict() for book in get_service().list_all()]


@app.get("/api/books/search", response_model=List[BookOut])
def search_books(title: Optional[str] = None, author: Optional[str] = None, isbn: Optional[str] = None):
    return [BookOut(**meta.to_fields()) for meta in get_service().search(title, author, isbn)]


@app.get("/api/books/searchCover")
def search_cover(olid: str):
    cover = get_service().fetch_cover(olid)
    if cover is None:
        return Response(status_code=204)
    return Response(content=cover, media_type="image/jpeg")


@app.get("/api/books", response_model=BookOut)
def get_book(id: int):
    return get_service().get_by_id(id).to_dict()


@app.post("/api/books", response_model=BookOut, status_code=201)
def create_book(title: str, author: str):
    catalog = get_service()
    try:
        book = catalog.create(title, author)
    except CatalogServiceError:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Error creating book title=%r author=%r", title, author)
        raise HTTPException(status_code=400, detail="Error creating book")
    return book.to_dict()


@app.put("/api/books", response_model=BookOut)
def update_book(id: int, book: BookUpdate):
    return get_service().update(id, book.to_fields()).to_dict()


@app.delete("/api/books/all")
def delete_all_books():
    get_service().delete_all()
    return Response(status_code=200)


@app.delete("/api/books")
def delete_book(id: int):
    get_service().delete(id)
    return Response(status_code=200)
