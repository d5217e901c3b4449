"""
Runtime configuration read from environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _list_env(name: str, default: str) -> List[str]:
    value = os.getenv(name, default)
    return [item.strip() for item in value.split(",") if item.strip()]


def build_database_url(use_sqlite: Optional[bool] = None) -> str:
    if use_sqlite is None:
        use_sqlite = os.getenv("USE_SQLITE", "0") == "1"
    if use_sqlite:
        db_path = os.getenv("SQLITE_DB_PATH", "data/bookshelf.db")
        return f"sqlite:///{db_path}"
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    user = os.getenv("POSTGRES_USER", "bookshelf")
    password = os.getenv("POSTGRES_PASSWORD", "bookshelf")
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    database = os.getenv("POSTGRES_DB", "bookshelf")
    return f"postgresql+psycopg://{user}:{password}@{host}:{port}/{database}"


@dataclass(frozen=True)
class Settings:
    database_url: str
    openlibrary_base_url: str = "https://openlibrary.org"
    openlibrary_covers_url: str = "https://covers.openlibrary.org"
    connect_timeout: float = 10.0
    read_timeout: float = 10.0
    user_agent: str = "Bookshelf/1.0 (Personal Book Catalog)"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def load_settings(use_sqlite: Optional[bool] = None) -> Settings:
    return Settings(
        database_url=build_database_url(use_sqlite),
        openlibrary_base_url=os.getenv("OPENLIBRARY_BASE_URL", "https://openlibrary.org").rstrip("/"),
        openlibrary_covers_url=os.getenv(
            "OPENLIBRARY_COVERS_URL", "https://covers.openlibrary.org"
        ).rstrip("/"),
        connect_timeout=_float_env("OPENLIBRARY_CONNECT_TIMEOUT", 10.0),
        read_timeout=_float_env("OPENLIBRARY_READ_TIMEOUT", 10.0),
        user_agent=os.getenv("OPENLIBRARY_USER_AGENT", "Bookshelf/1.0 (Personal Book Catalog)"),
        cors_origins=_list_env("CORS_ORIGINS", "*"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
