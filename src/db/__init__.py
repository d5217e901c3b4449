from src.db.database import BookRepository, DatabaseManager

__all__ = ["BookRepository", "DatabaseManager"]
