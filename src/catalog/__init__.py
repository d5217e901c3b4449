from src.catalog.errors import BookAlreadyExistsError, BookNotFoundError, CatalogServiceError

__all__ = ["BookAlreadyExistsError", "BookNotFoundError", "CatalogServiceError"]
