"""
Domain errors raised by the catalog service.
"""


class CatalogServiceError(Exception):
    pass


class BookNotFoundError(CatalogServiceError):
    def __init__(self, book_id):
        self.book_id = book_id
        super().__init__(f"Book not found with id: {book_id}")


class BookAlreadyExistsError(CatalogServiceError):
    def __init__(self, title, author):
        self.title = title
        self.author = author
        super().__init__("A book with the same title and author already exists")
