from digital_library.errors import Conflict, InvalidInput, NotFound
from digital_library.models.book import Book
from digital_library.repositories.book_repo import BookRepo
from digital_library.repositories.lending_repo import LendingRepo
from digital_library.utils.transaction import atomic

DUPLICATE_ISBN = "A book with this ISBN already exists"


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


def _clean_payload(data: dict) -> dict:
    title, author, isbn = _text(data, "title"), _text(data, "author"), _text(data, "isbn")
    if not title or not author or not isbn:
        raise InvalidInput("Title, Author, and ISBN are required fields")

    quantity = data.get("quantity", 0)
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidInput("Quantity must be an integer")
    if quantity < 0:
        raise InvalidInput("Quantity cannot be negative")

    category = data.get("category")
    if category is not None and not isinstance(category, str):
        raise InvalidInput("Category must be a string")

    return {
        "title": title,
        "author": author,
        "isbn": isbn,
        "quantity": quantity,
        "category": _text(data, "category") or None,
    }


class BookService:
    @staticmethod
    def list_books(search=None, category=None, author=None, available=None):
        return BookRepo.list_all(search=search, category=category, author=author, available=available)

    @staticmethod
    def get_book(book_id: int):
        book = BookRepo.get(book_id)
        if not book:
            raise NotFound("Book not found")
        return book

    @staticmethod
    def create_book(data: dict):
        fields = _clean_payload(data)
        with atomic(failure_message="Could not create book", conflict_message=DUPLICATE_ISBN):
            book = BookRepo.create(Book(**fields))
        return book

    @staticmethod
    def update_book(book_id: int, data: dict):
        fields = _clean_payload(data)
        with atomic(failure_message="Could not update book", conflict_message=DUPLICATE_ISBN):
            book = BookService.get_book(book_id)
            for k, v in fields.items():
                setattr(book, k, v)
        return book

    @staticmethod
    def delete_book(book_id: int):
        with atomic(failure_message="Could not delete book"):
            book = BookService.get_book(book_id)
            # lending_records.book_id still points at the row
            if LendingRepo.count_for_book(book_id) > 0:
                raise Conflict("Book has lending records. Delete them first.")
            BookRepo.delete(book)
        return book_id
