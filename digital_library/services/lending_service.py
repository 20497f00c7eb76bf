from flask import current_app

from digital_library.errors import Conflict, InternalError, InvalidInput, NotFound
from digital_library.models.lending_record import LendingRecord
from digital_library.repositories.book_repo import BookRepo
from digital_library.repositories.lending_repo import LendingRepo
from digital_library.utils.timeutil import utc_today
from digital_library.utils.transaction import atomic


def _positive_id(value, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInput(f"{label} must be a positive integer")
    return value


class LendingService:
    """
    Lend / return / delete a lending record.

    Each call is one transaction that moves a book's quantity together with
    the lending record, so quantity always equals copies not on loan.
    """

    @staticmethod
    def lend(book_id, borrower) -> LendingRecord:
        book_id = _positive_id(book_id, "Book ID")
        if not isinstance(borrower, str) or not borrower.strip():
            raise InvalidInput("Book ID and Borrower name are required")

        with atomic(failure_message="Could not complete lending operation"):
            # 1) lock the book row: concurrent lends of the same book queue here
            book = BookRepo.get_for_update(book_id)
            if book is None:
                raise NotFound("Book not found")

            # 2) stock check
            if book.quantity <= 0:
                raise Conflict("Book is currently out of stock")

            # 3) guarded decrement, never below zero even without row locks
            if not BookRepo.adjust_quantity(book_id, -1):
                raise Conflict("Book is currently out of stock")

            # 4) open the loan
            record = LendingRepo.create(LendingRecord(
                book_id=book_id,
                borrower_name=borrower,
                borrow_date=utc_today(),
                return_date=None,
            ))

        current_app.logger.info(
            f"[lending] lent book_id={book_id} to '{borrower}' record_id={record.id}"
        )
        return record

    @staticmethod
    def return_book(record_id) -> LendingRecord:
        record_id = _positive_id(record_id, "Lending record ID")

        with atomic(failure_message="Could not complete return operation"):
            # 1) close only if still open
            book_id = LendingRepo.close_if_open(record_id, utc_today())

            if book_id is None:
                # 2) tell "already returned" apart from "missing"
                existing = LendingRepo.get(record_id)
                if existing is not None and existing.return_date is not None:
                    raise Conflict("Book already returned")
                raise NotFound("Lending record not found")

            # 3) give the copy back
            if not BookRepo.adjust_quantity(book_id, +1):
                current_app.logger.error(
                    f"[lending] book_id={book_id} missing while returning record_id={record_id}"
                )
                raise InternalError("Could not update book quantity after return")

        current_app.logger.info(f"[lending] returned record_id={record_id} book_id={book_id}")
        return LendingRepo.get(record_id)

    @staticmethod
    def delete_record(record_id) -> None:
        record_id = _positive_id(record_id, "Lending record ID")

        with atomic(failure_message="Could not complete delete operation"):
            # read and delete in one statement: a concurrent return cannot slip in between
            deleted = LendingRepo.delete_by_id(record_id)
            if deleted is None:
                raise NotFound("Lending record not found")

            book_id, return_date = deleted
            was_open = return_date is None

            # an open loan still holds one copy: put it back
            if was_open and not BookRepo.adjust_quantity(book_id, +1):
                current_app.logger.error(
                    f"[lending] book_id={book_id} missing while deleting open record_id={record_id}"
                )
                raise InternalError("Could not update book quantity after deleting lending record")

        current_app.logger.info(
            f"[lending] deleted record_id={record_id} book_id={book_id} compensated={was_open}"
        )

    @staticmethod
    def list_records(search=None, borrower=None, status=None, book_title=None):
        rows = LendingRepo.list_detailed(
            search=search, borrower=borrower, status=status, book_title=book_title
        )
        data = []
        for record, title, author in rows:
            item = record.to_dict()
            item["book_title"] = title
            item["book_author"] = author
            data.append(item)
        return data
