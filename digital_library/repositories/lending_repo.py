from sqlalchemy import delete, func, or_, update

from digital_library.extensions import db
from digital_library.models.book import Book
from digital_library.models.lending_record import LendingRecord
from digital_library.utils.timeutil import utcnow


class LendingRepo:
    @staticmethod
    def get(record_id: int):
        return db.session.get(LendingRecord, record_id)

    @staticmethod
    def create(record: LendingRecord):
        db.session.add(record)
        db.session.flush()
        return record

    @staticmethod
    def close_if_open(record_id: int, return_date):
        """
        Sets return_date only while it is still NULL (compare-and-set).
        Returns the record's book_id, or None when nothing matched.
        """
        stmt = (
            update(LendingRecord)
            .where(LendingRecord.id == record_id, LendingRecord.return_date.is_(None))
            .values(return_date=return_date, updated_at=utcnow())
            .returning(LendingRecord.book_id)
            .execution_options(synchronize_session=False)
        )
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def delete_by_id(record_id: int):
        """
        Deletes the record and returns its (book_id, return_date) as they were
        at delete time, or None when nothing matched.
        """
        stmt = (
            delete(LendingRecord)
            .where(LendingRecord.id == record_id)
            .returning(LendingRecord.book_id, LendingRecord.return_date)
            .execution_options(synchronize_session=False)
        )
        return db.session.execute(stmt).one_or_none()

    @staticmethod
    def count_for_book(book_id: int) -> int:
        return LendingRecord.query.filter_by(book_id=book_id).count()

    @staticmethod
    def list_detailed(search=None, borrower=None, status=None, book_title=None):
        q = (
            db.session.query(LendingRecord, Book.title, Book.author)
            .join(Book, LendingRecord.book_id == Book.id)
        )
        if search:
            pattern = f"%{search.lower()}%"
            q = q.filter(or_(
                func.lower(LendingRecord.borrower_name).like(pattern),
                func.lower(Book.title).like(pattern),
            ))
        if borrower:
            q = q.filter(func.lower(LendingRecord.borrower_name) == borrower.lower())
        if status == "active":
            q = q.filter(LendingRecord.return_date.is_(None))
        elif status == "returned":
            q = q.filter(LendingRecord.return_date.isnot(None))
        if book_title:
            q = q.filter(func.lower(Book.title) == book_title.lower())
        return q.order_by(LendingRecord.borrow_date.desc(), LendingRecord.created_at.desc()).all()
