from sqlalchemy import func, or_, select, update

from digital_library.extensions import db
from digital_library.models.book import Book
from digital_library.utils.timeutil import utcnow


class BookRepo:
    @staticmethod
    def list_all(search=None, category=None, author=None, available=None):
        q = Book.query
        if search:
            pattern = f"%{search.lower()}%"
            q = q.filter(or_(func.lower(Book.title).like(pattern), func.lower(Book.author).like(pattern)))
        if category:
            q = q.filter(func.lower(Book.category) == category.lower())
        if author:
            q = q.filter(func.lower(Book.author) == author.lower())
        if available is True:
            q = q.filter(Book.quantity > 0)
        elif available is False:
            q = q.filter(Book.quantity == 0)
        return q.order_by(Book.title.asc()).all()

    @staticmethod
    def get(book_id: int):
        return db.session.get(Book, book_id)

    @staticmethod
    def get_for_update(book_id: int):
        # SELECT ... FOR UPDATE: holds the row until commit/rollback
        stmt = (
            select(Book)
            .where(Book.id == book_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def adjust_quantity(book_id: int, delta: int) -> bool:
        """
        quantity += delta in a single statement. A decrement only matches
        while quantity stays >= 0. Returns False when no row matched.
        """
        stmt = (
            update(Book)
            .where(Book.id == book_id)
            .values(quantity=Book.quantity + delta, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if delta < 0:
            stmt = stmt.where(Book.quantity >= -delta)
        result = db.session.execute(stmt)
        return result.rowcount > 0

    @staticmethod
    def create(book: Book):
        db.session.add(book)
        db.session.flush()
        return book

    @staticmethod
    def delete(book: Book):
        db.session.delete(book)
        db.session.flush()
