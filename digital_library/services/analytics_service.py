from sqlalchemy import func, literal_column

from digital_library.extensions import db
from digital_library.models.book import Book
from digital_library.models.lending_record import LendingRecord

UNCATEGORIZED = "Uncategorized"


def _month_expr(column):
    # to_char is PostgreSQL only
    if db.engine.dialect.name == "sqlite":
        return func.strftime(literal_column("'%Y-%m'"), column)
    return func.to_char(column, literal_column("'YYYY-MM'"))


class AnalyticsService:
    @staticmethod
    def most_borrowed(limit: int = 10):
        borrows = func.count(LendingRecord.id).label("borrows")
        rows = (
            db.session.query(Book.id, Book.title, borrows)
            .join(LendingRecord, LendingRecord.book_id == Book.id)
            .group_by(Book.id, Book.title)
            .order_by(borrows.desc(), Book.id.asc())
            .limit(limit)
            .all()
        )
        return [{"book_id": r[0], "book_title": r[1], "borrows": r[2]} for r in rows]

    @staticmethod
    def monthly_trends():
        month = _month_expr(LendingRecord.borrow_date).label("month")
        rows = (
            db.session.query(month, func.count(LendingRecord.id).label("count"))
            .group_by(month)
            .order_by(month.asc())
            .all()
        )
        return [{"month": r[0], "count": r[1]} for r in rows]

    @staticmethod
    def category_distribution():
        category = func.coalesce(Book.category, literal_column(f"'{UNCATEGORIZED}'")).label("category")
        count = func.count(Book.id).label("count")
        rows = (
            db.session.query(category, count)
            .group_by(category)
            .order_by(count.desc(), category.asc())
            .all()
        )
        return [{"category": r[0], "count": r[1]} for r in rows]
