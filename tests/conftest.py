# tests/conftest.py
import itertools

import pytest
from flask_jwt_extended import create_access_token
from sqlalchemy import func, select

from digital_library import create_app
from digital_library.config import TestConfig
from digital_library.extensions import db
from digital_library.models.book import Book
from digital_library.models.lending_record import LendingRecord


@pytest.fixture
def app(tmp_path):
    """App bound to a fresh SQLite file per test (threads need a shared file, not :memory:)."""
    db_file = tmp_path / "test_library.db"
    app = create_app(TestConfig, overrides={"SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_file}"})

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """Bearer header for a token issued the same way login does."""
    with app.app_context():
        token = create_access_token(
            identity="1",
            additional_claims={"role": "user", "username": "librarian"}
        )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_book(app):
    """Factory: insert a book and return its id."""
    counter = itertools.count(1)

    def _make(quantity=1, title=None, author="Test Author", category=None, isbn=None):
        n = next(counter)
        with app.app_context():
            book = Book(
                title=title or f"Test Book {n}",
                author=author,
                isbn=isbn or f"978000000{n:04d}",
                quantity=quantity,
                category=category,
            )
            db.session.add(book)
            db.session.commit()
            return book.id

    return _make


@pytest.fixture
def quantity_of(app):
    """Read a book's quantity straight from the table."""
    def _quantity(book_id):
        with app.app_context():
            return db.session.execute(
                select(Book.quantity).where(Book.id == book_id)
            ).scalar_one()

    return _quantity


@pytest.fixture
def record_state(app):
    """(exists, return_date) of a lending record, straight from the table."""
    def _state(record_id):
        with app.app_context():
            row = db.session.execute(
                select(LendingRecord.return_date).where(LendingRecord.id == record_id)
            ).first()
            return (row is not None, row[0] if row is not None else None)

    return _state


@pytest.fixture
def record_count(app):
    def _count(book_id=None):
        with app.app_context():
            stmt = select(func.count(LendingRecord.id))
            if book_id is not None:
                stmt = stmt.where(LendingRecord.book_id == book_id)
            return db.session.execute(stmt).scalar_one()

    return _count
