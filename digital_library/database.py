import time

import click
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from digital_library.extensions import db


def wait_for_database(app):
    """
    Checks the connection before the app starts serving.
    Retries DB_CONNECT_RETRIES times, DB_CONNECT_RETRY_DELAY seconds apart.
    """
    attempts = max(1, int(app.config.get("DB_CONNECT_RETRIES", 3)))
    delay = float(app.config.get("DB_CONNECT_RETRY_DELAY", 2))

    with app.app_context():
        for attempt in range(1, attempts + 1):
            try:
                with db.engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                app.logger.info("[db] Database connection established.")
                return
            except OperationalError as e:
                app.logger.warning(f"[db] Attempt {attempt} to connect to database failed: {e}")
                if attempt == attempts:
                    app.logger.error("[db] Unable to connect to database after retries.")
                    raise
                time.sleep(delay)


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        # models must be imported so their tables are on db.metadata
        from digital_library.models import book, lending_record, user  # noqa: F401

        db.create_all()
        click.echo("Database tables created.")
