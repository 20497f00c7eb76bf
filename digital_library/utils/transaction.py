from contextlib import contextmanager

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from digital_library.errors import Conflict, InternalError, LibraryError, TransientError
from digital_library.extensions import db


def _apply_deadline(session, timeout_ms):
    if not timeout_ms or session.get_bind().dialect.name != "postgresql":
        return
    ms = int(timeout_ms)
    # SET LOCAL lasts until the end of the current transaction
    session.execute(text(f"SET LOCAL statement_timeout = {ms}"))
    session.execute(text(f"SET LOCAL lock_timeout = {ms}"))


@contextmanager
def atomic(timeout_ms=None, failure_message="Could not complete operation", conflict_message=None):
    """
    Runs the block as one transaction on ``db.session``.

    - commit on normal exit, rollback on every other exit path
    - LibraryError raised inside the block is re-raised as is
    - IntegrityError -> Conflict(conflict_message) when one is given
    - OperationalError (connection lost, statement/lock timeout) -> TransientError
    - any other SQLAlchemyError -> InternalError(failure_message)
    """
    session = db.session
    if timeout_ms is None:
        timeout_ms = current_app.config.get("LENDING_TX_TIMEOUT_MS")

    try:
        _apply_deadline(session, timeout_ms)
        yield session
        session.commit()
    except LibraryError:
        session.rollback()
        raise
    except IntegrityError as e:
        session.rollback()
        if conflict_message:
            raise Conflict(conflict_message) from e
        current_app.logger.error(f"[db] {failure_message}: {e}")
        raise InternalError(failure_message) from e
    except OperationalError as e:
        session.rollback()
        current_app.logger.error(f"[db] transient storage error: {e}")
        raise TransientError("Storage temporarily unavailable, please retry") from e
    except SQLAlchemyError as e:
        session.rollback()
        current_app.logger.error(f"[db] {failure_message}: {e}")
        raise InternalError(failure_message) from e
    except Exception:
        session.rollback()
        raise
