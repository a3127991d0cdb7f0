from typing import Generator

from sqlalchemy.orm import Session

from lexibox.db import session as db_session


def get_db() -> Generator[Session, None, None]:
    """Provide one SQLAlchemy session per request.

    The session factory is looked up at call time so ``configure_database``
    can swap engines (SQLite fallback, tests) after this module is imported.
    The session is always closed, including when the handler raises.
    """

    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()
