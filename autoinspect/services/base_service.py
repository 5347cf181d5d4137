"""Store services run inside a session handed to them by the scan pass."""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from autoinspect.core.exceptions import DatabaseError


class BaseService:
    """Wraps a caller-owned session; the caller opens and closes it."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def commit(self) -> None:
        """Commit the pending write, rolling back and raising DatabaseError if it fails."""
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise DatabaseError(f"{type(self).__name__} commit failed: {exc}") from exc
