"""
Base repository for SQLAlchemy-backed persistence.

Write paths use the dialect's INSERT ... ON CONFLICT so that concurrent
deliveries of the same webhook converge without application locks.
Supported dialects: PostgreSQL (production) and SQLite (tests, local dev).
"""

import logging
from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from orgsync.db_base import Base

logger = logging.getLogger(__name__)

# Type variable for repository models
T = TypeVar("T", bound=Base)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class BaseRepository(Generic[T]):
    """Common plumbing shared by the entity repositories."""

    model: Type[T]

    def __init__(self, db_session: Session):
        """
        Initialize repository.

        Args:
            db_session: SQLAlchemy database session
        """
        self.db_session = db_session

    def _insert(self):
        """
        Build a dialect-specific INSERT for this repository's model.

        Raises:
            NotImplementedError: If the bound dialect has no ON CONFLICT support
        """
        dialect = self.db_session.get_bind().dialect.name
        insert = _DIALECT_INSERTS.get(dialect)
        if insert is None:
            raise NotImplementedError(
                f"Conditional writes are not supported for dialect {dialect!r}"
            )
        return insert(self.model)

    def get_by_id(self, entity_id: str) -> Optional[T]:
        """
        Get entity by internal ID.

        Args:
            entity_id: Internal UUID string

        Returns:
            Entity if found, None otherwise
        """
        return self.db_session.query(self.model).filter(
            self.model.id == entity_id
        ).first()
