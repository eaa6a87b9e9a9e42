# backend/barberbook/repositories/base_repository.py
"""
Base repository for barberbook.

Repositories own the queries; services own the transactions. Nothing here
commits except ``transaction()``, which a service opens around a unit of work.
SQLAlchemy errors are re-raised as RepositoryException with the original
error chained, so callers can still inspect the driver's SQLSTATE.
"""

from contextlib import contextmanager
import logging
from typing import Any, Generic, Iterator, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """Primary-key lookup, insert and transaction scope for one mapped model."""

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def dialect_name(self) -> str:
        """Name of the dialect the session is bound to (``postgresql``, ``sqlite``)."""
        return self.db.get_bind().dialect.name

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit on success, roll back on any error."""
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as exc:
            self.logger.error("Repository transaction failed: %s", exc)
            self.db.rollback()
            raise
        except Exception:
            self.db.rollback()
            raise

    def get_by_id(self, entity_id: str) -> Optional[T]:
        try:
            return self.db.query(self.model).filter(self.model.id == entity_id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading {self.model.__name__} {entity_id}: {str(e)}")
            raise RepositoryException(f"Failed to load {self.model.__name__}: {str(e)}") from e

    def create(self, **kwargs: Any) -> T:
        """
        Add a new row and flush it so constraint violations surface here.

        The session is rolled back on failure; the caller's transaction is over.
        """
        entity = self.model(**kwargs)
        try:
            self.db.add(entity)
            self.db.flush()
            return entity
        except IntegrityError as exc:
            self.logger.warning("Integrity error creating %s: %s", self.model.__name__, exc)
            self.db.rollback()
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}") from e

    def flush(self) -> None:
        self.db.flush()
