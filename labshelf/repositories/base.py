"""Base repository with shared lookup and transaction helpers.

Subclasses specify model_class and not_found_error; the base provides the
common lookups plus ``commit()``, which turns driver failures into
``DatabaseError`` after rolling the session back.
"""

import logging
from typing import TypeVar, Generic, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, Query

from ..database import Base
from ..exceptions import DatabaseError, ShelfException

ModelT = TypeVar("ModelT", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class:     The SQLAlchemy model
        not_found_error: Exception class to raise from get_by_id
    """

    model_class: Type[ModelT]
    not_found_error: Type[ShelfException]

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self) -> Query:
        return self.db.query(self.model_class)

    def get_by_id(self, entity_id: str) -> ModelT:
        """Get entity by primary key. Raises not_found_error if missing."""
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise self.not_found_error(entity_id)
        return entity

    def get_by_id_optional(self, entity_id: str) -> Optional[ModelT]:
        try:
            return self._base_query().filter(self.model_class.id == entity_id).first()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to load {self.model_class.__name__} {entity_id}", e) from e

    def refresh(self, entity: ModelT) -> ModelT:
        """Flush, then reload *entity*'s columns from the database."""
        self.flush(f"save {self.model_class.__name__}")
        try:
            self.db.refresh(entity)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to reload {self.model_class.__name__} {entity.id}", e) from e
        return entity

    def flush(self, action: str) -> None:
        """Flush pending changes so generated values and constraints are checked."""
        try:
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(f"Failed to {action}", e) from e

    def commit(self, action: str) -> None:
        """Commit the session; on failure roll back and raise ``DatabaseError``."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Commit failed while trying to {action}", extra={"error": str(e)})
            raise DatabaseError(f"Failed to {action}", e) from e
