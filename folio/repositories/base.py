"""Base repository with shared get-by-ID patterns.

Repositories stage changes on the session but never commit: the
coordinator decides when each store write becomes durable.
"""

from typing import TypeVar, Generic, Iterable, List, Optional, Type
from sqlalchemy.orm import Session, Query

from ..database import Base
from ..exceptions import FolioException

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class:     The SQLAlchemy model
        not_found_error: Exception class to raise from get_by_id
    """

    model_class: Type[ModelT]
    not_found_error: Type[FolioException]

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
        return self._base_query().filter(self.model_class.id == entity_id).first()

    def get_many(self, entity_ids: Iterable[str]) -> List[ModelT]:
        """Rows for *entity_ids* ordered by name; unknown ids are skipped."""
        ids = list(entity_ids)
        if not ids:
            return []
        return (
            self._base_query()
            .filter(self.model_class.id.in_(ids))
            .order_by(self.model_class.name, self.model_class.id)
            .all()
        )

    def add(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        return entity
