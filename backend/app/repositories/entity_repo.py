import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.entity import Entity
from app.repositories.exceptions import DatabaseError, RecordNotFoundError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EntityRepository(ABC):
    """Persistence contract for entities.

    ``get_by_id`` reports absence with ``None``; ``update`` and ``delete``
    raise ``RecordNotFoundError`` when no row matches. Storage faults are
    raised as ``DatabaseError``.
    """

    @abstractmethod
    def create(self, name: str) -> Entity: ...

    @abstractmethod
    def get_by_id(self, entity_id: int) -> Entity | None: ...

    @abstractmethod
    def get_all(self) -> list[Entity]: ...

    @abstractmethod
    def update(self, entity_id: int, name: str) -> Entity: ...

    @abstractmethod
    def delete(self, entity_id: int) -> None: ...


class SqlAlchemyEntityRepo(EntityRepository):
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _storage_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Entity %s failed", operation)
            raise DatabaseError(operation) from exc

    def create(self, name: str) -> Entity:
        now = _utcnow()
        entity = Entity(name=name, created_at=now, updated_at=now)
        with self._storage_errors("create"):
            self.db.add(entity)
            self.db.commit()
            self.db.refresh(entity)
        return entity

    def get_by_id(self, entity_id: int) -> Entity | None:
        with self._storage_errors("get_by_id"):
            return self.db.get(Entity, entity_id)

    def get_all(self) -> list[Entity]:
        with self._storage_errors("get_all"):
            return list(self.db.scalars(select(Entity).order_by(Entity.id.asc())).all())

    def update(self, entity_id: int, name: str) -> Entity:
        with self._storage_errors("update"):
            result = self.db.execute(
                update(Entity)
                .where(Entity.id == entity_id)
                .values(name=name, updated_at=_utcnow())
            )
            if result.rowcount == 0:
                self.db.rollback()
                raise RecordNotFoundError(entity_id)
            self.db.commit()
            # Read-back is a separate statement; a concurrent delete can win here.
            entity = self.db.get(Entity, entity_id, populate_existing=True)
        if entity is None:
            raise RecordNotFoundError(entity_id)
        return entity

    def delete(self, entity_id: int) -> None:
        with self._storage_errors("delete"):
            result = self.db.execute(delete(Entity).where(Entity.id == entity_id))
            if result.rowcount == 0:
                self.db.rollback()
                raise RecordNotFoundError(entity_id)
            self.db.commit()
