from datetime import datetime, timedelta, timezone
from typing import Dict

from app.models.entity import Entity
from app.repositories.entity_repo import EntityRepository
from app.repositories.exceptions import RecordNotFoundError


class MemoryEntityRepo(EntityRepository):
    """
    In-memory stand-in for SqlAlchemyEntityRepo.

    Rows are kept as plain dicts and every read returns a fresh, detached
    Entity, so callers never share state with the store.
    """

    def __init__(self):
        self._next_id = 1
        self.rows: Dict[int, dict] = {}

    @staticmethod
    def _to_entity(row: dict) -> Entity:
        return Entity(**row)

    def create(self, name: str) -> Entity:
        now = datetime.now(timezone.utc)
        row = {"id": self._next_id, "name": name, "created_at": now, "updated_at": now}
        self._next_id += 1
        self.rows[row["id"]] = row
        return self._to_entity(row)

    def get_by_id(self, entity_id: int) -> Entity | None:
        row = self.rows.get(entity_id)
        return self._to_entity(row) if row else None

    def get_all(self) -> list[Entity]:
        return [self._to_entity(self.rows[k]) for k in sorted(self.rows)]

    def update(self, entity_id: int, name: str) -> Entity:
        row = self.rows.get(entity_id)
        if row is None:
            raise RecordNotFoundError(entity_id)
        now = datetime.now(timezone.utc)
        # Keep updated_at strictly increasing even when the clock has not ticked.
        if now <= row["updated_at"]:
            now = row["updated_at"] + timedelta(microseconds=1)
        row["name"] = name
        row["updated_at"] = now
        return self._to_entity(row)

    def delete(self, entity_id: int) -> None:
        if self.rows.pop(entity_id, None) is None:
            raise RecordNotFoundError(entity_id)
