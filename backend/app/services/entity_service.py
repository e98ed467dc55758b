import logging

from app.models.entity import Entity
from app.repositories.entity_repo import EntityRepository
from app.schemas.entity import EntityRequest

logger = logging.getLogger(__name__)


class EntityNotFoundError(Exception):
    """The requested entity id has no stored row."""

    def __init__(self, entity_id: int):
        super().__init__(f"Entity {entity_id} not found")
        self.entity_id = entity_id


class EntityService:
    """Business rules above raw persistence.

    Updates and deletes confirm the entity exists before touching it. The
    check and the write are separate storage calls and are not wrapped in a
    transaction; a delete racing in between surfaces as the repository's
    ``RecordNotFoundError``.
    """

    def __init__(self, repo: EntityRepository):
        self.repo = repo

    def create(self, payload: EntityRequest) -> Entity:
        entity = self.repo.create(payload.name)
        logger.info("Created entity %s", entity.id)
        return entity

    def get_by_id(self, entity_id: int) -> Entity | None:
        return self.repo.get_by_id(entity_id)

    def get_all(self) -> list[Entity]:
        return self.repo.get_all()

    def _get_or_fail(self, entity_id: int) -> Entity:
        entity = self.repo.get_by_id(entity_id)
        if entity is None:
            raise EntityNotFoundError(entity_id)
        return entity

    def update(self, entity_id: int, payload: EntityRequest) -> Entity:
        self._get_or_fail(entity_id)
        entity = self.repo.update(entity_id, payload.name)
        logger.info("Updated entity %s", entity_id)
        return entity

    def delete(self, entity_id: int) -> None:
        self._get_or_fail(entity_id)
        self.repo.delete(entity_id)
        logger.info("Deleted entity %s", entity_id)
