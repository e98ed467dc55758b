import pytest

from app.repositories.exceptions import RecordNotFoundError
from app.repositories.memory_repo import MemoryEntityRepo
from app.schemas.entity import EntityRequest
from app.services.entity_service import EntityNotFoundError, EntityService


@pytest.fixture()
def repo():
    return MemoryEntityRepo()


@pytest.fixture()
def service(repo):
    return EntityService(repo)


def test_create_persists_through_repository(service, repo):
    entity = service.create(EntityRequest(name="Test Entity"))

    assert entity.id == 1
    assert entity.created_at == entity.updated_at
    assert repo.get_by_id(entity.id).name == "Test Entity"


def test_get_by_id_and_get_all_pass_through(service):
    first = service.create(EntityRequest(name="a"))
    second = service.create(EntityRequest(name="b"))

    assert service.get_by_id(first.id).name == "a"
    assert service.get_by_id(42) is None
    assert [e.id for e in service.get_all()] == [first.id, second.id]


def test_update_existing_entity(service):
    created = service.create(EntityRequest(name="Test Entity"))

    updated = service.update(created.id, EntityRequest(name="Updated"))

    assert updated.name == "Updated"
    assert updated.created_at == created.created_at
    assert updated.updated_at > created.updated_at


def test_update_missing_entity_raises_entity_not_found(service):
    with pytest.raises(EntityNotFoundError) as exc_info:
        service.update(999999, EntityRequest(name="Updated"))
    assert exc_info.value.entity_id == 999999


def test_delete_existing_entity(service):
    created = service.create(EntityRequest(name="Test Entity"))

    service.delete(created.id)

    assert service.get_by_id(created.id) is None


def test_delete_missing_entity_raises_entity_not_found(service):
    with pytest.raises(EntityNotFoundError):
        service.delete(999999)


def test_returned_entities_are_detached_copies(service):
    created = service.create(EntityRequest(name="Original"))
    created.name = "Mutated locally"

    assert service.get_by_id(created.id).name == "Original"


class _DeletedBetweenCheckAndWrite(MemoryEntityRepo):
    """Simulates another request deleting the row after the existence check."""

    def update(self, entity_id, name):
        self.rows.pop(entity_id, None)
        return super().update(entity_id, name)

    def delete(self, entity_id):
        self.rows.pop(entity_id, None)
        return super().delete(entity_id)


def test_concurrent_delete_surfaces_repository_not_found():
    repo = _DeletedBetweenCheckAndWrite()
    service = EntityService(repo)
    created = service.create(EntityRequest(name="Racy"))

    with pytest.raises(RecordNotFoundError):
        service.update(created.id, EntityRequest(name="Updated"))

    again = service.create(EntityRequest(name="Racy"))
    with pytest.raises(RecordNotFoundError):
        service.delete(again.id)
