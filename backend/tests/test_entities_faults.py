from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_entity_repo
from app.repositories.exceptions import DatabaseError
from app.repositories.memory_repo import MemoryEntityRepo

BASE = "/api/v1/entities"


class _FailingRepo(MemoryEntityRepo):
    def get_all(self):
        raise DatabaseError("get_all")

    def create(self, name):
        raise RuntimeError("driver exploded with secret detail")


@pytest.fixture()
def memory_client(api_app):
    repo = MemoryEntityRepo()
    api_app.dependency_overrides[get_entity_repo] = lambda: repo
    with TestClient(api_app) as test_client:
        yield test_client
    api_app.dependency_overrides.clear()


@pytest.fixture()
def failing_client(api_app):
    api_app.dependency_overrides[get_entity_repo] = _FailingRepo
    with TestClient(api_app, raise_server_exceptions=False) as test_client:
        yield test_client
    api_app.dependency_overrides.clear()


def test_memory_repository_satisfies_the_http_contract(memory_client):
    created = memory_client.post(BASE, json={"name": "Test Entity"}).json()["data"]

    updated = memory_client.put(f"{BASE}/{created['id']}", json={"name": "Updated"})
    assert updated.status_code == 200
    assert datetime.fromisoformat(updated.json()["data"]["updated_at"]) > datetime.fromisoformat(
        created["updated_at"]
    )

    assert memory_client.delete(f"{BASE}/{created['id']}").status_code == 204
    assert memory_client.get(f"{BASE}/{created['id']}").status_code == 404


def test_database_error_maps_to_500(failing_client):
    response = failing_client.get(BASE)

    assert response.status_code == 500
    assert response.json() == {
        "error": {
            "code": 500,
            "message": "Database error",
            "details": "An error occurred while accessing the database",
        }
    }


def test_unrecognized_failure_falls_back_to_database_error(failing_client):
    response = failing_client.post(
        BASE, json={"name": "Test Entity"}, headers={"X-Request-ID": "req-1"}
    )

    assert response.status_code == 500
    assert response.json()["error"]["message"] == "Database error"
    assert "secret" not in response.text
    assert response.headers["X-Request-ID"] == "req-1"
