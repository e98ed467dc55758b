import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.core.config import Settings
from app.main import create_app


def test_startup_aborts_when_database_is_unreachable():
    api_app = create_app(Settings(database_url="sqlite:////nonexistent-dir/entities.db"))

    with pytest.raises(OperationalError):
        with TestClient(api_app):
            pass
