import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


ROOT = Path(__file__).resolve().parents[1]
DB_PATH = (ROOT / "test.db").resolve()
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = f"sqlite:///{DB_PATH.as_posix()}"

from app.core.config import Settings  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.main import create_app  # noqa: E402
import app.models  # noqa: E402,F401


@pytest.fixture()
def settings(tmp_path):
    return Settings(database_url=f"sqlite:///{(tmp_path / 'test.db').as_posix()}")


@pytest.fixture()
def api_app(settings):
    return create_app(settings)


@pytest.fixture()
def db(api_app):
    engine = api_app.state.engine
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = api_app.state.session_factory()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def client(api_app, db):
    with TestClient(api_app) as test_client:
        yield test_client
