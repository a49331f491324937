import mongomock
import pytest
from fastapi.testclient import TestClient

import main

TOKEN = "test-token-0123456789"


@pytest.fixture
def db():
    return mongomock.MongoClient().prospera


@pytest.fixture
def api(db):
    main.app.dependency_overrides[main.get_db] = lambda: db
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def auth():
    return {"Authorization": f"Bearer {TOKEN}"}
