import os

import pytest
from fastapi.testclient import TestClient

# Default to the memory backend so importing the app never touches the filesystem
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from todolist.api.main import create_app  # noqa: E402
from todolist.api.repositories import InMemoryRepository, get_repository  # noqa: E402


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def app(repo):
    application = create_app()
    application.dependency_overrides[get_repository] = lambda: repo
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
