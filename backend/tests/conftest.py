import pytest
from fastapi.testclient import TestClient

from warehouse.config import Settings
from warehouse.main import create_app
from warehouse.storage import DocumentStore


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def store(data_dir):
    return DocumentStore(data_dir)


@pytest.fixture
def settings(data_dir):
    return Settings(DATA_DIR=data_dir, LOG_LEVEL="DEBUG")


@pytest.fixture
def client(settings, store):
    with TestClient(create_app(settings=settings, store=store)) as c:
        yield c
