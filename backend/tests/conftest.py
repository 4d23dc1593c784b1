import os
import tempfile

os.environ.setdefault("STORAGE_ROOT", tempfile.mkdtemp(prefix="slide-studio-"))
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DEFAULT_LLM_PROVIDER", "mock")
os.environ.setdefault("QUIZ_GENERATOR", "template")

import pytest
from fastapi.testclient import TestClient

from slide_studio.db import Base, engine
from slide_studio.main import app


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_tables):
    with TestClient(app) as test_client:
        yield test_client
