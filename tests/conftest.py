from typing import Generator
import pytest

from storefront.config import Settings
from storefront.context import create_context
from storefront.main import app, get_context
from storefront.storage import LocalStorage


@pytest.fixture(scope="function")
def settings() -> Settings:
    # In-memory storage; cheap bcrypt rounds keep the suite fast
    return Settings(storage_path=None, bcrypt_rounds=4)


@pytest.fixture(scope="function")
def storage() -> LocalStorage:
    return LocalStorage()


@pytest.fixture(scope="function")
def ctx(settings, storage) -> Generator:
    context = create_context(settings, storage)
    try:
        yield context
    finally:
        context.close()


@pytest.fixture(scope="function")
def store(ctx):
    return ctx.store


@pytest.fixture(scope="function")
def client(ctx):
    # Override dependency to use the same context
    app.dependency_overrides[get_context] = lambda: ctx
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
