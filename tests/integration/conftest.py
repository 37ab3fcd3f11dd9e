"""HTTP fixtures: the FastAPI app with test database, storage and clock"""

import pytest
from httpx import ASGITransport, AsyncClient

from document_service.api.dependencies import get_category_cache, get_clock
from document_service.core.cache import TTLCache
from document_service.infrastructure.database.client import get_db
from document_service.infrastructure.storage import LocalStorage, get_storage_provider
from document_service.main import app


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(base_path=str(tmp_path / "blobs"), signing_key="integration-key")


@pytest.fixture
async def client(db, session_factory, storage, clock):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    cache = TTLCache(300)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_provider] = lambda: storage
    app.dependency_overrides[get_category_cache] = lambda: cache
    app.dependency_overrides[get_clock] = lambda: clock

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http

    app.dependency_overrides.clear()
