import os
import tempfile

# Settings are read once at import time, so the test database has to be
# configured before anything from tinylink is imported.
_db_dir = tempfile.mkdtemp(prefix="tinylink-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'tinylink.db')}"
os.environ["BASE_URL"] = "http://sho.rt"
os.environ["ENVIRONMENT"] = "test"

import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from tinylink.database import AsyncSessionLocal, Base, engine, init_models
from tinylink.main import app

BASE_URL = os.environ["BASE_URL"]

@pytest.fixture(autouse=True)
async def database() -> AsyncGenerator[None, None]:
    # Fresh tables for every test; ASGITransport does not run the app lifespan.
    await init_models()
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled connections belong to this test's event loop
    await engine.dispose()

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session

@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    async with ASGITransport(app=app) as transport:
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
