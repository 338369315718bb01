import os

# Must be set before the application settings are imported
os.environ["ENABLE_TRACING"] = "false"
os.environ["JSON_LOGS"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, Optional  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.dependencies import get_db_session  # noqa: E402
from app.db import models  # noqa: E402,F401
from app.db.session import Base, create_engine, create_session_factory  # noqa: E402
from app.main import app  # noqa: E402

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    if TEST_DATABASE_URL.startswith("sqlite"):
        # A single shared connection keeps the in-memory database alive
        engine = create_engine(TEST_DATABASE_URL, poolclass=StaticPool, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = create_session_factory(db_engine)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides = {}


def build_variant_payload(**overrides: Any) -> Dict[str, Any]:
    variant: Dict[str, Any] = {
        "size": "M",
        "color": "Black",
        "sku": "TS-M-BLK",
        "quantity": 5,
        "price": 19.99,
        "attributes": [{"name": "Material", "value": "Cotton"}],
        "images": ["https://cdn.example.com/ts-black-1.jpg", "https://cdn.example.com/ts-black-2.jpg"],
    }
    variant.update(overrides)
    return variant


def build_product_payload(category_id: str, **overrides: Any) -> Dict[str, Any]:
    product: Dict[str, Any] = {
        "name": "T-Shirt",
        "description": "Plain cotton tee",
        "categoryId": category_id,
        "isActive": True,
        "variants": [build_variant_payload()],
    }
    product.update(overrides)
    return product


@pytest.fixture
def make_category(client: AsyncClient) -> Callable[..., Awaitable[Dict[str, Any]]]:
    async def _make(name: str, parent_id: Optional[str] = None) -> Dict[str, Any]:
        response = await client.post("/api/v1/categories", json={"name": name, "parentId": parent_id})
        assert response.status_code == 200, response.text
        return response.json()

    return _make


@pytest.fixture
def make_product(client: AsyncClient) -> Callable[..., Awaitable[Dict[str, Any]]]:
    async def _make(category_id: str, **overrides: Any) -> Dict[str, Any]:
        response = await client.post("/api/v1/products", json=build_product_payload(category_id, **overrides))
        assert response.status_code == 200, response.text
        return response.json()

    return _make


@pytest.fixture
def variant_payload() -> Callable[..., Dict[str, Any]]:
    return build_variant_payload


@pytest.fixture
def product_payload() -> Callable[..., Dict[str, Any]]:
    return build_product_payload
