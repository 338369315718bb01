from httpx import AsyncClient

from app.api.middleware import get_request_id


async def test_request_id_is_generated(client: AsyncClient) -> None:
    response = await client.get("/api/health")

    assert len(response.headers["X-Request-ID"]) == 36


async def test_incoming_request_id_is_reused(client: AsyncClient) -> None:
    response = await client.get("/api/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


async def test_content_language_header(client: AsyncClient) -> None:
    response = await client.get("/api/health", headers={"Accept-Language": "ru"})

    assert response.headers["Content-Language"] == "ru"


def test_request_id_outside_request() -> None:
    assert get_request_id() == ""
