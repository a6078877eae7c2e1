import pytest
from httpx import ASGITransport, AsyncClient


@pytest.mark.asyncio
async def test_health_check(client):
    """Test public health endpoint"""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_root(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"status": "running", "service": "vidrelay", "version": "1.0.0"}


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    generated = await client.get("/health")
    supplied = await client.get("/health", headers={"X-Request-ID": "trace-1"})

    assert generated.headers["x-request-id"]
    assert supplied.headers["x-request-id"] == "trace-1"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_shape(client):
    response = await client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


@pytest.mark.asyncio
async def test_unhandled_exception_is_generic_500(app):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret internals")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"error": "An unexpected error occurred"}


@pytest.mark.asyncio
async def test_cors_headers(client):
    response = await client.get("/health", headers={"Origin": "http://localhost:3000"})
    assert response.headers["access-control-allow-origin"] == "*"
