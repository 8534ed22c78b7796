"""Tests for middleware — security headers, request ids."""

import pytest


@pytest.mark.asyncio
async def test_security_headers_on_health(client):
    r = await client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"


@pytest.mark.asyncio
async def test_request_id_generated(client):
    r1 = await client.get("/api/v1/teams")
    r2 = await client.get("/api/v1/teams")
    assert "X-Request-ID" in r1.headers
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    r = await client.get("/api/v1/teams", headers={"X-Request-ID": "draft-night-42"})
    assert r.headers["X-Request-ID"] == "draft-night-42"


@pytest.mark.asyncio
async def test_no_hsts_on_http(client):
    r = await client.get("/api/v1/teams")
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_headers_on_plain_text_error(client):
    """The draft stream's 400 goes through the same middleware stack."""
    r = await client.get("/api/draft-stream/")
    assert r.status_code == 400
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in r.headers
