import logging

import httpx

from app.core.db import get_session
from app.main import app as application


async def broken_session():
    raise RuntimeError("database is gone")
    yield  # pragma: no cover


async def test_unexpected_error_becomes_500_message(caplog):
    application.dependency_overrides[get_session] = broken_session
    # ServerErrorMiddleware отдаёт ответ и пробрасывает исключение дальше
    transport = httpx.ASGITransport(app=application, raise_app_exceptions=False)
    try:
        with caplog.at_level(logging.ERROR, logger="app.main"):
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
                resp = await ac.get("/rooms/validate", params={"code": "ABC123"})
    finally:
        application.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error"}
    assert "Unhandled error on GET /rooms/validate" in caplog.text
    # текст исключения наружу не уходит
    assert "database is gone" not in resp.text
