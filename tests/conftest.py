# File: tests/conftest.py
import json
from types import SimpleNamespace
from typing import Any, Dict, Tuple

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from app.settings import Settings

SAMPLE_HTML = (
    '<html lang="en"><head><title>Hi</title>'
    '<meta name="description" content="Desc"></head>'
    '<body><a href="/x">a</a><a href="https://other.com">b</a></body></html>'
)


def lighthouse_body(score: Any = 0.87, **overrides: Any) -> str:
    """A PSI-shaped JSON body with all five metrics."""
    audits = {
        "first-contentful-paint": {"numericValue": 1200.5},
        "largest-contentful-paint": {"numericValue": 2400.0},
        "cumulative-layout-shift": {"numericValue": 0.05},
        "total-blocking-time": {"numericValue": 150},
        "speed-index": {"numericValue": 3100.0},
    }
    audits.update(overrides)
    return json.dumps(
        {
            "lighthouseResult": {
                "categories": {"performance": {"score": score}},
                "audits": audits,
            }
        }
    )


@pytest.fixture()
def make_settings():
    """Settings factory that ignores the environment's .env file."""

    def _make(**overrides: Any) -> Settings:
        values: Dict[str, Any] = {
            "USER_AGENT": "TestAgent/1.0",
            "FETCH_TIMEOUT_SECONDS": 2.0,
            "PSI_TIMEOUT_SECONDS": 2.0,
            "PSI_API_KEY": "",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest_asyncio.fixture
async def psi_server():
    """
    Local stand-in for the PageSpeed Insights endpoint.

    Set `responses[strategy] = (status, body)` before the call; every request's
    query is recorded in `seen`.
    """
    responses: Dict[str, Tuple[int, str]] = {}
    seen: list = []

    async def handle(request: web.Request) -> web.Response:
        seen.append(dict(request.query))
        strategy = request.query.get("strategy", "")
        status, body = responses.get(strategy, (500, "{}"))
        if callable(body):
            body = body(request)
        return web.Response(status=status, text=body, content_type="application/json")

    app = web.Application()
    app.router.add_get("/runPagespeed", handle)
    server = TestServer(app, access_log=None)
    await server.start_server()
    try:
        yield SimpleNamespace(
            endpoint=str(server.make_url("/runPagespeed")),
            responses=responses,
            seen=seen,
        )
    finally:
        await server.close()


@pytest.fixture()
def sample_html() -> str:
    return SAMPLE_HTML


@pytest.fixture()
def psi_body():
    return lighthouse_body
