import httpx
import pytest

from app.audit import runner
from app.audit.errors import AuditError, AuditErrorKind, FetchError, FetchErrorKind
from app.audit.runner import run_audit
from app.schemas import PerformanceInsight, PerformanceInsightError

PAGE = "https://site.com/page"


@pytest.fixture()
def html_transport(sample_html):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(200, text=sample_html)

    transport = httpx.MockTransport(handler)
    transport.calls = calls
    return transport


@pytest.fixture()
def fake_insight(monkeypatch):
    """Replace the PageSpeed call with a canned (insight, error) pair."""
    state = {"result": (None, None), "calls": []}

    async def _fake(url, *, settings=None):
        state["calls"].append(url)
        return state["result"]

    monkeypatch.setattr(runner, "fetch_insight", _fake)
    return state


@pytest.mark.asyncio()
async def test_end_to_end_report(make_settings, html_transport, fake_insight):
    fake_insight["result"] = (PerformanceInsight(strategy="desktop", performance_score=0.9), None)

    report = await run_audit(PAGE, settings=make_settings(), transport=html_transport)

    assert report.url == PAGE
    assert report.facts.title.ok is True
    assert report.facts.html_lang.ok is True
    assert report.facts.meta_description.ok is True
    assert report.facts.h1.ok is False
    assert report.facts.links.internal == 1
    assert report.facts.links.external == 1
    assert report.facts.counts.total_links == 2
    assert report.performance_insight.strategy == "desktop"
    assert report.performance_insight_error is None
    assert fake_insight["calls"] == [PAGE]
    assert html_transport.calls == [PAGE]


@pytest.mark.asyncio()
async def test_insight_failure_is_embedded_not_raised(make_settings, html_transport, fake_insight):
    fake_insight["result"] = (None, PerformanceInsightError(code=429, message="Quota exceeded"))

    report = await run_audit(PAGE, settings=make_settings(), transport=html_transport)

    assert report.performance_insight is None
    assert report.performance_insight_error.code == 429
    assert report.facts.title.value == "Hi"


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    "raw",
    ["", "not a url", "ftp://site.com/", "/page", "http://exa mple.com/", "http://a<b>.com/", "https://exa%zzmple.com"],
)
async def test_invalid_url_fails_before_any_network_call(make_settings, html_transport, fake_insight, raw):
    with pytest.raises(AuditError) as exc_info:
        await run_audit(raw, settings=make_settings(), transport=html_transport)

    assert exc_info.value.kind is AuditErrorKind.INVALID_URL
    assert exc_info.value.status_code == 400
    assert html_transport.calls == []
    assert fake_insight["calls"] == []


@pytest.mark.asyncio()
async def test_fetch_failure_maps_to_502(make_settings, fake_insight):
    transport = httpx.MockTransport(lambda request: httpx.Response(500))

    with pytest.raises(AuditError) as exc_info:
        await run_audit(PAGE, settings=make_settings(), transport=transport)

    err = exc_info.value
    assert err.kind is AuditErrorKind.FETCH_FAILED
    assert err.status_code == 502
    assert isinstance(err.__cause__, FetchError)
    assert err.__cause__.kind is FetchErrorKind.UNREACHABLE
    assert fake_insight["calls"] == []


@pytest.mark.asyncio()
async def test_surrounding_whitespace_is_ignored(make_settings, html_transport, fake_insight):
    report = await run_audit(f"  {PAGE} ", settings=make_settings(), transport=html_transport)
    assert report.url == PAGE


@pytest.mark.asyncio()
async def test_invalid_url_from_client_maps_to_502(make_settings, fake_insight):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.InvalidURL("bad host")

    with pytest.raises(AuditError) as exc_info:
        await run_audit(PAGE, settings=make_settings(), transport=httpx.MockTransport(handler))

    assert exc_info.value.kind is AuditErrorKind.FETCH_FAILED
    assert isinstance(exc_info.value.__cause__, FetchError)
