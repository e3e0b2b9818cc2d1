# app/audit/runner.py
import logging
import time
from typing import Optional

from app.audit.errors import AuditError, AuditErrorKind, FetchError
from app.audit.fetcher import fetch_page
from app.audit.psi import fetch_insight
from app.audit.seo import analyze_page, build_checks
from app.audit.validator import validate_url
from app.schemas import AuditReport, AuditRequest
from app.settings import Settings, get_settings

logger = logging.getLogger(__name__)


async def run_audit(raw_url: str, *, settings: Optional[Settings] = None, transport=None) -> AuditReport:
    """
    validate -> fetch -> analyze/classify -> PageSpeed Insights -> report.

    Raises AuditError for an invalid URL (before any network access) or when
    the page cannot be fetched or parsed. PageSpeed failures never raise;
    they end up in `performance_insight_error`.
    """
    settings = settings or get_settings()

    if not validate_url(raw_url):
        raise AuditError(AuditErrorKind.INVALID_URL, "Invalid or missing url")

    request = AuditRequest(target_url=raw_url.strip())
    url = request.target_url
    start = time.monotonic()
    logger.info("[AUDIT] Started: %s", url)

    try:
        html = await fetch_page(url, settings=settings, transport=transport)
        facts = analyze_page(html, url)
    except FetchError as e:
        logger.warning("[AUDIT] Fetch failed for %s (%s): %s", url, e.kind.value, e.message)
        raise AuditError(AuditErrorKind.FETCH_FAILED, "Fetch or parse failed") from e
    except Exception as e:
        logger.exception("[AUDIT] Parse failed for %s", url)
        raise AuditError(AuditErrorKind.FETCH_FAILED, "Fetch or parse failed") from e

    insight, insight_error = await fetch_insight(url, settings=settings)

    report = AuditReport(
        url=url,
        facts=build_checks(facts),
        performance_insight=insight,
        performance_insight_error=insight_error,
    )
    logger.info(
        "[AUDIT] Finished: %s in %.2fs (insight=%s)",
        url,
        time.monotonic() - start,
        insight.strategy if insight else "unavailable",
    )
    return report
