# app/audit/psi.py
import asyncio
import json
import logging
import re
from typing import Any, Optional, Tuple

import aiohttp
from aiohttp import ClientTimeout
from aiohttp.client_exceptions import ClientError

from app.schemas import PerformanceInsight, PerformanceInsightError, PerformanceMetrics
from app.settings import Settings, get_settings

logger = logging.getLogger(__name__)

CATEGORY = "performance"

# metric id in lighthouseResult.audits -> PerformanceMetrics field
METRIC_AUDITS = {
    "first-contentful-paint": "first_contentful_paint_ms",
    "largest-contentful-paint": "largest_contentful_paint_ms",
    "cumulative-layout-shift": "cumulative_layout_shift",
    "total-blocking-time": "total_blocking_time_ms",
    "speed-index": "speed_index_ms",
}

_KEY_PARAM = re.compile(r"key=[^&#\s\"'<>]*", re.IGNORECASE)
_BODY_SNIPPET = 500

InsightResult = Tuple[Optional[PerformanceInsight], Optional[PerformanceInsightError]]


def redact_api_key(text: Any, api_key: Optional[str] = None) -> str:
    """Replace every key=<value> query parameter (and the literal key, if known) with key=REDACTED."""
    s = "" if text is None else str(text)
    s = _KEY_PARAM.sub("key=REDACTED", s)
    if api_key:
        s = s.replace(api_key, "REDACTED")
    return s


# ---------------------------------------------------------------------------
# Permissive decoding: shape mismatches become None, never exceptions.
# ---------------------------------------------------------------------------

def _decode_json(body: str) -> Any:
    try:
        return json.loads(body)
    except (TypeError, ValueError):
        return None


def _dig(obj: Any, *keys: str) -> Any:
    for k in keys:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(k)
    return obj


def _number(v: Any) -> Optional[float]:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    return float(v)


def _score(v: Any) -> Optional[float]:
    n = _number(v)
    if n is None or not 0.0 <= n <= 1.0:
        return None
    return n


def _int(v: Any) -> Optional[int]:
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    return None


def _str(v: Any) -> Optional[str]:
    return v if isinstance(v, str) and v.strip() else None


def parse_insight(payload: Any, strategy: str) -> Optional[PerformanceInsight]:
    """Build a PerformanceInsight from a PSI body, or None when there is no lighthouseResult."""
    lighthouse = _dig(payload, "lighthouseResult")
    if not isinstance(lighthouse, dict):
        return None

    metrics = {
        field: _number(_dig(lighthouse, "audits", audit_id, "numericValue"))
        for audit_id, field in METRIC_AUDITS.items()
    }
    return PerformanceInsight(
        strategy=strategy,
        performance_score=_score(_dig(lighthouse, "categories", CATEGORY, "score")),
        metrics=PerformanceMetrics(**metrics),
    )


def _error_from_response(status: int, reason: Optional[str], body: str, payload: Any, api_key: str) -> PerformanceInsightError:
    api_error = _dig(payload, "error")
    code = _int(_dig(api_error, "code")) if isinstance(api_error, dict) else None
    status_text = _str(_dig(api_error, "status")) if isinstance(api_error, dict) else None
    message = _str(_dig(api_error, "message")) if isinstance(api_error, dict) else None

    if message is None:
        if 200 <= status < 300:
            message = "Response did not contain a lighthouse result"
        else:
            message = body[:_BODY_SNIPPET] or f"HTTP {status}"

    return PerformanceInsightError(
        code=code if code is not None else status,
        status_text=status_text or reason,
        message=redact_api_key(message, api_key),
    )


async def _one_strategy(
    session: aiohttp.ClientSession,
    endpoint: str,
    url: str,
    strategy: str,
    api_key: str,
) -> InsightResult:
    params = [
        ("url", url),
        ("strategy", strategy),
        ("category", CATEGORY),
    ]
    if api_key:
        params.append(("key", api_key))

    async with session.get(endpoint, params=params) as resp:
        body = await resp.text(errors="replace")
        payload = _decode_json(body)

        if 200 <= resp.status < 300:
            insight = parse_insight(payload, strategy)
            if insight is not None:
                return insight, None

        return None, _error_from_response(resp.status, resp.reason, body, payload, api_key)


async def fetch_insight(target_url: str, *, settings: Optional[Settings] = None) -> InsightResult:
    """
    Query PageSpeed Insights for `target_url`, trying each strategy in order.

    - The first usable response wins; remaining strategies are skipped.
    - A failed strategy records its error and moves on; if all fail the
      last error is returned.
    - Nothing raises: transport failures come back as (None, error).
    - Every error message is redacted before it is stored or logged.
    """
    settings = settings or get_settings()
    api_key = settings.PSI_API_KEY
    client_timeout = ClientTimeout(total=settings.PSI_TIMEOUT_SECONDS)

    last_error: Optional[PerformanceInsightError] = None

    try:
        async with aiohttp.ClientSession(timeout=client_timeout, raise_for_status=False) as session:
            for strategy in settings.PSI_STRATEGIES:
                insight, error = await _one_strategy(
                    session, settings.PSI_ENDPOINT, target_url, strategy, api_key
                )
                if insight is not None:
                    logger.info("[PSI] %s result for %s (score=%s)", strategy, target_url, insight.performance_score)
                    return insight, None

                last_error = error
                logger.warning(
                    "[PSI] %s strategy failed for %s: HTTP %s %s",
                    strategy,
                    target_url,
                    error.code,
                    error.message,
                )
    except asyncio.TimeoutError:
        message = f"PageSpeed Insights timed out after {settings.PSI_TIMEOUT_SECONDS:g}s"
        logger.warning("[PSI] %s for %s", message, target_url)
        return None, PerformanceInsightError(message=message)
    except ClientError as ce:
        message = redact_api_key(f"{ce.__class__.__name__}: {ce}", api_key)
        logger.warning("[PSI] ClientError for %s: %s", target_url, message)
        return None, PerformanceInsightError(message=message)
    except Exception as e:
        message = redact_api_key(f"{e.__class__.__name__}: {e}", api_key)
        logger.error("[PSI] Unexpected error for %s: %s", target_url, message)
        return None, PerformanceInsightError(message=message)

    return None, last_error
