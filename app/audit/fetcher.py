# app/audit/fetcher.py
import asyncio
import logging
from typing import Optional

import httpx

from app.audit.errors import FetchError, FetchErrorKind
from app.settings import Settings, get_settings

logger = logging.getLogger(__name__)


async def _one_attempt(client: httpx.AsyncClient, url: str) -> httpx.Response:
    res = await client.get(url, follow_redirects=True)
    res.raise_for_status()
    return res


async def fetch_page(
    url: str,
    *,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """
    GET the page markup.

    - Every attempt is capped at FETCH_TIMEOUT_SECONDS of total time; a timeout
      fails immediately with FetchErrorKind.TIMEOUT.
    - Connection errors and non-2xx responses are retried FETCH_RETRIES times,
      then fail with FetchErrorKind.UNREACHABLE.
    """
    settings = settings or get_settings()
    timeout_s = settings.FETCH_TIMEOUT_SECONDS
    attempts = settings.FETCH_RETRIES + 1
    headers = {
        "User-Agent": settings.USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }

    last_error = "no attempt made"
    last_status: Optional[int] = None

    async with httpx.AsyncClient(headers=headers, timeout=timeout_s, transport=transport) as client:
        for attempt in range(1, attempts + 1):
            try:
                res = await asyncio.wait_for(_one_attempt(client, url), timeout=timeout_s)
                return res.text
            except (asyncio.TimeoutError, httpx.TimeoutException) as e:
                logger.warning("[FETCH] Timed out after %.1fs for %s", timeout_s, url)
                raise FetchError(
                    FetchErrorKind.TIMEOUT, f"Timed out after {timeout_s:g}s fetching {url}"
                ) from e
            except httpx.InvalidURL as e:
                # not an HTTPError; a retry would fail the same way
                logger.warning("[FETCH] Invalid URL %s: %s", url, e)
                raise FetchError(FetchErrorKind.UNREACHABLE, f"Could not fetch {url}: {e}") from e
            except httpx.HTTPStatusError as e:
                last_status = e.response.status_code
                last_error = f"HTTP {last_status}"
            except httpx.HTTPError as e:
                last_status = None
                last_error = str(e) or e.__class__.__name__

            logger.warning("[FETCH] Attempt %d/%d failed for %s: %s", attempt, attempts, url, last_error)

    raise FetchError(
        FetchErrorKind.UNREACHABLE,
        f"Could not fetch {url}: {last_error}",
        status_code=last_status,
    )
