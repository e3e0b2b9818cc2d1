# app/audit/links.py
from typing import Optional, Union
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup

from app.schemas import LinkCounts

SKIP_SCHEMES = ("mailto:", "tel:", "javascript:", "#")
DEFAULT_PORTS = {"http": 80, "https": 443}


def _is_skippable(href: str) -> bool:
    if not href:
        return True
    return any(href.lower().startswith(s) for s in SKIP_SCHEMES)


def _host(url: str) -> Optional[str]:
    """Lower-cased host plus explicit port, or None when the URL is malformed."""
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None
    host = parts.hostname or ""
    if port is None or DEFAULT_PORTS.get(parts.scheme.lower()) == port:
        return host
    return f"{host}:{port}"


def _rel_tokens(value) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        value = " ".join(str(v) for v in value)
    return str(value).lower().split()


def classify_links(markup: Union[str, BeautifulSoup], page_url: str) -> LinkCounts:
    """
    Count the page's anchors as internal/external relative to the page host,
    plus how many of them carry rel="nofollow".
    """
    soup = markup if isinstance(markup, BeautifulSoup) else BeautifulSoup(markup or "", "html.parser")
    base_host = _host(page_url)

    internal = external = nofollow = 0

    for a in soup.find_all("a", href=True):
        href = str(a.get("href")).strip()
        if _is_skippable(href):
            continue

        try:
            abs_url = urljoin(page_url, href)
        except ValueError:
            continue
        host = _host(abs_url)
        if host is None:
            continue

        if host == base_host:
            internal += 1
        else:
            external += 1

        if "nofollow" in _rel_tokens(a.get("rel")):
            nofollow += 1

    return LinkCounts(internal=internal, external=external, nofollow=nofollow)
