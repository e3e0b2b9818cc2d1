from typing import Optional

from bs4 import BeautifulSoup

from app.audit.links import classify_links
from app.schemas import CheckResult, OpenGraphChecks, PageChecks, PageCounts, PageFacts


def _text(tag) -> Optional[str]:
    if tag is None:
        return None
    return tag.get_text().strip()


def _attr(tag, name: str, strip: bool = False) -> Optional[str]:
    """Read one attribute from a tag that may be missing."""
    if tag is None:
        return None
    value = tag.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        value = " ".join(str(v) for v in value)
    return value.strip() if strip else value


def analyze_page(markup: str, page_url: str) -> PageFacts:
    """
    Extract on-page SEO facts from raw markup.

    The first matching element in document order wins for every field.
    Canonical and Open Graph values are taken verbatim; title, description,
    h1 and robots are trimmed. Blank values end up as None (see PageFacts).
    """
    soup = BeautifulSoup(markup or "", "html.parser")

    h1_tags = soup.find_all("h1")
    links = classify_links(soup, page_url)

    return PageFacts(
        title=_text(soup.find("title")),
        meta_description=_attr(soup.find("meta", attrs={"name": "description"}), "content", strip=True),
        h1=_text(h1_tags[0]) if h1_tags else None,
        robots_directive=_attr(soup.find("meta", attrs={"name": "robots"}), "content", strip=True),
        canonical_url=_attr(soup.find("link", rel="canonical"), "href"),
        og_title=_attr(soup.find("meta", attrs={"property": "og:title"}), "content"),
        og_description=_attr(soup.find("meta", attrs={"property": "og:description"}), "content"),
        og_url=_attr(soup.find("meta", attrs={"property": "og:url"}), "content"),
        html_lang=_attr(soup.find("html"), "lang"),
        images=len(soup.find_all("img")),
        total_links=links.internal + links.external,
        h1_count=len(h1_tags),
        links=links,
    )


def _present(value: Optional[str]) -> CheckResult:
    return CheckResult(value=value, ok=bool(value))


def _robots(value: Optional[str]) -> CheckResult:
    # No directive at all means indexable.
    return CheckResult(value=value, ok=value is None or "noindex" not in value)


def build_checks(facts: PageFacts) -> PageChecks:
    return PageChecks(
        title=_present(facts.title),
        meta_description=_present(facts.meta_description),
        h1=_present(facts.h1),
        robots=_robots(facts.robots_directive),
        canonical=_present(facts.canonical_url),
        og=OpenGraphChecks(
            title=_present(facts.og_title),
            description=_present(facts.og_description),
            url=_present(facts.og_url),
        ),
        html_lang=_present(facts.html_lang),
        counts=PageCounts(images=facts.images, total_links=facts.total_links, h1_count=facts.h1_count),
        links=facts.links,
    )
