from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Strategy = Literal["mobile", "desktop"]


class AuditRequest(BaseModel):
    target_url: str

    model_config = ConfigDict(frozen=True)


class LinkCounts(BaseModel):
    internal: int = Field(default=0, ge=0)
    external: int = Field(default=0, ge=0)
    nofollow: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)


class PageFacts(BaseModel):
    """Read-only snapshot of the SEO signals found on one fetched page."""

    title: Optional[str] = None
    meta_description: Optional[str] = None
    h1: Optional[str] = None
    robots_directive: Optional[str] = None
    canonical_url: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_url: Optional[str] = None
    html_lang: Optional[str] = None

    images: int = Field(default=0, ge=0)
    total_links: int = Field(default=0, ge=0)
    h1_count: int = Field(default=0, ge=0)
    links: LinkCounts = Field(default_factory=LinkCounts)

    model_config = ConfigDict(frozen=True)

    @field_validator(
        "title",
        "meta_description",
        "h1",
        "robots_directive",
        "canonical_url",
        "og_title",
        "og_description",
        "og_url",
        "html_lang",
        mode="before",
    )
    @classmethod
    def _blank_is_absent(cls, v):
        # Absent means None, never an empty string.
        if isinstance(v, list):
            v = " ".join(str(x) for x in v)
        if v is None or not str(v).strip():
            return None
        return str(v)


class CheckResult(BaseModel):
    value: Optional[str] = None
    ok: bool


class OpenGraphChecks(BaseModel):
    title: CheckResult
    description: CheckResult
    url: CheckResult


class PageCounts(BaseModel):
    images: int = Field(ge=0)
    total_links: int = Field(ge=0)
    h1_count: int = Field(ge=0)


class PageChecks(BaseModel):
    title: CheckResult
    meta_description: CheckResult
    h1: CheckResult
    robots: CheckResult
    canonical: CheckResult
    og: OpenGraphChecks
    html_lang: CheckResult
    counts: PageCounts
    links: LinkCounts


class PerformanceMetrics(BaseModel):
    first_contentful_paint_ms: Optional[float] = None
    largest_contentful_paint_ms: Optional[float] = None
    cumulative_layout_shift: Optional[float] = None
    total_blocking_time_ms: Optional[float] = None
    speed_index_ms: Optional[float] = None


class PerformanceInsight(BaseModel):
    strategy: Strategy
    performance_score: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)


class PerformanceInsightError(BaseModel):
    code: Optional[int] = None
    status_text: Optional[str] = None
    message: Optional[str] = None


class AuditReport(BaseModel):
    url: str
    facts: PageChecks
    performance_insight: Optional[PerformanceInsight] = None
    performance_insight_error: Optional[PerformanceInsightError] = None

    model_config = ConfigDict(frozen=True)
