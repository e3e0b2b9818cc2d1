
"""Single-page SEO audit package

Modules:
- runner: orchestration for one audit (validate, fetch, analyze, PageSpeed, report).
- validator: http(s) URL check, no network access.
- fetcher: page GET with timeout and a single retry.
- seo: markup analyzer and per-field checks.
- links: internal/external/nofollow link counts.
- psi: PageSpeed Insights client with strategy fallback and API-key redaction.
- errors: FetchError / AuditError.

This package is imported by app.main (FastAPI) via: from app.audit.runner import run_audit
"""
__all__ = ['run_audit']
