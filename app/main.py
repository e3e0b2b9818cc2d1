# app/main.py
import os
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from app.audit.errors import AuditError
from app.audit.runner import run_audit
from app.services.logger import configure_logging
from app.services.rate_limit import SlidingWindowRateLimiter
from app.settings import get_settings

settings = get_settings()
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("app.main")


# ---------------------------
# FastAPI App
# ---------------------------
app = FastAPI(title="Single-page SEO Audit", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.rate_limiter = SlidingWindowRateLimiter(
    max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
)


# ---------------------------
# Caller identity (first X-Forwarded-For hop)
# ---------------------------
def client_identifier(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


# ---------------------------
# Routes
# ---------------------------
@app.get("/healthz")
async def healthz():
    return {"ok": True, "app": settings.APP_NAME}


@app.get("/audit")
async def audit(request: Request, url: Optional[str] = None):
    """
    Audit one page: /audit?url=https://example.com/page
    Callers are expected to be authenticated upstream.
    """
    ip = client_identifier(request)
    if not request.app.state.rate_limiter.allow(ip):
        logger.warning("Rate limit exceeded for %s", ip)
        return PlainTextResponse("Too Many Requests", status_code=429)

    try:
        report = await run_audit(url or "", settings=settings)
    except AuditError as e:
        return JSONResponse({"error": e.message}, status_code=e.status_code)

    return JSONResponse(
        report.model_dump(mode="json"),
        headers={"X-Content-Type-Options": "nosniff"},
    )


# ---------------------------
# Run Uvicorn (local dev)
# ---------------------------
if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("app.main:app", host="0.0.0.0", port=port, reload=True)
