from contextlib import asynccontextmanager
import json
import logging
import time
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .config import settings
from .dependencies import create_http_client
from .limiter import limiter
from .rendering import STATIC_DIR
from .routers import health, images, pages, readings, saju, telemetry, webhooks


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    force=True,
)
logger = logging.getLogger("astrocat.api")


def _truncate(text: str, limit: int = 900) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... [truncated]"


def _body_preview(raw: bytes, content_type: str) -> str:
    if not raw:
        return "-"
    if "application/json" in content_type:
        try:
            parsed = json.loads(raw.decode("utf-8"))
            return _truncate(json.dumps(parsed, ensure_ascii=False, separators=(",", ":")))
        except ValueError:
            return _truncate(raw.decode("utf-8", errors="replace"))
    return f"<{len(raw)} bytes; {content_type or 'unknown'}>"


def _content_length(raw: str | None) -> int | None:
    if not raw:
        return 0
    try:
        return int(raw)
    except ValueError:
        return None


class ApiAuditMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        request_id = uuid4().hex[:8]
        started_at = time.perf_counter()

        request_content_type = request.headers.get("content-type", "")
        content_length = _content_length(request.headers.get("content-length"))
        # Only buffer request body for logging if small enough (uploads can be large)
        if request.method == "POST" and content_length is not None and content_length <= 102400:
            request_body = await request.body()
        else:
            request_body = b""
        request_preview = _body_preview(request_body, request_content_type)

        method = request.method
        path = request.url.path
        query = request.url.query
        full_path = f"{path}?{query}" if query else path
        client_host = request.client.host if request.client else "-"

        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - started_at) * 1000
            logger.exception(
                "API %s %s | status=500 | client=%s | t=%.1fms | req=%s | req_id=%s",
                method,
                full_path,
                client_host,
                elapsed_ms,
                request_preview,
                request_id,
            )
            raise

        elapsed_ms = (time.perf_counter() - started_at) * 1000
        response_content_type = response.headers.get("content-type", "")
        if "application/json" in response_content_type:
            response_body = b""
            async for chunk in response.body_iterator:
                response_body += chunk
            response_preview = _body_preview(response_body, response_content_type)
            headers = {k: v for k, v in response.headers.items() if k.lower() != "content-length"}
            response = Response(
                content=response_body,
                status_code=response.status_code,
                headers=headers,
                media_type=response.media_type,
            )
        else:
            response_preview = f"<{response_content_type or 'unknown'}>"

        logger.info(
            "API %s %s | status=%s | client=%s | t=%.1fms | req=%s | resp=%s | req_id=%s",
            method,
            full_path,
            response.status_code,
            client_host,
            elapsed_ms,
            request_preview,
            response_preview,
            request_id,
        )
        response.headers["X-Request-Id"] = request_id
        return response


logging.getLogger("uvicorn.access").disabled = True
logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One pooled client for the saju backend, image hosts, webhooks and analytics
    app.state.http_client = create_http_client()
    logger.info(
        "Astrocat starting | env=%s | backend=%s | analytics=%s",
        settings.app_env,
        settings.saju_backend_url(),
        "on" if settings.analytics_enabled() else "log-only",
    )

    yield

    await app.state.http_client.aclose()


app = FastAPI(title="Astrocat", version="0.3.0", lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(ApiAuditMiddleware)

if settings.cors_origins():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept-Language"],
    )

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

app.include_router(health.router)
app.include_router(saju.router)
app.include_router(images.router)
app.include_router(webhooks.router)
app.include_router(readings.router)
app.include_router(telemetry.router)
app.include_router(pages.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level="info")
