"""FastAPI application entry point for the shortlink service.

This module configures and initializes the FastAPI application with middleware,
lifecycle management, error rendering, and route registration.

Application Lifecycle Diagram
=============================
::
    ┌─────────────┐
    │  uvicorn    │
    │  startup    │
    └──────┬──────┘
           ▼
    ┌──────────────┐
    │ Create FastAPI│
    │ app instance  │
    └──────┬───────┘
           ▼
    ┌─────────────┐
    │ CORS +      │
    │ metrics     │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Include     │
    │ routes      │
    └──────┬──────┘
           ▼
    ┌──────────────────┐
    │ lifespan()       │
    │ startup:         │
    │ service manager  │
    └──────┬───────────┘
           ▼
    ┌─────────────┐
    │ Serve HTTP  │
    │ requests    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ lifespan()  │
    │ shutdown:   │
    │ close store │
    └─────────────┘

How to Use
===========
**Step 1 — Run with uvicorn**::
    ADMIN_KEY=secret uvicorn shortlink.main:app --host 0.0.0.0 --port 8000

**Step 2 — Create a link**::
    curl -X POST http://localhost:8000/api/create \
         -H "Content-Type: application/json" \
         -d '{"url": "https://example.com", "adminKey": "secret"}'

**Step 3 — Follow it**::
    curl -i http://localhost:8000/<shortId>

Key Behaviours
===============
- Interactive docs are disabled: every top-level path is a potential short id.
- Errors on /api/ paths are JSON ``{"error": ...}``; other paths get plain text.
- Prometheus metrics are exposed at /-/metrics.
"""

__all__ = ["app"]

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from prometheus_fastapi_instrumentator import Instrumentator

from shortlink.config import get_settings
from shortlink.dependencies import _service_manager
from shortlink.exceptions import ShortlinkError
from shortlink.routes import router

settings = get_settings()

METRICS_PATH = "/-/metrics"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    await _service_manager.initialize()
    yield
    # Shutdown
    await _service_manager.cleanup()


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="Admin-guarded URL shortener with visit counting",
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ShortlinkError)
async def shortlink_error_handler(request: Request, exc: ShortlinkError) -> Response:
    if request.url.path.startswith("/api/"):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message},
            headers=exc.headers,
        )
    return PlainTextResponse(exc.message, status_code=exc.status_code, headers=exc.headers)


Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=False,
    should_respect_env_var=False,
    excluded_handlers=[METRICS_PATH],
).instrument(app).expose(app, endpoint=METRICS_PATH, include_in_schema=False)

app.include_router(router)
