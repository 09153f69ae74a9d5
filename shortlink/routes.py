"""FastAPI route definitions for the shortlink HTTP surface.

Routes are registered in dispatch order; the catch-all redirect route must
stay last so it never hides an API path.

API Endpoint Overview
=====================
::
    GET  /-/health
        └─ HealthResponse (200) or 503

    *    /api/create
        ├─ {url, customId?, adminKey}
        └─ CreateLinkResponse (201) or 400/401/405/409/500

    *    /api/info/:id        (id may contain "/")
        └─ LinkInfoResponse (200) or 404/500

    *    /api/...             (anything else)
        └─ 404 {"error": "not found"}

    *    /
        └─ landing page (200, text/html)

    *    /:id                 (id taken verbatim)
        └─ 302 Redirect or 404/500 (text/plain)

Key Behaviours
===============
- Dispatch is by path only. Every route except the health check accepts any
  method; other methods on /-/health fall through to the redirect lookup, so
  the framework never answers with its own 405. Non-POST calls to the create
  endpoint get a 405 with an ``error`` body and ``Allow: POST``.
- The create body is read raw and decoded by the service; a malformed body
  maps to 500 like any other processing failure.
- Redirects use 302 Found with the stored URL as the Location value.
"""

from pathlib import Path
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from shortlink.dependencies import RequestContext, get_link_service, get_request_context
from shortlink.enums import HealthStatus
from shortlink.exceptions import MethodError, NotFoundError
from shortlink.link_service import URL_SAFE_CHARS, ShortlinkService
from shortlink.schemas import CreateLinkResponse, HealthResponse, LinkInfoResponse

__all__ = ["router"]

LANDING_PAGE = (Path(__file__).parent / "static" / "index.html").read_text(encoding="utf-8")

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

router = APIRouter()


@router.get("/-/health", response_model=HealthResponse, tags=["health"])
async def health_check(ctx: RequestContext = Depends(get_request_context)) -> JSONResponse:
    store_status = HealthStatus.HEALTHY
    try:
        if not await ctx.store.ping():
            store_status = HealthStatus.UNHEALTHY
    except Exception as e:
        ctx.logger.error(f"Store health check failed: {e}")
        store_status = HealthStatus.UNHEALTHY

    body = HealthResponse(status=store_status, store=store_status)
    status_code = 200 if store_status is HealthStatus.HEALTHY else 503
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@router.api_route(
    "/api/create",
    methods=ALL_METHODS,
    response_model=CreateLinkResponse,
    status_code=201,
    tags=["links"],
)
async def create_link(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    service: ShortlinkService = Depends(get_link_service),
) -> CreateLinkResponse:
    ctx.add_tag("create")
    if request.method != "POST":
        raise MethodError(headers={"Allow": "POST"})

    short_id, record = await service.create_link(await request.body())
    return CreateLinkResponse(
        short_id=short_id,
        short_url=service.short_url(short_id),
        original_url=record.original_url,
    )


@router.api_route(
    "/api/info/{short_id:path}",
    methods=ALL_METHODS,
    response_model=LinkInfoResponse,
    tags=["links"],
)
async def get_link_info(
    short_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ShortlinkService = Depends(get_link_service),
) -> LinkInfoResponse:
    ctx.add_tag("info")
    record = await service.get_link_info(short_id)
    return LinkInfoResponse(
        short_id=short_id,
        short_url=service.short_url(short_id),
        original_url=record.original_url,
        created_at=record.created_at,
        visits=record.visits,
    )


@router.api_route("/api/{rest:path}", methods=ALL_METHODS, include_in_schema=False)
async def unknown_api_path(rest: str) -> None:
    raise NotFoundError("not found")


@router.api_route("/", methods=ALL_METHODS, response_class=HTMLResponse, include_in_schema=False)
async def landing_page() -> HTMLResponse:
    return HTMLResponse(LANDING_PAGE)


def location_header(url: str) -> str:
    """Return ``url`` as a Location value, escaping it only if it cannot be sent as-is."""
    if url.isascii() and url.isprintable():
        return url
    return quote(url, safe=URL_SAFE_CHARS, errors="surrogatepass")


@router.api_route("/{short_id:path}", methods=ALL_METHODS, tags=["redirect"])
async def redirect_to_url(
    short_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ShortlinkService = Depends(get_link_service),
) -> Response:
    ctx.add_tag("redirect")
    record = await service.resolve_redirect(short_id)
    return Response(status_code=302, headers={"location": location_header(record.original_url)})
