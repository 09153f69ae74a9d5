"""Shortlink Service Layer - Core Business Logic

This module holds the three operations of the service (create, redirect and
info) on top of the key-value store abstraction, with logging and metrics.

Architecture Overview
=====================
::
    ┌─────────────────────────────────────────────────────────────┐
    │                    Service Layer                            │
    │  ┌─────────────────┐  ┌─────────────────┐  ┌──────────────┐ │
    │  │  Create Link    │  │ Resolve Redirect│  │  Link Info   │ │
    │  │                 │  │                 │  │              │ │
    │  │ • Admin key     │  │ • Lookup        │  │ • Lookup     │ │
    │  │ • URL checks    │  │ • visits += 1   │  │ • Read-only  │ │
    │  │ • Id resolution │  │ • Write back    │  │              │ │
    │  └─────────────────┘  └─────────────────┘  └──────────────┘ │
    └─────────────────────────────────────────────────────────────┘
                │                    │                    │
                ▼                    ▼                    ▼
    ┌───────────────────────────────────────────────────────────┐
    │                  LinkStore (get / put)                    │
    └───────────────────────────────────────────────────────────┘

Link Creation Flow
------------------
::
    ┌─────────────┐
    │ Parse body   │── not a JSON object ──► InternalError (500)
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Admin key    │── mismatch ──► AuthError (401)
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ URL present  │── missing ──► InvalidInputError (400)
    │ & well formed│── malformed ─► InvalidInputError (400)
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ customId?    │── taken ──► ConflictError (409)
    │ else generate│
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ store.put()  │
    └─────────────┘

Key Behaviours
===============
- Visit counting is a plain read-modify-write: concurrent redirects for the
  same identifier can lose increments (last writer wins).
- Only the custom-id path guards against overwriting; a race between the
  existence check and the write is accepted.
- Any unexpected exception is logged and re-raised as InternalError.
"""

import secrets
import time
from typing import Any
from urllib.parse import quote

import validators
from prometheus_client import Counter
from pydantic import ValidationError

from shortlink.enums import RequestStatus
from shortlink.exceptions import (
    AuthError,
    ConflictError,
    InternalError,
    InvalidInputError,
    NotFoundError,
    ShortlinkError,
)
from shortlink.schemas import CreateLinkRequest, LinkRecord

__all__ = ["ShortlinkService", "build_short_url"]


LINKS_CREATED_TOTAL = Counter(
    "shortlink_links_created_total",
    "Link creation requests",
    ["status"],
)
REDIRECTS_TOTAL = Counter(
    "shortlink_redirects_total",
    "Redirect requests",
    ["status"],
)
INFO_REQUESTS_TOTAL = Counter(
    "shortlink_info_requests_total",
    "Link info requests",
    ["status"],
)

# RFC 3986 reserved and unreserved characters plus "%" for existing escapes
URL_SAFE_CHARS = ":/?#[]@!$&'()*+,;=%~"

_STATUS_BY_ERROR = {
    400: RequestStatus.VALIDATION_ERROR,
    401: RequestStatus.UNAUTHORIZED,
    404: RequestStatus.NOT_FOUND,
    409: RequestStatus.CONFLICT,
}


def build_short_url(base_url: str, short_id: str) -> str:
    base = base_url[:-1] if base_url.endswith("/") else base_url
    return f"{base}/{short_id}"


def _status_for(exc: ShortlinkError) -> RequestStatus:
    return _STATUS_BY_ERROR.get(exc.status_code, RequestStatus.ERROR)


class ShortlinkService:
    """Create, resolve and describe short links.

    Example:
        >>> service = ShortlinkService.from_context(ctx)
        >>> short_id, record = await service.create_link(b'{"url": "https://example.com", "adminKey": "..."}')
        >>> record = await service.resolve_redirect(short_id)
    """

    def __init__(self, ctx: "RequestContext"):
        self._store = ctx.store
        self._generator = ctx.generator
        self._logger = ctx.logger
        self._settings = ctx.settings
        self._ctx = ctx

    @classmethod
    def from_context(cls, ctx: "RequestContext") -> "ShortlinkService":
        return cls(ctx)

    def short_url(self, short_id: str) -> str:
        return build_short_url(self._settings.BASE_URL, short_id)

    # ========================================================================
    # PUBLIC API METHODS
    # ========================================================================

    async def create_link(self, body: bytes | str) -> tuple[str, LinkRecord]:
        """Validate a create request and store a new Link Record.

        Args:
            body: Raw request body, expected to be a JSON object with ``url``,
                ``adminKey`` and an optional ``customId``.

        Returns:
            tuple[str, LinkRecord]: The resolved identifier and the stored record.

        Raises:
            AuthError: adminKey does not match the configured secret.
            InvalidInputError: url is missing or not an absolute URL.
            ConflictError: customId is already stored.
            InternalError: the body could not be decoded or storage failed.
        """
        start_time = time.perf_counter()
        try:
            payload = self._parse_create_request(body)
            self._check_admin_key(payload.admin_key)
            url = self._check_url(payload.url)

            if payload.custom_id:
                short_id = payload.custom_id
                if await self._store.get(short_id) is not None:
                    raise ConflictError()
            else:
                short_id = await self._generator.generate_unique(self._store)

            record = LinkRecord.new(url)
            await self._store.put(short_id, record.to_json())
        except ShortlinkError as exc:
            LINKS_CREATED_TOTAL.labels(status=_status_for(exc)).inc()
            self._logger.warning(
                f"Link creation rejected: {exc.message}",
                extra={"operation": "create_link", "error": exc.message, "duration_ms": self._ctx.get_duration()},
            )
            raise
        except Exception as exc:
            LINKS_CREATED_TOTAL.labels(status=RequestStatus.ERROR).inc()
            self._logger.exception(f"Link creation error: {exc}", extra={"operation": "create_link"})
            raise InternalError("error processing request") from exc

        LINKS_CREATED_TOTAL.labels(status=RequestStatus.SUCCESS).inc()
        self._logger.info(
            f"Link created: {short_id} -> {url} in {time.perf_counter() - start_time:.3f}s",
            extra={"operation": "create_link", "short_id": short_id, "duration_ms": self._ctx.get_duration()},
        )
        return short_id, record

    async def resolve_redirect(self, short_id: str) -> LinkRecord:
        """Look up ``short_id``, count the visit and return the updated record.

        The increment is written back without any guard, so concurrent
        redirects may overwrite each other's count.
        """
        try:
            record = await self._load(short_id)
            record.visits += 1
            await self._store.put(short_id, record.to_json())
        except ShortlinkError as exc:
            REDIRECTS_TOTAL.labels(status=_status_for(exc)).inc()
            self._logger.warning(
                f"Redirect failed - short id not found: {short_id}",
                extra={"operation": "redirect", "short_id": short_id, "error": "not_found"},
            )
            raise
        except Exception as exc:
            REDIRECTS_TOTAL.labels(status=RequestStatus.ERROR).inc()
            self._logger.exception(
                f"Redirect error for {short_id}: {exc}", extra={"operation": "redirect", "short_id": short_id}
            )
            raise InternalError("error processing redirect") from exc

        REDIRECTS_TOTAL.labels(status=RequestStatus.SUCCESS).inc()
        self._logger.info(
            f"Redirect: {short_id} -> {record.original_url} (visits={record.visits})",
            extra={"operation": "redirect", "short_id": short_id, "duration_ms": self._ctx.get_duration()},
        )
        return record

    async def get_link_info(self, short_id: str) -> LinkRecord:
        """Return the stored record for ``short_id`` without modifying it."""
        try:
            record = await self._load(short_id)
        except ShortlinkError:
            INFO_REQUESTS_TOTAL.labels(status=RequestStatus.NOT_FOUND).inc()
            self._logger.warning(f"Info not found for short id: {short_id}")
            raise
        except Exception as exc:
            INFO_REQUESTS_TOTAL.labels(status=RequestStatus.ERROR).inc()
            self._logger.exception(
                f"Info error for {short_id}: {exc}", extra={"operation": "info", "short_id": short_id}
            )
            raise InternalError("error fetching link info") from exc

        INFO_REQUESTS_TOTAL.labels(status=RequestStatus.SUCCESS).inc()
        return record

    # ========================================================================
    # PRIVATE HELPER METHODS
    # ========================================================================

    async def _load(self, short_id: str) -> LinkRecord:
        raw = await self._store.get(short_id) if short_id else None
        if raw is None:
            raise NotFoundError()
        return LinkRecord.from_json(raw)

    def _parse_create_request(self, body: bytes | str) -> CreateLinkRequest:
        try:
            payload = CreateLinkRequest.model_validate_json(body)
        except ValidationError as exc:
            raise InternalError("error processing request") from exc
        if payload.custom_id is not None and not isinstance(payload.custom_id, str):
            raise InternalError("error processing request")
        return payload

    def _check_admin_key(self, admin_key: Any) -> None:
        if not isinstance(admin_key, str) or not secrets.compare_digest(
            admin_key.encode("utf-8", errors="surrogatepass"),
            self._settings.ADMIN_KEY.encode("utf-8", errors="surrogatepass"),
        ):
            raise AuthError()

    @staticmethod
    def _check_url(url: Any) -> str:
        if not url or not isinstance(url, str):
            raise InvalidInputError("URL required")
        # Characters browsers percent-encode on their own ("|", "{", ...) are
        # quoted before validation; the stored URL stays as given.
        if not url.isprintable():
            raise InvalidInputError("invalid URL format")
        candidate = quote(url, safe=URL_SAFE_CHARS, errors="surrogatepass")
        if not validators.url(candidate, simple_host=True, strict_query=False):
            raise InvalidInputError("invalid URL format")
        return url
