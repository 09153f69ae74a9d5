"""Pydantic schemas for persisted records and API payloads.

This module defines the stored Link Record layout and the request/response
models of the HTTP API. Wire names are camelCase (``shortId``, ``originalUrl``)
while Python attributes stay snake_case.

Schema Hierarchy
=================
::
    LinkRecord (Stored value, JSON in the key-value store)
    ├─ original_url: str   -> "originalUrl"
    ├─ created_at: str      -> "createdAt" (ISO-8601, kept verbatim)
    └─ visits: int          -> "visits"

    CreateLinkRequest (Input, loosely typed on purpose)
    ├─ url: Any
    ├─ custom_id: Any      <- "customId"
    └─ admin_key: Any      <- "adminKey"

    CreateLinkResponse (Output, 201)
    ├─ short_id / short_url / original_url

    LinkInfoResponse (Output, 200)
    ├─ short_id / short_url / original_url
    ├─ created_at
    └─ visits

    HealthResponse (Output)
    ├─ status
    └─ store

How to Use
===========
**Step 1 — Decode a stored value**::
    record = LinkRecord.from_json(raw)

**Step 2 — Encode for storage**::
    await store.put(short_id, record.to_json())

Key Behaviours
===============
- CreateLinkRequest accepts any JSON object; field checks happen in the
  service so each failure keeps its own status code.
- createdAt and unknown keys are kept verbatim, so a visit rewrite only
  changes ``visits``. Records written by earlier deployments decode unchanged.
- Negative visit counts are rejected as malformed records.

Classes:
    LinkRecord:  Persisted value for one identifier.
    CreateLinkRequest:  Body of POST /api/create.
    CreateLinkResponse:  Result of a successful create.
    LinkInfoResponse:  Result of GET /api/info/{id}.
    HealthResponse:  Result of GET /-/health.
"""

import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from shortlink.enums import HealthStatus

__all__ = [
    "LinkRecord",
    "CreateLinkRequest",
    "CreateLinkResponse",
    "LinkInfoResponse",
    "HealthResponse",
]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LinkRecord(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    original_url: str
    # Kept as the stored text so rewrites leave it byte-identical.
    created_at: str
    visits: int = Field(0, ge=0)

    @field_validator("created_at")
    @classmethod
    def validate_created_at(cls, v: str) -> str:
        datetime.datetime.fromisoformat(v)
        return v

    @classmethod
    def new(cls, original_url: str) -> "LinkRecord":
        now = datetime.datetime.now(datetime.timezone.utc)
        return cls(
            original_url=original_url,
            created_at=now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            visits=0,
        )

    @classmethod
    def from_json(cls, raw: str) -> "LinkRecord":
        return cls.model_validate_json(raw)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class CreateLinkRequest(CamelModel):
    url: Any = None
    custom_id: Any = None
    admin_key: Any = None


class CreateLinkResponse(CamelModel):
    short_id: str
    short_url: str
    original_url: str


class LinkInfoResponse(CamelModel):
    short_id: str
    short_url: str
    original_url: str
    created_at: str
    visits: int


class HealthResponse(BaseModel):
    status: HealthStatus
    store: HealthStatus
