"""Shared enums for the shortlink service.

This module defines the status and backend enums used across the codebase.
Using enums instead of string literals provides type safety and prevents typos.
"""

from enum import StrEnum

__all__ = ["HealthStatus", "RequestStatus", "StoreBackend"]


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class RequestStatus(StrEnum):
    """Request outcome labels for metrics and logging."""

    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    ERROR = "error"


class StoreBackend(StrEnum):
    """Key-value store implementations selectable via STORE_BACKEND."""

    REDIS = "redis"
    MEMORY = "memory"
