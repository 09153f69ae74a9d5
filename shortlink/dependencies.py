"""Dependency injection with a singleton service manager.

This module provides the shared resources (settings, logger, key-value store,
identifier generator) to every endpoint through FastAPI dependencies, creating
them once per process and wrapping them in a lightweight per-request context.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Depends, Request

from shortlink.config import Settings, get_settings
from shortlink.generator import ShortIdGenerator
from shortlink.link_service import ShortlinkService
from shortlink.store import LinkStore, create_store


# ============================================================================
# SINGLETON SERVICE MANAGER
# ============================================================================


class ServiceManager:
    """Singleton service manager for shared resources.

    Holds everything that outlives a single request. Handlers never keep
    state of their own; all persistent state lives in the store.
    """

    _instance: Optional["ServiceManager"] = None
    _initialized: bool = False

    def __new__(cls) -> "ServiceManager":
        """Implement singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    async def initialize(self) -> None:
        """Initialize shared resources once at startup."""
        if not self._initialized:
            self.settings = get_settings()
            self.logger = self._setup_logger(self.settings)
            self.store = create_store(self.settings)
            self.generator = ShortIdGenerator(
                length=self.settings.SHORT_ID_LENGTH,
                max_attempts=self.settings.SHORT_ID_MAX_ATTEMPTS,
            )
            self._initialized = True
            self.logger.info(
                f"Service manager initialized (store={self.settings.STORE_BACKEND}, env={self.settings.APP_ENV})"
            )

    def _setup_logger(self, settings: Settings) -> logging.Logger:
        """Setup logger once."""
        logger = logging.getLogger(settings.APP_NAME)
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        logger.setLevel(settings.LOG_LEVEL.upper())
        return logger

    async def cleanup(self) -> None:
        """Cleanup shared resources at shutdown."""
        if hasattr(self, "store"):
            await self.store.close()
        self._initialized = False


# Global singleton instance
_service_manager = ServiceManager()


# ============================================================================
# LIGHTWEIGHT REQUEST CONTEXT
# ============================================================================


@dataclass
class RequestContext:
    """Per-request view over the shared resources.

    Attributes:
        store: Key-value store holding Link Records
        generator: Identifier generator
        service_manager: Singleton service manager with shared resources
        request_id: Unique identifier for this request
        trace_id: Correlation ID supplied by the caller
        user_agent: Client user agent string
        client_ip: Client IP address
        start_time: Request start timestamp
        tags: Request tags for categorization
    """

    store: LinkStore
    generator: ShortIdGenerator
    service_manager: ServiceManager
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    trace_id: Optional[str] = None
    user_agent: Optional[str] = None
    client_ip: Optional[str] = None
    start_time: float = field(default_factory=lambda: time.time())
    tags: list[str] = field(default_factory=list)

    @property
    def logger(self) -> logging.LoggerAdapter:
        """Get shared logger with request context."""
        return logging.LoggerAdapter(
            self.service_manager.logger,
            {
                "request_id": self.request_id,
                "trace_id": self.trace_id or self.request_id,
                "client_ip": self.client_ip,
                "user_agent": self.user_agent,
                "tags": ",".join(self.tags),
            },
        )

    @property
    def settings(self) -> Settings:
        """Get shared settings."""
        return self.service_manager.settings

    def add_tag(self, tag: str) -> None:
        """Add a tag to the request context."""
        if tag not in self.tags:
            self.tags.append(tag)

    def get_duration(self) -> float:
        """Get request duration in milliseconds."""
        return (time.time() - self.start_time) * 1000


# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


async def get_service_manager() -> ServiceManager:
    """Get the singleton service manager, initializing it on first use."""
    if not _service_manager._initialized:
        await _service_manager.initialize()
    return _service_manager


async def get_link_store(manager: ServiceManager = Depends(get_service_manager)) -> LinkStore:
    return manager.store


async def get_id_generator(manager: ServiceManager = Depends(get_service_manager)) -> ShortIdGenerator:
    return manager.generator


async def get_request_context(
    request: Request,
    store: LinkStore = Depends(get_link_store),
    generator: ShortIdGenerator = Depends(get_id_generator),
    manager: ServiceManager = Depends(get_service_manager),
) -> RequestContext:
    """Build the request context from the shared resources and client info.

    Args:
        request: FastAPI Request object for extracting client info
        store: Shared key-value store
        generator: Shared identifier generator
        manager: Singleton service manager

    Returns:
        RequestContext: Context for the request
    """
    client_ip = request.client.host if request.client else None
    user_agent = request.headers.get("user-agent")
    trace_id = request.headers.get("x-trace-id")

    return RequestContext(
        store=store,
        generator=generator,
        service_manager=manager,
        trace_id=trace_id,
        user_agent=user_agent,
        client_ip=client_ip,
    )


def get_link_service(ctx: RequestContext = Depends(get_request_context)) -> ShortlinkService:
    """Create the link service bound to this request's context."""
    return ShortlinkService.from_context(ctx)
