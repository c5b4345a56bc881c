"""Client that checks with the Content API whether a content item exists."""

from __future__ import annotations

import asyncio
import logging
import uuid
from http import HTTPStatus
from typing import Any

import aiohttp

from social_api.circuit_breaker import CircuitBreaker, StateListener
from social_api.config import CircuitBreakerConfig
from social_api.domain import ContentType
from social_api.errors import (
    DependencyUnavailableError,
    HttpClientError,
    NotFoundError,
)
from social_api.registry import ContentTypeRegistry

logger = logging.getLogger(__name__)

_SERVICE = "Content API"


class HttpContentClient:
    """Validates content existence over HTTP, guarded by a circuit breaker."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        registry: ContentTypeRegistry,
        config: CircuitBreakerConfig | None = None,
        *,
        on_state_change: StateListener | None = None,
    ) -> None:
        self.session = session
        self.registry = registry
        self.breaker = CircuitBreaker(_SERVICE, config, on_state_change=on_state_change)

    async def validate_content(self, content_type: ContentType | str, content_id: uuid.UUID) -> None:
        """Return normally if the content exists.

        Raises NotFoundError when it does not, DependencyUnavailableError when
        the service fails or the breaker is open, and HttpClientError on
        transport failures. Not-found answers count as successful calls.
        """
        if not self.breaker.is_call_permitted():
            logger.warning("%s circuit is open; failing fast", _SERVICE)
            raise DependencyUnavailableError(_SERVICE)

        url = self._lookup_url(ContentType(content_type), content_id)
        healthy = True
        try:
            await self._lookup(url)
        except (HttpClientError, DependencyUnavailableError):
            healthy = False
            raise
        finally:
            # A definitive "not found" is still a healthy upstream answer.
            if healthy:
                self.breaker.on_success()
            else:
                self.breaker.on_error()

    def _lookup_url(self, content_type: ContentType, content_id: uuid.UUID) -> str:
        base_url = self.registry.get_url(content_type).rstrip("/")
        return f"{base_url}/v1/{content_type}/{content_id}"

    async def _lookup(self, url: str) -> None:
        try:
            async with self.session.get(url) as response:
                status = response.status
                if status == HTTPStatus.NOT_FOUND:
                    raise NotFoundError()
                if status != HTTPStatus.OK:
                    raise DependencyUnavailableError(_SERVICE)
                if not _items_of(await response.json(content_type=None)):
                    raise NotFoundError()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise HttpClientError(exc) from exc


def _items_of(payload: Any) -> list[Any]:
    if not isinstance(payload, dict):
        raise ValueError("content lookup response is not a JSON object")
    items = payload.get("items", [])
    if not isinstance(items, list):
        raise ValueError("content lookup response has a non-list `items`")
    return items