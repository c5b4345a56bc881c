"""Client that asks the Profile API which user a bearer token belongs to."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any

import aiohttp

from social_api.circuit_breaker import CircuitBreaker, StateListener
from social_api.config import CircuitBreakerConfig
from social_api.errors import (
    DependencyUnavailableError,
    HttpClientError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

_SERVICE = "Profile API"
_USER_ID_PREFIX = "usr_"


class ProfileClient:
    """Validates bearer tokens over HTTP, guarded by a circuit breaker."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        config: CircuitBreakerConfig | None = None,
        *,
        on_state_change: StateListener | None = None,
    ) -> None:
        self.session = session
        self.base_url = base_url
        self.breaker = CircuitBreaker(_SERVICE, config, on_state_change=on_state_change)

    async def validate_token(self, token: str) -> uuid.UUID:
        """Return the ID of the user the token belongs to.

        Raises NotFoundError when the token is not valid,
        DependencyUnavailableError when the service fails or the breaker is
        open, and HttpClientError on transport failures. Rejected tokens count
        as successful calls.
        """
        if not self.breaker.is_call_permitted():
            logger.warning("Circuit breaker OPEN for %s", _SERVICE)
            raise DependencyUnavailableError(_SERVICE)

        try:
            user_id = await self._execute_request(token)
        except NotFoundError:
            self.breaker.on_success()
            raise
        except (HttpClientError, DependencyUnavailableError):
            self.breaker.on_error()
            raise
        self.breaker.on_success()
        return user_id

    async def _execute_request(self, token: str) -> uuid.UUID:
        url = f"{self.base_url.rstrip('/')}/v1/auth/validate"
        headers = {"Authorization": f"Bearer {token}"}

        try:
            async with self.session.get(url, headers=headers) as response:
                status = response.status
                payload = await response.json(content_type=None) if status == 200 else None
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise HttpClientError(exc) from exc

        if status == 200:
            return _user_id_from(payload)
        if status == 401:
            raise NotFoundError()
        raise DependencyUnavailableError(_SERVICE)


def _user_id_from(payload: Any) -> uuid.UUID:
    if not isinstance(payload, dict) or not isinstance(payload.get("valid"), bool):
        raise HttpClientError("profile validation response lacks a boolean `valid`")
    user_id = payload.get("user_id")
    if user_id is not None and not isinstance(user_id, str):
        raise HttpClientError("profile validation response has a non-string `user_id`")

    if not payload["valid"] or user_id is None:
        raise NotFoundError()

    normalized = user_id[len(_USER_ID_PREFIX):] if user_id.startswith(_USER_ID_PREFIX) else user_id
    try:
        return uuid.UUID(normalized)
    except ValueError as exc:
        raise NotFoundError() from exc