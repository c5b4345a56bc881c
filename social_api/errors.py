"""Exceptions raised by the external clients and the domain layer."""

from __future__ import annotations

import uuid


class ClientError(Exception):
    """Base class for failures talking to an external service."""


class DependencyUnavailableError(ClientError):
    """The target service is unavailable or its circuit breaker is open."""

    def __init__(self, service: str) -> None:
        super().__init__(f"Dependency unavailable: {service}")
        self.service = service


class NotFoundError(ClientError):
    """The requested item does not exist according to the external service."""

    def __init__(self) -> None:
        super().__init__("Content not found")


class HttpClientError(ClientError):
    """Transport-level failure such as a timeout or a refused connection."""

    def __init__(self, detail: object) -> None:
        super().__init__(f"HTTP client error: {detail}")
        self.detail = detail


class DomainError(Exception):
    """Base class for errors raised by like/unlike operations."""


class ContentNotFoundError(DomainError):
    """A content item referenced by a request does not exist."""

    def __init__(self, content_type: str, content_id: uuid.UUID) -> None:
        super().__init__(
            f"Content item {content_id} of type {content_type} does not exist"
        )
        self.content_type = content_type
        self.content_id = content_id


class BatchTooLargeError(DomainError):
    """A batch request holds more items than allowed."""

    def __init__(self, size: int, max: int) -> None:  # noqa: A002
        super().__init__(f"Batch request size {size} exceeds maximum allowed {max}")
        self.size = size
        self.max = max


class InvalidTimeWindowError(DomainError):
    """An unknown time window parameter was given."""

    def __init__(self, window: str) -> None:
        super().__init__(f"Invalid time window specified: {window}")
        self.window = window


class InvalidCursorError(DomainError):
    """A pagination cursor could not be decoded."""

    def __init__(self, cursor: str) -> None:
        super().__init__(f"Invalid pagination cursor: {cursor}")
        self.cursor = cursor