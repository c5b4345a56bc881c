"""Registry of content types and the base URLs of the services that own them."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping

from social_api.domain import ContentType

_PREFIX = "CONTENT_API_"
_SUFFIX = "_URL"


class UnknownContentTypeError(Exception):
    """A content type that is not registered was requested."""

    def __init__(self, content_type: str) -> None:
        super().__init__(f"Unknown content type: {content_type}")
        self.content_type = content_type


class ContentTypeRegistry:
    """Maps normalised content types to the base URL of their content service."""

    def __init__(self, base_urls: Mapping[str, str] | None = None) -> None:
        self._base_urls: dict[str, tuple[ContentType, str]] = {}
        for name, url in (base_urls or {}).items():
            normalized = name.lower()
            self._base_urls[normalized] = (ContentType(normalized), url)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ContentTypeRegistry:
        """Build a registry from ``CONTENT_API_<TYPE>_URL`` variables."""
        if environ is None:
            environ = os.environ
        found: dict[str, str] = {}
        for key, value in environ.items():
            if not key.startswith(_PREFIX):
                continue
            stripped = key[len(_PREFIX):]
            if stripped.endswith(_SUFFIX):
                found[stripped[: -len(_SUFFIX)]] = value
        return cls(found)

    @classmethod
    def from_base_urls(
        cls, entries: Mapping[str, str] | Iterable[tuple[str, str]]
    ) -> ContentTypeRegistry:
        """Build a registry from content type to URL pairs."""
        pairs = entries.items() if isinstance(entries, Mapping) else entries
        return cls(dict(pairs))

    def validate(self, raw: str) -> ContentType:
        """Return the registered content type matching ``raw``, ignoring case.

        Raises UnknownContentTypeError when no such type is registered.
        """
        entry = self._base_urls.get(raw.lower())
        if entry is None:
            raise UnknownContentTypeError(raw)
        return entry[0]

    def get_url(self, content_type: str) -> str:
        """Return the base URL registered for ``content_type``."""
        entry = self._base_urls.get(str(content_type))
        if entry is None:
            raise UnknownContentTypeError(str(content_type))
        return entry[1]

    def get_all_content_types(self) -> list[ContentType]:
        """Return every registered content type."""
        return [content_type for content_type, _ in self._base_urls.values()]

    def upstream_urls(self) -> list[str]:
        """Return the distinct base URLs, sorted."""
        return sorted({url for _, url in self._base_urls.values()})

    def __repr__(self) -> str:
        urls = {name: url for name, (_, url) in self._base_urls.items()}
        return f"ContentTypeRegistry({urls!r})"