"""Domain types: content types, like records, like events and pagination cursors."""

from __future__ import annotations

import base64
import binascii
import json
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from social_api.errors import InvalidCursorError


class ContentType(str):
    """Normalised identifier of a kind of content, such as ``post``."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"ContentType({str.__repr__(self)})"


@dataclass(frozen=True)
class LikeRecord:
    """A like as it is stored."""

    user_id: uuid.UUID
    content_type: ContentType
    content_id: uuid.UUID
    created_at: datetime


class LikeEventKind(str, Enum):
    """Kind of event pushed to live subscribers."""

    LIKE = "like"
    UNLIKE = "unlike"
    SHUTDOWN = "shutdown"


@dataclass(frozen=True)
class LikeEvent:
    """Event broadcast to subscribers after a like or unlike."""

    event: LikeEventKind
    user_id: uuid.UUID
    content_type: ContentType
    content_id: uuid.UUID
    count: int
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation of the event."""
        return {
            "event": LikeEventKind(self.event).value,
            "user_id": str(self.user_id),
            "content_type": str(self.content_type),
            "content_id": str(self.content_id),
            "count": self.count,
            "timestamp": _format_timestamp(self.timestamp),
        }


@dataclass(frozen=True)
class PaginationCursor:
    """Position after the last item of a page of likes."""

    created_at: datetime
    id: uuid.UUID

    def encode(self) -> str:
        """Encode the cursor as URL-safe, unpadded base64 of a JSON object."""
        payload = {"t": _format_timestamp(self.created_at), "id": str(self.id)}
        raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    @classmethod
    def decode(cls, encoded: str) -> PaginationCursor:
        """Decode a cursor produced by :meth:`encode`.

        Raises InvalidCursorError when the text is not a valid cursor.
        """
        try:
            payload = json.loads(_decode_url_safe_no_pad(encoded))
            created_at = _parse_timestamp(payload["t"])
            cursor_id = uuid.UUID(payload["id"])
        except (ValueError, KeyError, TypeError, AttributeError, binascii.Error) as exc:
            raise InvalidCursorError(encoded) from exc
        return cls(created_at=created_at, id=cursor_id)


_URL_SAFE_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(?:[Zz]|([+-])(\d{2}):(\d{2}))"
)


def _decode_url_safe_no_pad(text: str) -> bytes:
    if not isinstance(text, str) or not _URL_SAFE_ALPHABET.fullmatch(text):
        raise ValueError("invalid base64 alphabet")
    if len(text) % 4 == 1:
        raise ValueError("invalid base64 length")
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _format_timestamp(moment: datetime) -> str:
    moment = _as_utc(moment)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    micro = moment.microsecond
    if micro:
        text += f".{micro // 1000:03d}" if micro % 1000 == 0 else f".{micro:06d}"
    return text + "Z"


def _parse_timestamp(text: str) -> datetime:
    match = _RFC3339.fullmatch(text)
    if match is None:
        raise ValueError(f"not an RFC 3339 timestamp: {text!r}")
    year, month, day, hour, minute, second = (int(match.group(i)) for i in range(1, 7))
    fraction = match.group(7) or ""
    micro = int((fraction + "000000")[:6])
    moment = datetime(year, month, day, hour, minute, second, micro, tzinfo=timezone.utc)
    sign = match.group(8)
    if sign:
        offset = timedelta(hours=int(match.group(9)), minutes=int(match.group(10)))
        moment = moment - offset if sign == "+" else moment + offset
    return moment