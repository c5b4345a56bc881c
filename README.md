# social_api

Building blocks for a service that records "likes" on content items:
domain types, configuration loading, a registry of content types, two
asynchronous upstream clients guarded by circuit breakers, and two small
mock upstream servers for local development.

## Modules

- **`social_api.domain`**: `ContentType` (a `str` subclass), `LikeRecord`,
  `LikeEventKind` (`LIKE`, `UNLIKE`, `SHUTDOWN`), `LikeEvent` with
  `to_dict()` for a JSON-ready form, and `PaginationCursor`. A cursor
  encodes to URL-safe, unpadded base64 of a small JSON object with
  `cursor.encode()` and decodes back with `PaginationCursor.decode(text)`;
  a malformed string raises `InvalidCursorError`.
- **`social_api.errors`**: `ClientError` with its subclasses
  `DependencyUnavailableError`, `NotFoundError` and `HttpClientError`, and
  `DomainError` with `ContentNotFoundError`, `BatchTooLargeError`,
  `InvalidTimeWindowError` and `InvalidCursorError`.
- **`social_api.config`**: `AppConfig.from_env(environ=None)` builds an
  `AppConfig` holding `DatabaseConfig`, `RedisConfig`, `ServerConfig`,
  `ClientsConfig`, `CacheConfig`, `LimitsConfig`, `CircuitBreakerConfig`
  and `GeneralConfig`. Variable names are matched case-insensitively. With
  no mapping given, a `.env` file is loaded first (without overriding
  variables already set) and the process environment is read.
  `DATABASE_URL`, `READ_DATABASE_URL`, `REDIS_URL`, `HTTP_PORT` and
  `PROFILE_API_URL` are required; everything else has a default. A missing
  value, or a number that is not an unsigned integer in range, raises
  `ConfigError`.
- **`social_api.registry`**: `ContentTypeRegistry.from_env()` discovers
  every `CONTENT_API_<TYPE>_URL` variable; `from_base_urls()` builds one
  from pairs or a mapping. `validate()` accepts a type name
  case-insensitively, `get_url()` returns its base URL, and both raise
  `UnknownContentTypeError` for anything unregistered.
  `get_all_content_types()` and `upstream_urls()` (distinct, sorted) list
  what is registered.
- **`social_api.circuit_breaker`**: `CircuitBreaker` opens after
  `failure_threshold` consecutive failures or, once that many calls are in
  the window, a failure rate above 50%. After `recovery_timeout_secs` it
  becomes half-open; `success_threshold` consecutive successes close it and
  any failure opens it again. Its `state` is a `BreakerState`. An optional
  `on_state_change(name, state)` callback is told of every state it records.
- **`social_api.content_client`**: `HttpContentClient(session, registry,
  config=None)` with `await validate_content(content_type, content_id)`,
  which returns when `GET {base}/v1/{type}/{id}` answers `200` with a
  non-empty `items` list.
- **`social_api.profile_client`**: `ProfileClient(session, base_url,
  config=None)` with `await validate_token(token)`, which calls
  `GET {base}/v1/auth/validate` with a bearer header and returns the user's
  `uuid.UUID` (a `usr_` prefix is stripped).

Both clients take an `aiohttp.ClientSession`. A `404`/`401`, an invalid
token or empty `items` raises `NotFoundError` and counts as a successful
call for the breaker; other statuses raise `DependencyUnavailableError`,
transport or decoding failures raise `HttpClientError`, and both of those
count as failures. While the breaker is open, calls raise
`DependencyUnavailableError` without touching the network.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install ".[test]"
pytest
```

## Example

```python
import asyncio
import uuid

import aiohttp

from social_api.config import AppConfig
from social_api.content_client import HttpContentClient
from social_api.errors import NotFoundError
from social_api.registry import ContentTypeRegistry

config = AppConfig.from_env()
registry = ContentTypeRegistry.from_env()


async def check(raw_type: str, content_id: uuid.UUID) -> bool:
    async with aiohttp.ClientSession() as session:
        client = HttpContentClient(session, registry, config.circuit_breaker)
        try:
            await client.validate_content(registry.validate(raw_type), content_id)
        except NotFoundError:
            return False
        return True


print(asyncio.run(check("POST", uuid.UUID("731b0395-4888-4822-b516-05b4b7bf2089"))))
```

## Mock upstream servers

```
mock-content-api [--host HOST] [--port PORT]
```

Listens on `0.0.0.0:8081` by default and serves
`GET /v1/{content_type}/{content_id}`. It knows a fixed set of ids for the
`post`, `bonus_hunter` and `top_picks` types (see `seed_content()`); the
type is matched case-insensitively. A known id gets `200` with
`{"items": [{"id", "title", "content_type"}]}`, an unknown one `404`, and an
id that is not a UUID `400`.

```
mock-profile-api [--host HOST] [--port PORT]
```

Listens on `0.0.0.0:8084` by default and serves `GET /v1/auth/validate`. A
request whose `Authorization: Bearer ...` header carries one of the five
tokens returned by `seed_tokens()` gets `200` with `valid`, `user_id` and
`display_name`; anything else gets `401` with
`{"valid": false, "error": "invalid_token"}`.

Both servers also answer `GET /health` with `200`. `create_app()` in each
module returns the `aiohttp.web.Application`, optionally with your own data.

## What this package does not do

There is no likes HTTP API, no storage of likes in a database, no Redis
caching, no rate limiting, no live event stream and no metrics export. The
configuration classes carry settings for these (database, Redis, cache TTLs,
limits, heartbeat intervals), but nothing in the package uses them. The
clients do not retry requests; `ClientsConfig.max_retries` and the HTTP
timeouts are read but not applied, so configure timeouts on the
`aiohttp.ClientSession` you pass in.