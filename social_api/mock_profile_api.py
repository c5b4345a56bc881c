"""A stand-in Profile API that recognises a fixed set of bearer tokens."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Mapping
from dataclasses import dataclass

from aiohttp import web

logger = logging.getLogger(__name__)

_BEARER = "Bearer "


@dataclass(frozen=True)
class UserProfile:
    """The user a token belongs to."""

    user_id: str
    display_name: str


def seed_tokens() -> dict[str, UserProfile]:
    """Return the five known tokens and the profiles they belong to."""
    return {
        f"tok_user_{n}": UserProfile(
            user_id=f"usr_550e8400-e29b-41d4-a716-44665544000{n}",
            display_name=f"Test User {n}",
        )
        for n in range(1, 6)
    }


def create_app(tokens: Mapping[str, UserProfile] | None = None) -> web.Application:
    """Build the web application recognising ``tokens`` (the seed by default)."""
    known = seed_tokens() if tokens is None else tokens

    async def validate_token(request: web.Request) -> web.Response:
        header = request.headers.get("Authorization")
        profile = None
        if header is not None and header.startswith(_BEARER):
            profile = known.get(header[len(_BEARER):])

        if profile is None:
            return web.json_response({"valid": False, "error": "invalid_token"}, status=401)
        return web.json_response(
            {"valid": True, "user_id": profile.user_id, "display_name": profile.display_name}
        )

    async def health(request: web.Request) -> web.Response:
        return web.Response(status=200)

    app = web.Application()
    app.router.add_get("/v1/auth/validate", validate_token)
    app.router.add_get("/health", health)
    return app


def main(argv: list[str] | None = None) -> None:
    """Run the mock Profile API."""
    parser = argparse.ArgumentParser(description="Mock Profile API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8084)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    logger.info("Mock Profile API listening on %s:%d", args.host, args.port)
    web.run_app(create_app(), host=args.host, port=args.port, print=None)


if __name__ == "__main__":
    main()