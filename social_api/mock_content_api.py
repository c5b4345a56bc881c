"""A stand-in Content API serving a fixed set of known content items."""

from __future__ import annotations

import argparse
import logging
import uuid
from collections.abc import Mapping, Set

from aiohttp import web

logger = logging.getLogger(__name__)

# Known content IDs per type, as 32-digit hex strings.
_SEED = {
    "post": """
        731b039548884822b51605b4b7bf2089 9601c04461304ee5a15596570e05a02f
        933dde0f47444a669a38bf5cb1f67553 ea0f2020050945fdadb924b8843055ee
        bd27f9260a0041fdb085a7491e6d0902 2a656157528448b59d76ede492933347
        4f884e5e2f1d4965b0f116922acd91a2 ad1d9238622c487598815f8e19997783
        c34ee1e372244a97ba440993eb7a6ed8 c2b7f21261624ae6837b16ee34cc9a50
    """,
    "bonus_hunter": """
        c3d4e5f6a7b89012cdef123456789012 d89063c44d8348b49279d5c64c740dd6
        f61c3ea05d6b4e0d851756e691b0f545 1c4558ea53674d7ab5e1558e801ab1a1
        88ea4fa216724d7e9276809bb396ab9a
    """,
    "top_picks": """
        e8b15d9a11534e8c8c6342eb43ccbce3 c97f2231645341eabf511bfa49cce824
        3b591b686c8c4a1e81f10a6042de11ee 99d421eb98c44869aa573fdd0bbab420
        07b22294b1eb47ebba04b9d9df1dc425
    """,
}


def seed_content() -> dict[str, set[uuid.UUID]]:
    """Return the known content IDs, keyed by content type."""
    return {kind: {uuid.UUID(hex=word) for word in ids.split()} for kind, ids in _SEED.items()}


def create_app(known_content: Mapping[str, Set[uuid.UUID]] | None = None) -> web.Application:
    """Build the web application serving ``known_content`` (the seed by default)."""
    catalogue = seed_content() if known_content is None else known_content

    async def lookup(request: web.Request) -> web.Response:
        try:
            item_id = uuid.UUID(request.match_info["content_id"])
        except ValueError:
            return web.Response(status=400, text="Invalid URL: cannot parse content id")

        kind = request.match_info["content_type"].lower()
        if item_id not in catalogue.get(kind, ()):
            return web.Response(status=404)

        item = {"id": str(item_id), "title": f"Mock {kind} content", "content_type": kind}
        return web.json_response({"items": [item]})

    async def health(request: web.Request) -> web.Response:
        return web.Response(status=200)

    app = web.Application()
    app.router.add_get("/v1/{content_type}/{content_id}", lookup)
    app.router.add_get("/health", health)
    return app


def main(argv: list[str] | None = None) -> None:
    """Run the mock Content API."""
    parser = argparse.ArgumentParser(description="Mock Content API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8081)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    logger.info("Mock Content API listening on %s:%d", args.host, args.port)
    web.run_app(create_app(), host=args.host, port=args.port, print=None)


if __name__ == "__main__":
    main()