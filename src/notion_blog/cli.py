"""Command-line entrypoint: static export and development server.

Usage:
    notion-blog build [--out DIR]
    notion-blog serve [--host HOST] [--port PORT] [--reload]
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

import structlog
import uvicorn

from notion_blog.config import Settings
from notion_blog.main import create_notion_client, create_site
from notion_blog.site import build_static_site
from notion_blog.telemetry import configure_stdlib_logging

log = structlog.get_logger()


async def _build(settings: Settings, out_dir: Path) -> list[Path]:
    client = create_notion_client(settings)
    try:
        return await build_static_site(create_site(settings, client), out_dir)
    finally:
        await client.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notion-blog", description="Blog generated from a Notion database."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Write every page as static HTML")
    build.add_argument(
        "--out", type=Path, default=Path("out"), help="Output directory (default: ./out)"
    )

    serve = sub.add_parser("serve", help="Serve pages, generating each on first request")
    serve.add_argument("--host", default=None, help="Bind host (or HOST env)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (or PORT env)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_stdlib_logging(settings.log_level)

    if args.command == "build":
        written = asyncio.run(_build(settings, args.out))
        log.info("build_complete", out_dir=str(args.out), files=len(written))
        return

    uvicorn.run(
        "notion_blog.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
