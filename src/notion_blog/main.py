"""FastAPI application entrypoint."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from notion_blog.config import Settings
from notion_blog.notion_client import NotionClient
from notion_blog.pages import router as pages_router
from notion_blog.posts import PostFetcher
from notion_blog.rendering import Renderer
from notion_blog.site import Site
from notion_blog.telemetry import (
    add_trace_context,
    configure_stdlib_logging,
    emit_to_otel_logs,
    init_telemetry,
    shutdown_telemetry,
)

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_trace_context,  # type: ignore[list-item]
        emit_to_otel_logs,  # type: ignore[list-item]
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer(),
    ],
)

log = structlog.get_logger()


def create_site(settings: Settings, client: NotionClient) -> Site:
    """Factory: wire the fetcher and renderer for *settings* around *client*."""
    return Site(
        PostFetcher(client, settings.notion_database_id),
        Renderer(site_title=settings.site_title, timezone=settings.display_timezone),
        not_found_path=settings.not_found_path,
    )


def create_notion_client(settings: Settings) -> NotionClient:
    return NotionClient(
        settings.notion_token,
        base_url=settings.notion_api_url,
        notion_version=settings.notion_version,
        timeout=settings.notion_timeout,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_telemetry()
    settings = Settings()
    configure_stdlib_logging(settings.log_level)
    notion_client = create_notion_client(settings)
    app.state.settings = settings
    app.state.site = create_site(settings, notion_client)

    try:
        if settings.prerender:
            slugs = await app.state.site.prerender()
            await log.ainfo("prerender_complete", posts=len(slugs))

        await log.ainfo("service started", database_id=settings.notion_database_id)
        yield
    finally:
        await notion_client.close()
        await log.ainfo("service stopped")
        shutdown_telemetry()


app = FastAPI(title="Notion Blog", lifespan=lifespan)
app.include_router(pages_router)
FastAPIInstrumentor.instrument_app(app)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
