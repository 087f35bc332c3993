"""Shared test constants, fixtures, and factory functions."""

from collections.abc import AsyncIterator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from notion_blog.config import Settings
from notion_blog.main import app
from notion_blog.notion_models import BlockList, QueryDatabaseResponse
from notion_blog.posts import PostFetcher
from notion_blog.rendering import Renderer
from notion_blog.site import Site

# -- Constants --

NOTION_TOKEN = "secret_test-token"
DATABASE_ID = "db-123"
NOTION_URL = "https://api.notion.test/v1"

PAGE_ID = "page-1"
SLUG = "my-slug"
TITLE = "Hello"
CREATED = "2024-01-02T03:04:00.000Z"
EDITED = "2024-01-05T10:20:30.000Z"


# -- Factories --


def make_settings(**overrides: Any) -> Settings:
    """Create a Settings instance with test defaults. Override any field."""
    defaults: dict[str, Any] = {
        "notion_token": NOTION_TOKEN,
        "notion_database_id": DATABASE_ID,
        "notion_api_url": NOTION_URL,
    }
    return Settings(**(defaults | overrides))  # type: ignore[call-arg]


def rich_text(*runs: str) -> list[dict[str, Any]]:
    """Rich-text runs as returned by the API."""
    return [
        {
            "type": "text",
            "text": {"content": run, "link": None},
            "annotations": {"bold": False, "code": False},
            "plain_text": run,
            "href": None,
        }
        for run in runs
    ]


def make_page(
    page_id: str = PAGE_ID,
    *,
    title: list[str] | None = None,
    slug: list[str] | None = None,
    created: str = CREATED,
    edited: str = EDITED,
    published: bool = True,
) -> dict[str, Any]:
    """A full database page. Pass ``title=[]`` for a title without runs."""
    title_runs = [TITLE] if title is None else title
    return {
        "object": "page",
        "id": page_id,
        "created_time": created,
        "last_edited_time": edited,
        "archived": False,
        "properties": {
            "Name": {"id": "title", "type": "title", "title": rich_text(*title_runs)},
            "Slug": {"id": "slug", "type": "rich_text", "rich_text": rich_text(*(slug or []))},
            "Published": {"id": "pub", "type": "checkbox", "checkbox": published},
        },
    }


def make_partial_page(page_id: str = PAGE_ID) -> dict[str, Any]:
    return {"object": "page", "id": page_id}


def make_block(
    block_type: str, *runs: str, block_id: str = "block-1", **extra: Any
) -> dict[str, Any]:
    """A block whose payload holds *runs* as rich text."""
    return {
        "object": "block",
        "id": block_id,
        "type": block_type,
        "has_children": False,
        block_type: {"rich_text": rich_text(*runs), "color": "default", **extra},
    }


def make_code_block(text: str, language: str, block_id: str = "block-code") -> dict[str, Any]:
    return make_block("code", text, block_id=block_id, language=language, caption=[])


def make_block_list(*blocks: dict[str, Any]) -> dict[str, Any]:
    return {"object": "list", "results": list(blocks), "next_cursor": None, "has_more": False}


def make_query_response(*pages: dict[str, Any]) -> dict[str, Any]:
    return {"object": "list", "results": list(pages), "next_cursor": None, "has_more": False}


class FakeNotionClient:
    """In-memory Notion client.

    Pages are returned newest first in the order given. A slug filter keeps
    pages whose Slug first run equals the slug, mirroring the API's filter.
    """

    def __init__(
        self,
        pages: list[dict[str, Any]] | None = None,
        blocks: dict[str, list[dict[str, Any]]] | None = None,
    ) -> None:
        self.pages = pages or []
        self.blocks = blocks or {}
        self.queries: list[dict[str, Any]] = []
        self.block_requests: list[str] = []

    async def query_database(
        self,
        database_id: str,
        *,
        filter: dict[str, Any] | None = None,
        sorts: list[dict[str, Any]] | None = None,
    ) -> QueryDatabaseResponse:
        self.queries.append({"database_id": database_id, "filter": filter, "sorts": sorts})
        slug = _slug_from_filter(filter)
        pages = [p for p in self.pages if _is_published(p)]
        if slug is not None:
            pages = [p for p in pages if _page_slug(p) == slug]
        return QueryDatabaseResponse.model_validate(make_query_response(*pages))

    async def list_block_children(self, block_id: str) -> BlockList:
        self.block_requests.append(block_id)
        return BlockList.model_validate(make_block_list(*self.blocks.get(block_id, [])))


def _slug_from_filter(filter: dict[str, Any] | None) -> str | None:
    for clause in (filter or {}).get("and", []):
        if clause.get("property") == "Slug":
            value: str = clause["rich_text"]["equals"]
            return value
    return None


def _is_published(page: dict[str, Any]) -> bool:
    if "properties" not in page:
        return True
    return bool(page["properties"]["Published"]["checkbox"])


def _page_slug(page: dict[str, Any]) -> str | None:
    runs = page.get("properties", {}).get("Slug", {}).get("rich_text", [])
    return runs[0]["plain_text"] if runs else None


def make_site(notion: FakeNotionClient, **kwargs: Any) -> Site:
    return Site(PostFetcher(notion, DATABASE_ID), Renderer(site_title="Test Blog"), **kwargs)


# -- Fixtures --


@pytest.fixture
def env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set required env vars for Settings."""
    monkeypatch.setenv("NOTION_TOKEN", NOTION_TOKEN)
    monkeypatch.setenv("NOTION_DATABASE_ID", DATABASE_ID)


@pytest.fixture
def notion() -> FakeNotionClient:
    """A fake Notion database with two published posts and one draft."""
    return FakeNotionClient(
        pages=[
            make_page("page-new", title=["Newest"], slug=["newest"]),
            make_page("page-draft", title=["Draft"], slug=["draft"], published=False),
            make_page("page-old", title=["Oldest"], slug=[SLUG]),
        ],
        blocks={
            "page-new": [
                make_block("heading_2", "Intro", block_id="b1"),
                make_block("paragraph", "First paragraph", block_id="b2"),
            ],
            "page-old": [
                make_block("quote", "To be or not", block_id="b3"),
                make_code_block("x=1", "python", block_id="b4"),
                make_block("bulleted_list_item", "ignored", block_id="b5"),
            ],
        },
    )


@pytest.fixture
async def client(env_vars: None, notion: FakeNotionClient) -> AsyncIterator[AsyncClient]:
    """AsyncClient wired to the FastAPI app with a fake Notion database."""
    app.state.settings = make_settings()
    app.state.site = make_site(notion)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
