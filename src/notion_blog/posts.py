"""Blog posts: mapping Notion pages and blocks to posts, and fetching them."""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import Annotated, Any, Literal, assert_never

import structlog
from pydantic import BaseModel, ConfigDict, Field

from notion_blog.notion_client import NotionClientProtocol
from notion_blog.notion_models import (
    BlockList,
    FullPage,
    PageProperty,
    PartialPage,
    RawBlock,
    RawPage,
    RichText,
)
from notion_blog.telemetry import get_tracer

log = structlog.get_logger()
_tracer = get_tracer(__name__)

TITLE_PROPERTY = "Name"
SLUG_PROPERTY = "Slug"
PUBLISHED_PROPERTY = "Published"

NEWEST_FIRST: list[dict[str, Any]] = [{"timestamp": "created_time", "direction": "descending"}]


class ContentType(StrEnum):
    """Block types rendered by the blog."""

    PARAGRAPH = "paragraph"
    QUOTE = "quote"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    CODE = "code"


class TextContent(BaseModel):
    """A paragraph, quote or heading."""

    model_config = ConfigDict(frozen=True)

    type: Literal["paragraph", "quote", "heading_2", "heading_3"]
    text: str | None = None


class CodeContent(BaseModel):
    """A code block with its language tag."""

    model_config = ConfigDict(frozen=True)

    type: Literal["code"] = "code"
    text: str | None = None
    language: str | None = None


Content = Annotated[TextContent | CodeContent, Field(discriminator="type")]


class Post(BaseModel):
    """A published blog post."""

    id: str = Field(description="Notion page ID")
    title: str | None = Field(default=None, description="Plain text of the Name property")
    slug: str | None = Field(default=None, description="Plain text of the Slug property")
    created_ts: str | None = Field(default=None, description="ISO-8601 creation time")
    last_edited_ts: str | None = Field(default=None, description="ISO-8601 last edit time")
    contents: list[Content] = Field(default_factory=list, description="Rendered blocks in order")


def _first_plain_text(runs: list[RichText]) -> str | None:
    return runs[0].plain_text if runs else None


def _property_text(prop: PageProperty | None, prop_type: str) -> str | None:
    if prop is None or prop.type != prop_type:
        return None
    return _first_plain_text(getattr(prop, prop_type))


def map_block(block: RawBlock) -> Content | None:
    """Map one block to content, or None for block types the blog does not render."""
    try:
        kind = ContentType(block.type)
    except ValueError:
        return None
    match kind:
        case ContentType.CODE:
            if block.code is None:
                return CodeContent()
            return CodeContent(
                text=_first_plain_text(block.code.rich_text), language=block.code.language
            )
        case (
            ContentType.PARAGRAPH
            | ContentType.QUOTE
            | ContentType.HEADING_2
            | ContentType.HEADING_3
        ):
            body = getattr(block, kind.value)
            return TextContent(
                type=kind.value, text=_first_plain_text(body.rich_text) if body else None
            )
        case _:
            assert_never(kind)


def map_blocks(blocks: BlockList) -> list[Content]:
    """Map a block listing to content, dropping unrendered block types."""
    contents: list[Content] = []
    for block in blocks.results:
        content = map_block(block)
        if content is None:
            log.debug("block_skipped", block_id=block.id, block_type=block.type)
            continue
        contents.append(content)
    return contents


def map_entry(page: RawPage, blocks: BlockList) -> Post:
    """Build a post from a database page and its child blocks."""
    match page:
        case FullPage():
            return Post(
                id=page.id,
                title=_property_text(page.properties.get(TITLE_PROPERTY), "title"),
                slug=_property_text(page.properties.get(SLUG_PROPERTY), "rich_text"),
                created_ts=page.created_time,
                last_edited_ts=page.last_edited_time,
                contents=map_blocks(blocks),
            )
        case PartialPage():
            return Post(id=page.id)
        case _:
            assert_never(page)


def select_one(posts: list[Post]) -> Post | None:
    """Return the first post of an already filtered and sorted result, if any."""
    return posts[0] if posts else None


def published_filter(slug: str | None = None) -> dict[str, Any]:
    """Build the database filter for published posts, optionally for one slug."""
    clauses: list[dict[str, Any]] = [
        {"property": PUBLISHED_PROPERTY, "checkbox": {"equals": True}},
    ]
    if slug is not None:
        clauses.append({"property": SLUG_PROPERTY, "rich_text": {"equals": slug}})
    return {"and": clauses}


class PostFetcher:
    """Loads published posts from a Notion database."""

    def __init__(self, client: NotionClientProtocol, database_id: str) -> None:
        self._client = client
        self._database_id = database_id

    async def list_posts(self, slug: str | None = None) -> list[tuple[RawPage, BlockList]]:
        """Query published pages, newest first, and fetch each page's first block listing.

        Block listings are fetched concurrently; a failure of any one fails the call.
        """
        with _tracer.start_as_current_span("posts.list", attributes={"slug": slug or ""}):
            response = await self._client.query_database(
                self._database_id, filter=published_filter(slug), sorts=NEWEST_FIRST
            )
            block_lists = await asyncio.gather(
                *(self._client.list_block_children(page.id) for page in response.results)
            )
            await log.ainfo("posts_listed", slug=slug, count=len(response.results))
        return list(zip(response.results, block_lists, strict=True))

    async def get_posts(self, slug: str | None = None) -> list[Post]:
        return [map_entry(page, blocks) for page, blocks in await self.list_posts(slug)]

    async def get_post_contents(self, post: Post) -> list[Content]:
        """Fetch and map the blocks of a single post."""
        return map_blocks(await self._client.list_block_children(post.id))
