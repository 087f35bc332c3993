"""Pydantic models for Notion REST API responses."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag


class RichText(BaseModel):
    """A single rich-text run. Only the plain text is kept."""

    model_config = ConfigDict(extra="ignore")

    plain_text: str = Field(default="", description="Unstyled text of the run")


class PageProperty(BaseModel):
    """A database page property value.

    Only the payloads the blog reads are modelled; other property types
    validate with just their ``type``.
    """

    model_config = ConfigDict(extra="ignore")

    id: str | None = Field(default=None, description="Property ID")
    type: str = Field(description="Property type, e.g. 'title' or 'rich_text'")
    title: list[RichText] = Field(default_factory=list, description="Runs of a title property")
    rich_text: list[RichText] = Field(
        default_factory=list, description="Runs of a rich_text property"
    )
    checkbox: bool | None = Field(default=None, description="Value of a checkbox property")


class FullPage(BaseModel):
    """A page object returned with its properties."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(description="Page ID")
    created_time: str = Field(description="ISO-8601 creation timestamp")
    last_edited_time: str = Field(description="ISO-8601 last edit timestamp")
    properties: dict[str, PageProperty] = Field(description="Property values by name")


class PartialPage(BaseModel):
    """A page object the integration may only see by ID."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(description="Page ID")


def _page_shape(value: Any) -> str:
    if isinstance(value, dict):
        return "full" if "properties" in value else "partial"
    return "full" if isinstance(value, FullPage) else "partial"


RawPage = Annotated[
    Annotated[FullPage, Tag("full")] | Annotated[PartialPage, Tag("partial")],
    Discriminator(_page_shape),
]


class QueryDatabaseResponse(BaseModel):
    """Response from the database query endpoint."""

    model_config = ConfigDict(extra="ignore")

    results: list[RawPage] = Field(default_factory=list, description="Matching pages")
    next_cursor: str | None = Field(default=None, description="Cursor for the next page")
    has_more: bool = Field(default=False, description="Whether more results exist")


class RichTextBody(BaseModel):
    """Payload shared by paragraph, heading and quote blocks."""

    model_config = ConfigDict(extra="ignore")

    rich_text: list[RichText] = Field(default_factory=list)


class CodeBody(RichTextBody):
    """Payload of a code block."""

    language: str | None = Field(default=None, description="Language name, e.g. 'python'")


class RawBlock(BaseModel):
    """A child block of a page.

    Partial blocks carry no ``type``. Payloads of block types the blog does
    not render are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(description="Block ID")
    type: str | None = Field(default=None, description="Block type, e.g. 'paragraph'")
    has_children: bool = Field(default=False)
    paragraph: RichTextBody | None = None
    heading_2: RichTextBody | None = None
    heading_3: RichTextBody | None = None
    quote: RichTextBody | None = None
    code: CodeBody | None = None


class BlockList(BaseModel):
    """Response from the block children endpoint."""

    model_config = ConfigDict(extra="ignore")

    results: list[RawBlock] = Field(default_factory=list, description="Child blocks in order")
    next_cursor: str | None = Field(default=None, description="Cursor for the next page")
    has_more: bool = Field(default=False, description="Whether more children exist")
