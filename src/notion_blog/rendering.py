"""HTML rendering of posts with Jinja2 templates."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from jinja2 import Environment, FileSystemLoader, select_autoescape

from notion_blog.posts import Post

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
TEMPLATES_DIR = Path(__file__).parent / "templates"


def format_timestamp(value: str | None, tz: ZoneInfo) -> str:
    """Format an ISO-8601 timestamp as ``YYYY-MM-DD HH:mm:ss`` in *tz*.

    Missing or unparsable values render as an empty string. Naive values
    are taken to be UTC.
    """
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return ""
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=ZoneInfo("UTC"))
    return parsed.astimezone(tz).strftime(TIMESTAMP_FORMAT)


class Renderer:
    """Renders the listing, detail and not-found pages."""

    def __init__(self, site_title: str = "Blog", timezone: str = "UTC") -> None:
        self._env = Environment(
            loader=FileSystemLoader(TEMPLATES_DIR),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        tz = ZoneInfo(timezone)
        self._env.filters["timestamp"] = lambda value: format_timestamp(value, tz)
        self._env.globals["site_title"] = site_title

    def render_index(self, posts: list[Post]) -> str:
        return self._env.get_template("index.html").render(posts=posts)

    def render_post(self, post: Post) -> str:
        return self._env.get_template("post.html").render(post=post)

    def render_not_found(self) -> str:
        return self._env.get_template("404.html").render()
