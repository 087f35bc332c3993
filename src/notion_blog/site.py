"""Page generation: static paths, page props, cached pages, and static export."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import cast

import structlog
from pydantic import BaseModel, ConfigDict, Field

from notion_blog import metrics
from notion_blog.posts import Post, PostFetcher, select_one
from notion_blog.rendering import Renderer

log = structlog.get_logger()

INDEX_PATH = "/"
DEFAULT_NOT_FOUND_PATH = "/404"


class Redirect(BaseModel):
    """Outcome of a page whose data could not be found."""

    model_config = ConfigDict(frozen=True)

    destination: str = Field(description="Path to redirect to")


class PostPageProps(BaseModel):
    """Data for a single post page."""

    post: Post


class IndexPageProps(BaseModel):
    """Data for the listing page."""

    posts: list[Post] = Field(default_factory=list)


def post_path(slug: str) -> str:
    return f"/post/{slug}"


async def get_static_paths(fetcher: PostFetcher) -> list[str]:
    """Return the slug of every published post that has one."""
    slugs: list[str] = []
    for post in await fetcher.get_posts():
        if post.slug:
            slugs.append(post.slug)
        else:
            log.debug("post_without_slug_skipped", post_id=post.id)
    return slugs


async def get_post_props(
    fetcher: PostFetcher, slug: str | None, not_found_path: str = DEFAULT_NOT_FOUND_PATH
) -> PostPageProps | Redirect:
    """Load one post by slug with its contents freshly fetched."""
    if not slug:
        return Redirect(destination=not_found_path)
    post = select_one(await fetcher.get_posts(slug))
    if post is None:
        return Redirect(destination=not_found_path)
    post.contents = await fetcher.get_post_contents(post)
    return PostPageProps(post=post)


async def get_index_props(fetcher: PostFetcher) -> IndexPageProps:
    return IndexPageProps(posts=await fetcher.get_posts())


class PageCache:
    """Generated pages keyed by path.

    A page missing from the cache is generated on its first request while
    other requests for the same path wait for that result. Failed
    generations are not cached. A path's lock lives only while some request
    for that path is generating or waiting.
    """

    def __init__(self) -> None:
        self._pages: dict[str, str] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiting: dict[str, int] = {}

    def get(self, path: str) -> str | None:
        return self._pages.get(path)

    def set(self, path: str, html: str) -> None:
        self._pages[path] = html

    async def get_or_generate(
        self, path: str, generate: Callable[[], Awaitable[str | Redirect]]
    ) -> str | Redirect:
        cached = self._pages.get(path)
        if cached is not None:
            metrics.page_cache_hits_total.add(1)
            return cached

        lock = self._locks.setdefault(path, asyncio.Lock())
        self._waiting[path] = self._waiting.get(path, 0) + 1
        try:
            async with lock:
                cached = self._pages.get(path)
                if cached is not None:
                    metrics.page_cache_hits_total.add(1)
                    return cached
                result = await generate()
                if isinstance(result, str):
                    self._pages[path] = result
                return result
        finally:
            self._waiting[path] -= 1
            if not self._waiting[path]:
                del self._waiting[path]
                del self._locks[path]

    @property
    def pending(self) -> int:
        """Number of paths with a generation in progress or awaited."""
        return len(self._locks)

    def clear(self) -> None:
        self._pages.clear()

    def __contains__(self, path: str) -> bool:
        return path in self._pages

    def __len__(self) -> int:
        return len(self._pages)


class Site:
    """Serves the blog's pages, generating each one at most once."""

    def __init__(
        self,
        fetcher: PostFetcher,
        renderer: Renderer,
        *,
        not_found_path: str = DEFAULT_NOT_FOUND_PATH,
        cache: PageCache | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.renderer = renderer
        self.not_found_path = not_found_path
        self.cache = cache if cache is not None else PageCache()

    async def generate_index(self) -> str:
        props = await get_index_props(self.fetcher)
        html = self.renderer.render_index(props.posts)
        metrics.pages_rendered_total.add(1, {"route": "index"})
        await log.ainfo("page_generated", path=INDEX_PATH, posts=len(props.posts))
        return html

    async def generate_post(self, slug: str | None) -> str | Redirect:
        props = await get_post_props(self.fetcher, slug, self.not_found_path)
        if isinstance(props, Redirect):
            await log.ainfo("post_not_found", slug=slug, redirect=props.destination)
            return props
        html = self.renderer.render_post(props.post)
        metrics.pages_rendered_total.add(1, {"route": "post"})
        await log.ainfo("page_generated", path=post_path(slug or ""), post_id=props.post.id)
        return html

    async def index_page(self) -> str:
        return cast(str, await self.cache.get_or_generate(INDEX_PATH, self.generate_index))

    async def post_page(self, slug: str | None) -> str | Redirect:
        if not slug:
            return Redirect(destination=self.not_found_path)
        return await self.cache.get_or_generate(
            post_path(slug), lambda: self.generate_post(slug)
        )

    def not_found_page(self) -> str:
        return self.renderer.render_not_found()

    async def prerender(self) -> list[str]:
        """Generate the listing and every static post path into the cache."""
        self.cache.set(INDEX_PATH, await self.generate_index())
        slugs = await get_static_paths(self.fetcher)
        for slug in slugs:
            result = await self.generate_post(slug)
            if isinstance(result, str):
                self.cache.set(post_path(slug), result)
        await log.ainfo("site_prerendered", pages=len(self.cache))
        return slugs


async def build_static_site(site: Site, out_dir: Path) -> list[Path]:
    """Write the listing, every post page and the not-found page under *out_dir*.

    Any Notion API failure aborts the build. Posts whose slug would place the
    page outside *out_dir* are skipped.
    """
    written: list[Path] = []
    root = out_dir.resolve()

    def _write(target: Path, html: str) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(html, encoding="utf-8")
        written.append(target)

    _write(out_dir / "index.html", await site.generate_index())
    for slug in await get_static_paths(site.fetcher):
        target = out_dir / "post" / slug / "index.html"
        if not target.resolve().parent.parent.is_relative_to(root / "post"):
            await log.awarning("post_outside_output_skipped", slug=slug)
            continue
        result = await site.generate_post(slug)
        if isinstance(result, Redirect):
            continue
        _write(target, result)
    _write(out_dir / "404.html", site.not_found_page())

    await log.ainfo("static_site_built", out_dir=str(out_dir), files=len(written))
    return written
