"""HTML routes: post listing, post detail, and not-found."""

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from notion_blog.site import Redirect, Site

router = APIRouter()


def _site(request: Request) -> Site:
    site: Site = request.app.state.site
    return site


def _redirect(redirect: Redirect) -> RedirectResponse:
    return RedirectResponse(redirect.destination, status_code=307)


@router.get("/", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    return HTMLResponse(await _site(request).index_page())


@router.get("/post", include_in_schema=False)
async def post_without_slug(request: Request) -> Response:
    site = _site(request)
    return _redirect(Redirect(destination=site.not_found_path))


@router.get("/post/{slug:path}", response_class=HTMLResponse)
async def post(request: Request, slug: str) -> Response:
    result = await _site(request).post_page(slug)
    if isinstance(result, Redirect):
        return _redirect(result)
    return HTMLResponse(result)


@router.get("/404", response_class=HTMLResponse)
async def not_found(request: Request) -> HTMLResponse:
    return HTMLResponse(_site(request).not_found_page(), status_code=404)
