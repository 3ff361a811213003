"""UI routes returning HTML via Jinja2 templates."""

import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from fastapi.templating import Jinja2Templates

from app.core.config import get_settings
from app.core.errors import UpstreamError, ValidationError
from app.services.catalog import load_details, load_home, load_listing, load_search
from app.services.header import HeaderEvent, HeaderPanel, transition
from app.services.images import image_fallback_attrs, image_url, placeholder_url
from app.services.pagination import build_pagination, parse_page
from app.services.tmdb import DETAIL_KINDS, TMDBClient, get_tmdb_client

router = APIRouter()
logger = logging.getLogger(__name__)

# Templates directory
BASE_DIR = Path(__file__).resolve().parent.parent
templates = Jinja2Templates(directory=BASE_DIR / "templates")
templates.env.globals.update(
    image_url=image_url,
    image_fallback_attrs=image_fallback_attrs,
    placeholder_url=placeholder_url,
    header_state=HeaderPanel.IDLE,
)

LISTINGS = {
    "movie": {"title": "Popular Movies", "anchor": "popular-movies-section"},
    "tv": {"title": "Popular TV Shows", "anchor": "popular-tv-section"},
}


async def _render(request: Request, name: str, context: dict, status_code: int = 200):
    """Render a template unless the browser already left the page.

    Results that arrive after the user navigated away are dropped rather
    than rendered for a view nobody is looking at.
    """
    if await request.is_disconnected():
        logger.info(f"Client left {request.url.path} before render; discarding")
        return Response(status_code=204)
    return templates.TemplateResponse(
        request=request, name=name, context=context, status_code=status_code
    )


async def _error_page(request: Request, message: str, status_code: int):
    return await _render(
        request,
        "error.html",
        {"message": message, "page_title": "Error"},
        status_code=status_code,
    )


@router.get("/")
async def home(request: Request, client: TMDBClient = Depends(get_tmdb_client)):
    """Now-playing carousel with trending movies and TV, each paginated on its own key."""
    settings = get_settings()
    movie_page = parse_page(request.query_params.get("movie_page"))
    tv_page = parse_page(request.query_params.get("tv_page"))

    view = await load_home(client, movie_page, tv_page, settings.trending_window)

    return await _render(
        request,
        "home.html",
        {
            "view": view,
            "page_title": "Home",
            "movie_pagination": build_pagination(
                movie_page,
                view.trending_movies.total_pages,
                request.url.path,
                request.query_params,
                page_param="movie_page",
                window=settings.pagination_window,
                anchor="trending-movies",
            ),
            "tv_pagination": build_pagination(
                tv_page,
                view.trending_tv.total_pages,
                request.url.path,
                request.query_params,
                page_param="tv_page",
                window=settings.pagination_window,
                anchor="trending-tv",
            ),
        },
    )


async def _listing_page(request: Request, kind: str, client: TMDBClient):
    settings = get_settings()
    page = parse_page(request.query_params.get("page"))
    listing = LISTINGS[kind]

    try:
        result = await load_listing(client, kind, page, settings.popular_movies_source)
    except ValidationError as exc:
        return await _error_page(request, str(exc), 400)
    except UpstreamError as exc:
        logger.error(f"Error loading popular {kind}: {exc}")
        return await _error_page(request, f"Could not load {listing['title'].lower()}.", 502)

    return await _render(
        request,
        "listing.html",
        {
            "items": result.results,
            "page_title": listing["title"],
            "kind": kind,
            "anchor": listing["anchor"],
            "pagination": build_pagination(
                page,
                result.total_pages,
                request.url.path,
                request.query_params,
                window=settings.pagination_window,
                anchor=listing["anchor"],
            ),
        },
    )


@router.get("/movie/popular")
async def popular_movies(request: Request, client: TMDBClient = Depends(get_tmdb_client)):
    """Popular movies; the backing endpoint is configurable."""
    return await _listing_page(request, "movie", client)


@router.get("/tv/popular")
async def popular_tv(request: Request, client: TMDBClient = Depends(get_tmdb_client)):
    """Popular TV shows."""
    return await _listing_page(request, "tv", client)


@router.get("/search")
async def search(
    request: Request,
    query: str = "",
    client: TMDBClient = Depends(get_tmdb_client),
):
    """Movie and TV search results; a blank query asks for a search term."""
    settings = get_settings()
    movie_page = parse_page(request.query_params.get("movie_page"))
    tv_page = parse_page(request.query_params.get("tv_page"))

    view = await load_search(client, query, movie_page, tv_page)

    return await _render(
        request,
        "search.html",
        {
            "view": view,
            "page_title": f'Search Results for "{view.query}"' if view.query else "Search",
            "movie_pagination": build_pagination(
                movie_page,
                view.movies.total_pages,
                request.url.path,
                request.query_params,
                page_param="movie_page",
                window=settings.pagination_window,
                anchor="search-movies",
            ),
            "tv_pagination": build_pagination(
                tv_page,
                view.tv.total_pages,
                request.url.path,
                request.query_params,
                page_param="tv_page",
                window=settings.pagination_window,
                anchor="search-tv",
            ),
        },
    )


@router.get("/partials/header/{event}")
async def header_partial(
    request: Request, event: HeaderEvent, state: HeaderPanel = HeaderPanel.IDLE
):
    """Return the header with its next panel state (called by HTMX)."""
    return templates.TemplateResponse(
        request=request,
        name="partials/header.html",
        context={"header_state": transition(state, event)},
    )


@router.get("/{media_type}/{media_id}")
async def media_details_page(
    request: Request,
    media_type: str,
    media_id: str,
    client: TMDBClient = Depends(get_tmdb_client),
):
    """Details page with the selected trailer, or a fallback when there is none."""
    if media_type not in DETAIL_KINDS:
        return await _error_page(request, "Page not found.", 404)

    try:
        view = await load_details(client, media_type, media_id)
    except asyncio.CancelledError:
        logger.info(f"Request for {media_type} {media_id} cancelled; discarding")
        raise
    except ValidationError:
        return await _error_page(request, "Page not found.", 404)
    except UpstreamError as exc:
        if exc.status_code == 404:
            return await _error_page(request, "Page not found.", 404)
        return await _error_page(request, f"Error: {exc.message}", 502)

    return await _render(
        request,
        "details.html",
        {"view": view, "media": view.media, "page_title": view.media.display_title},
    )
