"""Per-view data loading.

Each page view fetches everything it needs concurrently and waits for all of
it before rendering. A failing branch never takes its siblings down: home
sections degrade one by one, and a details page without videos still renders
without a trailer.
"""

import asyncio
import logging
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict

from app.core.errors import CatalogError, PartialFailure, UpstreamError, ValidationError
from app.models.media import PaginatedResult, Video
from app.services.tmdb import TMDBClient
from app.services.trailers import select_trailer

logger = logging.getLogger(__name__)

SEARCH_ERROR_MESSAGE = "Failed to fetch search results. Please try again later."


class Section(BaseModel):
    """One independently loaded block of a page."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    result: PaginatedResult = PaginatedResult.empty()
    error: Optional[str] = None

    @property
    def items(self) -> List[Any]:
        return self.result.results

    @property
    def total_pages(self) -> int:
        return self.result.total_pages


class HomeView(BaseModel):
    now_playing: Section
    trending_movies: Section
    trending_tv: Section


class SearchView(BaseModel):
    query: str = ""
    movies: Section = Section()
    tv: Section = Section()
    error: Optional[str] = None

    @property
    def is_blank(self) -> bool:
        return not self.query

    @property
    def has_results(self) -> bool:
        return bool(self.movies.items or self.tv.items)


class DetailsView(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    media: Any
    videos: List[Video] = []
    trailer: Optional[Video] = None
    videos_error: Optional[str] = None


async def _load_section(label: str, fetch) -> Section:
    """Await one section, keeping its failure local to it."""
    try:
        return Section(result=await fetch)
    except CatalogError as exc:
        logger.error(f"Error loading {label}: {exc}")
        return Section(error=f"Could not load {label}.")


async def load_home(
    client: TMDBClient,
    movie_page: int = 1,
    tv_page: int = 1,
    window: str = "week",
) -> HomeView:
    """Now-playing carousel plus trending movies and TV, fetched together."""
    now_playing, movies, tv = await asyncio.gather(
        _load_section("now playing movies", client.fetch_now_playing()),
        _load_section(
            "trending movies", client.fetch_trending("movie", movie_page, window)
        ),
        _load_section("trending TV shows", client.fetch_trending("tv", tv_page, window)),
    )
    return HomeView(now_playing=now_playing, trending_movies=movies, trending_tv=tv)


async def load_listing(
    client: TMDBClient, kind: str, page: int = 1, source: str = "popular"
) -> PaginatedResult:
    """Single-section listing page (popular movies or TV).

    For movies ``source`` picks the backing endpoint: ``popular`` or
    ``now_playing``.
    """
    if kind == "movie" and source == "now_playing":
        return await client.fetch_now_playing(page)
    return await client.fetch_popular(kind, page)


async def load_search(
    client: TMDBClient, query: Optional[str], movie_page: int = 1, tv_page: int = 1
) -> SearchView:
    """Movie and TV search side by side.

    A blank query is a neutral state, not an error, and never reaches TMDB.
    A page past the end reports the last page instead of an upstream failure.
    """
    query = (query or "").strip()
    if not query:
        return SearchView()

    try:
        movies, tv = await asyncio.gather(
            client.search("movie", query, movie_page),
            client.search("tv", query, tv_page),
        )
    except ValidationError as exc:
        logger.info(f"Rejected search page for '{query}': {exc}")
        return SearchView(query=query, error=str(exc))
    except CatalogError as exc:
        logger.error(f"Error fetching search results for '{query}': {exc}")
        return SearchView(query=query, error=SEARCH_ERROR_MESSAGE)

    return SearchView(query=query, movies=Section(result=movies), tv=Section(result=tv))


async def _load_videos(client: TMDBClient, kind: str, media_id: str) -> List[Video]:
    try:
        return await client.fetch_videos(kind, media_id)
    except UpstreamError as exc:
        failure = PartialFailure("trailer", exc)
        logger.warning(f"{kind} {media_id}: {failure}")
        raise failure from exc


async def load_details(client: TMDBClient, kind: str, media_id: str) -> DetailsView:
    """Details (required) and videos (optional) for one title.

    Raises whatever the details fetch raises. Video failures are logged and
    leave the view without a trailer.
    """
    media, videos = await asyncio.gather(
        client.fetch_details(kind, media_id),
        _load_videos(client, kind, media_id),
        return_exceptions=True,
    )
    if isinstance(media, BaseException):
        raise media

    if isinstance(videos, PartialFailure):
        return DetailsView(media=media, videos_error="No trailer available.")
    if isinstance(videos, BaseException):
        raise videos

    return DetailsView(media=media, videos=videos, trailer=select_trailer(videos))
