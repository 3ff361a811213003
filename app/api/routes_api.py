"""API routes returning JSON for HTMX or external tools."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.core.errors import UpstreamError, ValidationError
from app.models.media import Genre, MediaItem, PaginatedResult
from app.services.tmdb import DETAIL_KINDS, TMDBClient, get_tmdb_client

router = APIRouter()
logger = logging.getLogger(__name__)


async def _fetch(coro):
    """Await a client call, mapping catalog errors to HTTP errors."""
    try:
        return await coro
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except UpstreamError as exc:
        raise HTTPException(status_code=502, detail=exc.message) from exc


@router.get("/media-details")
async def media_details(
    media_type: Optional[str] = Query(None, alias="mediaType"),
    media_id: Optional[str] = Query(None, alias="id"),
    videos: Optional[str] = Query(None, description="'true' to return videos"),
    client: TMDBClient = Depends(get_tmdb_client),
):
    """Details for one movie or TV show, or its videos with ``videos=true``."""
    if not media_type or not media_id:
        return JSONResponse(
            {"error": "mediaType and id parameters are required."}, status_code=400
        )
    if media_type not in DETAIL_KINDS:
        return JSONResponse(
            {"error": 'Invalid mediaType. Must be "movie" or "tv".'}, status_code=400
        )

    try:
        if videos == "true":
            results = await client.fetch_videos(media_type, media_id)
            return {
                "id": int(media_id),
                "results": [v.model_dump(mode="json") for v in results],
            }
        media = await client.fetch_details(media_type, media_id)
        return media.model_dump(mode="json")
    except ValidationError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except UpstreamError as exc:
        logger.error(
            f"API error fetching media details/videos for {media_type} {media_id}: {exc}"
        )
        return JSONResponse(
            {"error": "Failed to fetch media details or videos."}, status_code=500
        )


@router.get("/trending/{kind}", response_model=PaginatedResult[MediaItem])
async def api_trending(
    kind: str,
    page: int = Query(1, description="Page number, starting at 1"),
    window: Optional[str] = Query(None, description="day or week"),
    client: TMDBClient = Depends(get_tmdb_client),
):
    """Trending movies, TV shows, people, or all three."""
    window = window or get_settings().trending_window
    return await _fetch(client.fetch_trending(kind, page, window))


@router.get("/popular/{kind}", response_model=PaginatedResult[MediaItem])
async def api_popular(
    kind: str,
    page: int = Query(1),
    client: TMDBClient = Depends(get_tmdb_client),
):
    """Popular movies or TV shows."""
    return await _fetch(client.fetch_popular(kind, page))


@router.get("/now-playing", response_model=PaginatedResult[MediaItem])
async def api_now_playing(
    page: int = Query(1),
    client: TMDBClient = Depends(get_tmdb_client),
):
    """Movies currently in theaters."""
    return await _fetch(client.fetch_now_playing(page))


@router.get("/search/{kind}", response_model=PaginatedResult[MediaItem])
async def api_search(
    kind: str,
    query: str = Query("", description="Search query"),
    page: int = Query(1),
    client: TMDBClient = Depends(get_tmdb_client),
):
    """Search TMDB by title. An empty query returns an empty page."""
    return await _fetch(client.search(kind, query, page))


@router.get("/genres/{kind}", response_model=List[Genre])
async def api_genres(
    kind: str,
    client: TMDBClient = Depends(get_tmdb_client),
):
    """Genre list for movies or TV."""
    return await _fetch(client.fetch_genres(kind))


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "movie-explorer"}
