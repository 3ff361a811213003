"""TMDB client for listings, search, details and videos.

Every outbound call to TMDB goes through :class:`TMDBClient`. It injects the
credential, turns transport failures, non-2xx statuses and unusable bodies
into :class:`UpstreamError`, and returns parsed models. It keeps no state
between calls: no cache, no retries, no rate limiting.
"""

import logging
from enum import Enum
from typing import Any, List

import niquests
from fastapi import Request
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.core.config import Settings
from app.core.errors import UpstreamError, ValidationError
from app.models.media import (
    Genre,
    MediaDetails,
    MediaItem,
    PaginatedResult,
    Video,
    VideoList,
)

logger = logging.getLogger(__name__)

ITEM_KINDS = ("movie", "tv", "person")
DETAIL_KINDS = ("movie", "tv")
TRENDING_KINDS = ("movie", "tv", "person", "all")
POPULAR_KINDS = ("movie", "tv")
SEARCH_KINDS = ("movie", "tv", "person", "multi")
TRENDING_WINDOWS = ("day", "week")

_page_adapter = TypeAdapter(PaginatedResult[MediaItem])
_details_adapter = TypeAdapter(MediaDetails)
_genres_adapter = TypeAdapter(List[Genre])


def _require_kind(kind: Any, allowed: tuple[str, ...]) -> str:
    """Normalize a media kind, rejecting anything not in ``allowed``."""
    if isinstance(kind, Enum):
        kind = kind.value
    if not kind:
        raise ValidationError("mediaType is required.")
    if kind not in allowed:
        choices = ", ".join(f'"{k}"' for k in allowed)
        raise ValidationError(f"Invalid mediaType {kind!r}. Must be one of {choices}.")
    return kind


def _require_id(media_id: Any) -> str:
    """Normalize a TMDB id; ids are positive integers, sent as path segments."""
    if isinstance(media_id, bool):
        raise ValidationError(f"Invalid id {media_id!r}.")
    if isinstance(media_id, int):
        if media_id < 1:
            raise ValidationError(f"Invalid id {media_id!r}.")
        return str(media_id)
    media_id = str(media_id).strip() if media_id is not None else ""
    if not media_id:
        raise ValidationError("id is required.")
    # isdigit() alone accepts non-ASCII digits such as "²"
    if not (media_id.isascii() and media_id.isdigit()) or int(media_id) < 1:
        raise ValidationError(f"Invalid id {media_id!r}.")
    return str(int(media_id))


def _require_page(page: Any) -> int:
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise ValidationError(f"Invalid page {page!r}. Pages start at 1.")
    return page


def _status_message(response: niquests.Response) -> str:
    """Extract TMDB's ``status_message`` or fall back to the HTTP reason."""
    try:
        body = response.json()
    except (ValueError, niquests.exceptions.RequestException):
        body = None
    if isinstance(body, dict) and body.get("status_message"):
        return str(body["status_message"])
    return response.reason or f"HTTP {response.status_code}"


class TMDBClient:
    """Async TMDB v3 client.

    Args:
        settings: Application settings; supplies the API key, base URL,
            language, timeout and proxy.
        session: Optional pre-built session (mainly for tests).
    """

    def __init__(self, settings: Settings, session: niquests.AsyncSession | None = None):
        self._api_key = settings.tmdb_api_key
        self._base_url = settings.tmdb_base_url
        self._language = settings.language
        self._timeout = settings.request_timeout
        if session is None:
            session = niquests.AsyncSession()
            if settings.proxy:
                session.proxies = {"http": settings.proxy, "https": settings.proxy}
        self.session = session

    async def aclose(self) -> None:
        """Properly close the internal HTTP session."""
        if self.session:
            await self.session.close()

    async def _get(self, endpoint: str, params: dict[str, Any] | None = None) -> dict:
        """GET ``endpoint`` and return the decoded JSON object."""
        query = {"api_key": self._api_key, "language": self._language}
        if params:
            query.update({k: str(v) for k, v in params.items()})

        kwargs: dict[str, Any] = {"params": query}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout

        try:
            response = await self.session.get(f"{self._base_url}{endpoint}", **kwargs)
        except niquests.exceptions.RequestException as exc:
            # The exception text may echo the request URL, api_key included
            logger.error(f"TMDB request to {endpoint} failed: {type(exc).__name__}")
            raise UpstreamError(
                endpoint, f"network error ({type(exc).__name__})", original_exception=exc
            ) from exc

        if not response.ok:
            message = _status_message(response)
            logger.error(
                f"TMDB API error on {endpoint} "
                f"({response.status_code} {response.reason}): {message}"
            )
            raise UpstreamError(endpoint, message, status_code=response.status_code)

        try:
            data = response.json()
        except (ValueError, niquests.exceptions.RequestException) as exc:
            logger.error(f"TMDB returned invalid JSON for {endpoint}")
            raise UpstreamError(
                endpoint,
                "malformed response (invalid JSON)",
                status_code=response.status_code,
                original_exception=exc,
            ) from exc

        if not isinstance(data, dict):
            raise UpstreamError(
                endpoint, "malformed response (expected an object)", response.status_code
            )
        return data

    def _parse_page(
        self, endpoint: str, data: dict, inject_kind: str | None = None
    ) -> PaginatedResult:
        """Validate a ``{page, results, total_pages, total_results}`` payload."""
        page = data.get("page", 1)
        total_pages = data.get("total_pages", 0)
        if isinstance(page, int) and isinstance(total_pages, int):
            if page > max(total_pages, 1):
                raise ValidationError(
                    f"Page {page} is out of range; the last page is {max(total_pages, 1)}."
                )

        results = []
        for item in data.get("results") or []:
            if not isinstance(item, dict):
                continue
            if inject_kind is not None:
                item = {**item, "media_type": inject_kind}
            if item.get("media_type") not in ITEM_KINDS:
                logger.debug(
                    f"Skipping {endpoint} result with media_type {item.get('media_type')!r}"
                )
                continue
            results.append(item)

        try:
            return _page_adapter.validate_python({**data, "results": results})
        except PydanticValidationError as exc:
            logger.error(f"Unexpected TMDB payload for {endpoint}: {exc}")
            raise UpstreamError(
                endpoint, "malformed response", original_exception=exc
            ) from exc

    async def _fetch_page(
        self,
        endpoint: str,
        page: int,
        params: dict[str, Any] | None = None,
        inject_kind: str | None = None,
    ) -> PaginatedResult:
        query = {"page": page}
        if params:
            query.update(params)
        data = await self._get(endpoint, query)
        return self._parse_page(endpoint, data, inject_kind)

    async def fetch_trending(
        self, kind: str = "all", page: int = 1, window: str = "week"
    ) -> PaginatedResult:
        """Trending titles for ``kind`` over the ``day`` or ``week`` window."""
        kind = _require_kind(kind, TRENDING_KINDS)
        page = _require_page(page)
        if window not in TRENDING_WINDOWS:
            raise ValidationError(f'Invalid window {window!r}. Must be "day" or "week".')
        # Trending results already carry media_type
        return await self._fetch_page(f"/trending/{kind}/{window}", page)

    async def fetch_popular(self, kind: str, page: int = 1) -> PaginatedResult:
        """Popular movies or TV shows."""
        kind = _require_kind(kind, POPULAR_KINDS)
        page = _require_page(page)
        return await self._fetch_page(f"/{kind}/popular", page, inject_kind=kind)

    async def fetch_now_playing(self, page: int = 1) -> PaginatedResult:
        """Movies currently in theaters."""
        page = _require_page(page)
        return await self._fetch_page("/movie/now_playing", page, inject_kind="movie")

    async def search(self, kind: str, query: str | None, page: int = 1) -> PaginatedResult:
        """Search titles by free text.

        An empty or whitespace-only query returns an empty page without
        calling TMDB.
        """
        kind = _require_kind(kind, SEARCH_KINDS)
        page = _require_page(page)
        query = (query or "").strip()
        if not query:
            return PaginatedResult.empty()
        return await self._fetch_page(
            f"/search/{kind}",
            page,
            params={"query": query},
            inject_kind=None if kind == "multi" else kind,
        )

    async def fetch_details(self, kind: str, media_id: str | int):
        """Full details for one movie or TV show."""
        kind = _require_kind(kind, DETAIL_KINDS)
        media_id = _require_id(media_id)
        endpoint = f"/{kind}/{media_id}"
        data = await self._get(endpoint)
        try:
            return _details_adapter.validate_python({**data, "media_type": kind})
        except PydanticValidationError as exc:
            logger.error(f"Unexpected TMDB payload for {endpoint}: {exc}")
            raise UpstreamError(
                endpoint, "malformed response", original_exception=exc
            ) from exc

    async def fetch_videos(self, kind: str, media_id: str | int) -> List[Video]:
        """Videos attached to a title, in the order TMDB returns them."""
        kind = _require_kind(kind, DETAIL_KINDS)
        media_id = _require_id(media_id)
        endpoint = f"/{kind}/{media_id}/videos"
        data = await self._get(endpoint)
        try:
            return VideoList.model_validate(data).results
        except PydanticValidationError as exc:
            logger.error(f"Unexpected TMDB payload for {endpoint}: {exc}")
            raise UpstreamError(
                endpoint, "malformed response", original_exception=exc
            ) from exc

    async def fetch_genres(self, kind: str) -> List[Genre]:
        """Official genre list for movies or TV."""
        kind = _require_kind(kind, DETAIL_KINDS)
        endpoint = f"/genre/{kind}/list"
        data = await self._get(endpoint)
        try:
            return _genres_adapter.validate_python(data.get("genres") or [])
        except PydanticValidationError as exc:
            raise UpstreamError(
                endpoint, "malformed response", original_exception=exc
            ) from exc


def get_tmdb_client(request: Request) -> TMDBClient:
    """Dependency that provides the client created at startup."""
    return request.app.state.tmdb_client
