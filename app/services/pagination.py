"""Page navigation for paginated listings.

Everything here is a pure function of ``(current page, total pages)`` plus the
request's query string. Nothing is remembered between renders.
"""

from collections.abc import Iterable, Mapping
from typing import Any, List, Optional, Union
from urllib.parse import urlencode

from pydantic import BaseModel

ELLIPSIS = "..."
DEFAULT_WINDOW = 7
MIN_WINDOW = 5
MAX_WINDOW = 9

PageEntry = Union[int, str]


def page_window(current: int, total: int, window: int = DEFAULT_WINDOW) -> List[PageEntry]:
    """Return the page buttons to show, with ``ELLIPSIS`` for skipped ranges.

    Short listings show every page. Longer ones show the first page, a run
    of ``window - 2`` pages around ``current`` and the last page. The run is
    clamped to ``[2, total - 1]`` so it hugs either end instead of shrinking,
    which keeps the number of buttons nearly constant.

    >>> page_window(8, 20)
    [1, '...', 6, 7, 8, 9, 10, '...', 20]
    """
    if not MIN_WINDOW <= window <= MAX_WINDOW:
        raise ValueError(f"window must be between {MIN_WINDOW} and {MAX_WINDOW}")
    if total <= 0:
        return []
    if total <= window:
        return list(range(1, total + 1))

    current = min(max(current, 1), total)
    inner = window - 2
    start = max(2, min(current - inner // 2, total - inner))
    end = start + inner - 1

    entries: List[PageEntry] = [1]
    if start > 2:
        entries.append(ELLIPSIS)
    entries.extend(range(start, end + 1))
    if end < total - 1:
        entries.append(ELLIPSIS)
    entries.append(total)
    return entries


def _query_pairs(query_params: Any) -> List[tuple[str, str]]:
    if query_params is None:
        return []
    # starlette QueryParams keeps repeated keys
    if hasattr(query_params, "multi_items"):
        return list(query_params.multi_items())
    if isinstance(query_params, Mapping):
        return list(query_params.items())
    if isinstance(query_params, Iterable):
        return list(query_params)
    raise TypeError(f"Unsupported query params: {type(query_params).__name__}")


def page_url(
    base_path: str, query_params: Any, page: int, page_param: str = "page"
) -> str:
    """Build the URL for ``page``, keeping every other query parameter."""
    pairs = []
    replaced = False
    for key, value in _query_pairs(query_params):
        if key == page_param:
            if not replaced:
                pairs.append((key, str(page)))
                replaced = True
            continue
        pairs.append((key, value))
    if not replaced:
        pairs.append((page_param, str(page)))
    return f"{base_path}?{urlencode(pairs)}"


def go_to_page(
    target: int,
    total: int,
    base_path: str,
    query_params: Any = None,
    page_param: str = "page",
) -> Optional[str]:
    """Return the URL to navigate to, or None when ``target`` is out of range."""
    if target < 1 or target > total:
        return None
    return page_url(base_path, query_params, target, page_param)


def parse_page(raw: Any) -> int:
    """Read a page number from a query value; anything unusable means page 1."""
    try:
        page = int(raw)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


class PageLink(BaseModel):
    """One button of the page bar."""

    page: Optional[int] = None
    url: Optional[str] = None
    is_current: bool = False

    @property
    def is_ellipsis(self) -> bool:
        return self.page is None


class Pagination(BaseModel):
    """Everything a template needs to draw a page bar."""

    current: int
    total: int
    page_param: str = "page"
    entries: List[PageLink] = []
    previous_url: Optional[str] = None
    next_url: Optional[str] = None
    anchor: Optional[str] = None

    @property
    def visible(self) -> bool:
        # Nothing to navigate with a single page
        return self.total > 1


def build_pagination(
    current: int,
    total: int,
    base_path: str,
    query_params: Any = None,
    page_param: str = "page",
    window: int = DEFAULT_WINDOW,
    anchor: Optional[str] = None,
) -> Pagination:
    """Compute the page bar for one paginated section."""
    entries = []
    for entry in page_window(current, total, window):
        if entry == ELLIPSIS:
            entries.append(PageLink())
            continue
        entries.append(
            PageLink(
                page=entry,
                url=page_url(base_path, query_params, entry, page_param),
                is_current=entry == current,
            )
        )

    return Pagination(
        current=current,
        total=total,
        page_param=page_param,
        entries=entries,
        previous_url=go_to_page(current - 1, total, base_path, query_params, page_param),
        next_url=go_to_page(current + 1, total, base_path, query_params, page_param),
        anchor=anchor,
    )
