"""TMDB image URLs with placeholder fallback."""

from typing import Optional

from markupsafe import Markup, escape

TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/"
PLACEHOLDER_TEMPLATE = "https://placehold.co/png/{width}x{height}/1f2937/FFFFFF?text=No+Image"
IMAGE_NOT_AVAILABLE = "Image not available"

# Pixel size of each TMDB size token. Poster sizes are 2:3, backdrop sizes
# 16:9; "original" is only requested for backdrops.
SIZE_DIMENSIONS = {
    "w92": (92, 138),
    "w154": (154, 231),
    "w185": (185, 278),
    "w342": (342, 513),
    "w500": (500, 750),
    "w300": (300, 169),
    "w780": (780, 439),
    "w1280": (1280, 720),
    "original": (1280, 720),
}
DEFAULT_DIMENSIONS = (500, 750)


def placeholder_url(
    size: str = "w342", width: Optional[int] = None, height: Optional[int] = None
) -> str:
    """Placeholder with the same dimensions as the image it stands in for."""
    if width and height:
        return PLACEHOLDER_TEMPLATE.format(width=width, height=height)
    w, h = SIZE_DIMENSIONS.get(size, DEFAULT_DIMENSIONS)
    return PLACEHOLDER_TEMPLATE.format(width=w, height=h)


def image_url(
    path: Optional[str],
    size: str = "w342",
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> str:
    """Resolve a TMDB image path to a URL; missing paths get a placeholder."""
    if not path:
        return placeholder_url(size, width, height)
    return f"{TMDB_IMAGE_BASE_URL}{size}{path}"


def image_fallback_attrs(
    size: str = "w342", width: Optional[int] = None, height: Optional[int] = None
) -> Markup:
    """``onerror`` attribute that swaps a broken image for the placeholder.

    Covers CDN failures on paths that looked valid when the page was built.
    """
    fallback = placeholder_url(size, width, height)
    script = (
        f"this.onerror=null;this.src='{fallback}';"
        f"this.alt='{IMAGE_NOT_AVAILABLE}';"
    )
    return Markup(f'onerror="{escape(script)}"')
