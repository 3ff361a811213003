"""Pick the trailer to embed on a details page."""

from typing import Callable, Iterable, List, Optional

from app.models.media import Video

# Checked in order; the first tier with any match wins.
TRAILER_TIERS: List[Callable[[Video], bool]] = [
    lambda v: v.site == "YouTube" and v.type == "Trailer" and v.official,
    lambda v: v.site == "YouTube" and v.type == "Trailer",
    lambda v: v.site == "YouTube" and v.type == "Teaser",
]


def select_trailer(videos: Iterable[Video]) -> Optional[Video]:
    """Return the best trailer in ``videos``, or None when nothing qualifies.

    Within a tier the provider's order decides.
    """
    videos = list(videos)
    for matches in TRAILER_TIERS:
        for video in videos:
            if matches(video):
                return video
    return None
