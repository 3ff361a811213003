"""Media models normalized from TMDB responses.

Movie, TV and person payloads share one endpoint shape on the TMDB side but
carry different fields. Each kind gets its own model and the unions below
are discriminated on ``media_type``, so a consumer always knows which pair of
title/date fields exists.
"""

from enum import Enum
from typing import Annotated, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, Field, field_validator, model_validator

T = TypeVar("T")


class MediaKind(str, Enum):
    """Kind of a TMDB entry."""

    MOVIE = "movie"
    TV = "tv"
    PERSON = "person"


def _year(date: Optional[str]) -> Optional[str]:
    return date[:4] if date else None


class _TMDBModel(BaseModel):
    @field_validator(
        "release_date",
        "first_air_date",
        "air_date",
        "published_at",
        "poster_path",
        "backdrop_path",
        "profile_path",
        "logo_path",
        "origin_country",
        "tagline",
        "homepage",
        "imdb_id",
        mode="before",
        check_fields=False,
    )
    @classmethod
    def _empty_string_is_none(cls, v):
        # TMDB sends "" for unknown dates and some nullable paths
        return None if v == "" else v


class Genre(BaseModel):
    id: int
    name: str


class Company(_TMDBModel):
    """A production company or TV network."""

    id: int
    name: str
    logo_path: Optional[str] = None
    origin_country: Optional[str] = None


class SeasonSummary(_TMDBModel):
    id: int
    season_number: int
    name: str = ""
    episode_count: int = 0
    air_date: Optional[str] = None
    poster_path: Optional[str] = None


class MovieItem(_TMDBModel):
    """A movie as it appears in listings and search results."""

    media_type: Literal["movie"] = "movie"
    id: int
    title: str = "Unknown"
    original_title: Optional[str] = None
    overview: Optional[str] = ""
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: float = Field(default=0.0, ge=0.0, le=10.0)
    vote_count: int = 0
    release_date: Optional[str] = None
    popularity: float = 0.0
    genre_ids: List[int] = []

    @property
    def display_title(self) -> str:
        return self.title

    @property
    def display_date(self) -> Optional[str]:
        return self.release_date

    @property
    def release_year(self) -> Optional[str]:
        return _year(self.release_date)

    @property
    def image_path(self) -> Optional[str]:
        return self.poster_path

    @property
    def detail_path(self) -> str:
        return f"/movie/{self.id}"


class TVItem(_TMDBModel):
    """A TV show as it appears in listings and search results."""

    media_type: Literal["tv"] = "tv"
    id: int
    name: str = "Unknown"
    original_name: Optional[str] = None
    overview: Optional[str] = ""
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: float = Field(default=0.0, ge=0.0, le=10.0)
    vote_count: int = 0
    first_air_date: Optional[str] = None
    popularity: float = 0.0
    genre_ids: List[int] = []

    @property
    def display_title(self) -> str:
        return self.name

    @property
    def display_date(self) -> Optional[str]:
        return self.first_air_date

    @property
    def release_year(self) -> Optional[str]:
        return _year(self.first_air_date)

    @property
    def image_path(self) -> Optional[str]:
        return self.poster_path

    @property
    def detail_path(self) -> str:
        return f"/tv/{self.id}"


class PersonItem(_TMDBModel):
    """A person; only returned by trending/all, trending/person and multi search."""

    media_type: Literal["person"] = "person"
    id: int
    name: str = "Unknown"
    profile_path: Optional[str] = None
    known_for_department: Optional[str] = None
    popularity: float = 0.0

    @property
    def display_title(self) -> str:
        return self.name

    @property
    def display_date(self) -> Optional[str]:
        return None

    @property
    def release_year(self) -> Optional[str]:
        return None

    @property
    def image_path(self) -> Optional[str]:
        return self.profile_path

    @property
    def detail_path(self) -> Optional[str]:
        # People have no detail page
        return None


MediaItem = Annotated[
    Union[MovieItem, TVItem, PersonItem], Field(discriminator="media_type")
]


class MovieDetails(MovieItem):
    """Full movie details from ``/movie/{id}``."""

    genres: List[Genre] = []
    runtime: Optional[int] = None
    production_companies: List[Company] = []
    tagline: Optional[str] = None
    status: str = ""
    imdb_id: Optional[str] = None
    homepage: Optional[str] = None

    @property
    def duration_label(self) -> str:
        return f"{self.runtime} mins" if self.runtime else "N/A"

    @property
    def genre_label(self) -> str:
        return ", ".join(g.name for g in self.genres) or "N/A"


class TVDetails(TVItem):
    """Full TV show details from ``/tv/{id}``."""

    genres: List[Genre] = []
    number_of_seasons: int = 0
    number_of_episodes: int = 0
    episode_run_time: List[int] = []
    networks: List[Company] = []
    seasons: List[SeasonSummary] = []
    tagline: Optional[str] = None
    status: str = ""  # e.g., "Returning Series", "Ended"
    in_production: bool = False
    homepage: Optional[str] = None

    @property
    def duration_label(self) -> str:
        parts = []
        if self.number_of_seasons:
            parts.append(f"{self.number_of_seasons} seasons")
        if self.number_of_episodes:
            parts.append(f"{self.number_of_episodes} episodes")
        return ", ".join(parts) or "N/A"

    @property
    def genre_label(self) -> str:
        return ", ".join(g.name for g in self.genres) or "N/A"


MediaDetails = Annotated[
    Union[MovieDetails, TVDetails], Field(discriminator="media_type")
]


class Video(_TMDBModel):
    """A trailer/teaser/clip candidate attached to a title."""

    id: str
    key: str
    name: str = ""
    site: str
    type: str
    official: bool = False
    size: Optional[int] = None
    published_at: Optional[str] = None
    iso_639_1: Optional[str] = None
    iso_3166_1: Optional[str] = None

    @property
    def embed_url(self) -> Optional[str]:
        if self.site == "YouTube":
            return f"https://www.youtube.com/embed/{self.key}"
        return None


class VideoList(BaseModel):
    """Raw ``/{kind}/{id}/videos`` payload, in provider order."""

    id: Optional[int] = None
    results: List[Video] = []


class PaginatedResult(BaseModel, Generic[T]):
    """One page of a paginated TMDB listing."""

    page: int = Field(default=1, ge=1)
    results: List[T] = []
    total_pages: int = Field(default=0, ge=0)
    total_results: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _page_in_range(self):
        if self.page > max(self.total_pages, 1):
            raise ValueError(
                f"page {self.page} is past the last page ({self.total_pages})"
            )
        return self

    @classmethod
    def empty(cls) -> "PaginatedResult[T]":
        return cls(page=1, results=[], total_pages=0, total_results=0)
