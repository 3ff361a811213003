import niquests
import pytest

from app.core.config import Settings
from app.core.errors import UpstreamError, ValidationError
from app.models.media import MovieDetails, MovieItem, PersonItem, TVDetails, TVItem
from app.services.tmdb import TMDBClient
from factories import FakeResponse, movie, page, tv, video


@pytest.mark.anyio
@pytest.mark.parametrize("query", ["", "   ", None])
async def test_search_blank_query_skips_network(tmdb_client, session, query):
    result = await tmdb_client.search("movie", query)

    assert result.page == 1
    assert result.results == []
    assert result.total_pages == 0
    assert result.total_results == 0
    assert session.get.call_count == 0


@pytest.mark.anyio
async def test_credentials_and_page_are_sent(tmdb_client, session):
    session.get.return_value = FakeResponse(page([movie(1)], page=2, total_pages=5))

    result = await tmdb_client.fetch_trending("movie", page=2)

    url = session.get.call_args.args[0]
    params = session.get.call_args.kwargs["params"]
    assert url == "https://api.themoviedb.org/3/trending/movie/week"
    assert params["api_key"] == "test-key"
    assert params["language"] == "en-US"
    assert params["page"] == "2"
    assert "timeout" not in session.get.call_args.kwargs
    assert result.page == 2
    assert result.total_pages == 5


@pytest.mark.anyio
async def test_timeout_is_passed_when_configured(session):
    client = TMDBClient(
        Settings(tmdb_api_key="test-key", request_timeout=3.5), session=session
    )
    await client.fetch_now_playing()

    assert session.get.call_args.kwargs["timeout"] == 3.5


@pytest.mark.anyio
async def test_popular_injects_media_type(tmdb_client, session):
    session.get.return_value = FakeResponse(page([tv(7, "Show")]))

    result = await tmdb_client.fetch_popular("tv")

    assert session.get.call_args.args[0].endswith("/tv/popular")
    assert isinstance(result.results[0], TVItem)
    assert result.results[0].display_title == "Show"
    assert result.results[0].release_year == "2019"


@pytest.mark.anyio
async def test_search_by_kind_injects_media_type_and_strips_query(tmdb_client, session):
    session.get.return_value = FakeResponse(page([movie(3, "The Matrix")]))

    result = await tmdb_client.search("movie", "  The Matrix ")

    assert session.get.call_args.kwargs["params"]["query"] == "The Matrix"
    assert isinstance(result.results[0], MovieItem)


@pytest.mark.anyio
async def test_trending_all_keeps_provider_tags(tmdb_client, session):
    session.get.return_value = FakeResponse(
        page(
            [
                movie(1, media_type="movie"),
                tv(2, media_type="tv"),
                {"id": 3, "name": "Someone", "media_type": "person"},
                {"id": 4, "name": "A Collection", "media_type": "collection"},
            ]
        )
    )

    result = await tmdb_client.fetch_trending("all")

    assert [type(item) for item in result.results] == [MovieItem, TVItem, PersonItem]
    assert result.results[2].detail_path is None


@pytest.mark.anyio
async def test_details_rejects_bogus_kind_before_network(tmdb_client, session):
    with pytest.raises(ValidationError):
        await tmdb_client.fetch_details("bogus", "123")

    assert session.get.call_count == 0


@pytest.mark.anyio
@pytest.mark.parametrize(
    "media_id", ["", None, "  ", "../1", "12a", 0, "0", "000", "²", "٣", "-5"]
)
async def test_details_rejects_bad_ids_before_network(tmdb_client, session, media_id):
    with pytest.raises(ValidationError):
        await tmdb_client.fetch_details("movie", media_id)

    assert session.get.call_count == 0


@pytest.mark.anyio
async def test_invalid_page_rejected_before_network(tmdb_client, session):
    with pytest.raises(ValidationError):
        await tmdb_client.fetch_popular("movie", page=0)

    assert session.get.call_count == 0


@pytest.mark.anyio
async def test_page_past_the_end_is_a_validation_error(tmdb_client, session):
    session.get.return_value = FakeResponse(page([], page=9, total_pages=3))

    with pytest.raises(ValidationError, match="last page is 3"):
        await tmdb_client.fetch_popular("movie", page=9)


@pytest.mark.anyio
async def test_movie_details_parsed(tmdb_client, session):
    session.get.return_value = FakeResponse(
        movie(
            550,
            "Fight Club",
            genres=[{"id": 18, "name": "Drama"}, {"id": 53, "name": "Thriller"}],
            runtime=139,
            tagline="",
            production_companies=[{"id": 1, "name": "Fox", "logo_path": None, "origin_country": "US"}],
        )
    )

    details = await tmdb_client.fetch_details("movie", 550)

    assert session.get.call_args.args[0].endswith("/movie/550")
    assert isinstance(details, MovieDetails)
    assert details.genre_label == "Drama, Thriller"
    assert details.duration_label == "139 mins"
    assert details.tagline is None


@pytest.mark.anyio
async def test_tv_details_parsed(tmdb_client, session):
    session.get.return_value = FakeResponse(
        tv(
            1399,
            "Game of Thrones",
            number_of_seasons=8,
            number_of_episodes=73,
            seasons=[{"id": 1, "season_number": 1, "name": "Season 1", "episode_count": 10}],
        )
    )

    details = await tmdb_client.fetch_details("tv", "1399")

    assert isinstance(details, TVDetails)
    assert details.duration_label == "8 seasons, 73 episodes"
    assert details.genre_label == "N/A"
    assert details.seasons[0].episode_count == 10


@pytest.mark.anyio
async def test_videos_keep_provider_order(tmdb_client, session):
    session.get.return_value = FakeResponse(
        {"id": 550, "results": [video("b", type="Teaser"), video("a", official=True)]}
    )

    videos = await tmdb_client.fetch_videos("movie", "550")

    assert session.get.call_args.args[0].endswith("/movie/550/videos")
    assert [v.key for v in videos] == ["b", "a"]


@pytest.mark.anyio
async def test_genres(tmdb_client, session):
    session.get.return_value = FakeResponse({"genres": [{"id": 28, "name": "Action"}]})

    genres = await tmdb_client.fetch_genres("movie")

    assert session.get.call_args.args[0].endswith("/genre/movie/list")
    assert genres[0].name == "Action"


@pytest.mark.anyio
async def test_error_carries_provider_status_message(tmdb_client, session):
    session.get.return_value = FakeResponse(
        {"status_code": 7, "status_message": "Invalid API key: You must be granted a valid key."},
        status_code=401,
        reason="Unauthorized",
    )

    with pytest.raises(UpstreamError) as excinfo:
        await tmdb_client.fetch_popular("movie")

    assert excinfo.value.status_code == 401
    assert excinfo.value.endpoint == "/movie/popular"
    assert excinfo.value.message.startswith("Invalid API key")


@pytest.mark.anyio
async def test_error_falls_back_to_reason(tmdb_client, session):
    session.get.return_value = FakeResponse(
        ValueError("not json"), status_code=503, reason="Service Unavailable"
    )

    with pytest.raises(UpstreamError) as excinfo:
        await tmdb_client.fetch_details("tv", "1")

    assert excinfo.value.message == "Service Unavailable"
    assert excinfo.value.status_code == 503


@pytest.mark.anyio
async def test_transport_failure_is_wrapped_without_leaking_key(tmdb_client, session):
    original = niquests.exceptions.ConnectionError(
        "failed: https://api.themoviedb.org/3/movie/popular?api_key=test-key"
    )
    session.get.side_effect = original

    with pytest.raises(UpstreamError) as excinfo:
        await tmdb_client.fetch_popular("movie")

    assert excinfo.value.original_exception is original
    assert excinfo.value.__cause__ is original
    assert excinfo.value.status_code is None
    assert "test-key" not in str(excinfo.value)


@pytest.mark.anyio
async def test_invalid_json_is_labelled(tmdb_client, session):
    session.get.return_value = FakeResponse(ValueError("Expecting value"))

    with pytest.raises(UpstreamError, match="malformed response"):
        await tmdb_client.fetch_now_playing()


@pytest.mark.anyio
async def test_unexpected_payload_is_labelled(tmdb_client, session):
    session.get.return_value = FakeResponse(page([{"title": "no id"}]))

    with pytest.raises(UpstreamError, match="malformed response"):
        await tmdb_client.fetch_now_playing()


@pytest.mark.anyio
async def test_aclose_closes_session(tmdb_client, session):
    await tmdb_client.aclose()

    session.close.assert_awaited_once()
