from app.models.media import Video
from app.services.trailers import select_trailer
from factories import video


def _videos(*payloads):
    return [Video(**p) for p in payloads]


def test_official_youtube_trailer_wins():
    videos = _videos(
        video("teaser", type="Teaser"),
        video("fan", type="Trailer"),
        video("official", type="Trailer", official=True),
    )

    assert select_trailer(videos).key == "official"


def test_unofficial_trailer_beats_teaser():
    videos = _videos(video("teaser", type="Teaser"), video("fan", type="Trailer"))

    assert select_trailer(videos).key == "fan"


def test_first_match_in_provider_order_wins_within_a_tier():
    videos = _videos(video("one"), video("two"))

    assert select_trailer(videos).key == "one"


def test_youtube_teaser_when_no_trailer():
    videos = _videos(
        video("vimeo", site="Vimeo", type="Trailer"),
        video("teaser", type="Teaser"),
    )

    assert select_trailer(videos).key == "teaser"


def test_no_candidates():
    assert select_trailer([]) is None
    assert select_trailer(_videos(video("clip", type="Clip"))) is None
    assert select_trailer(_videos(video("v", site="Vimeo", official=True))) is None
