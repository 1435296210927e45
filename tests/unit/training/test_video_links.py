"""Tests for external video link parsing and admission."""

import pytest

from app.schemas.training_session import VideoSource
from app.training.errors import InvalidVideoLink, ValidationError
from app.training.video_links import admit_external_link, embed_url, extract_video_id, validate_video_link
from tests.factories import make_session

VIDEO_ID = "dQw4w9WgXcQ"


class TestExtractVideoId:
    @pytest.mark.parametrize(
        "url",
        [
            f"https://www.youtube.com/watch?v={VIDEO_ID}",
            f"https://youtube.com/watch?feature=share&v={VIDEO_ID}",
            f"https://youtu.be/{VIDEO_ID}",
            f"https://youtu.be/{VIDEO_ID}?t=42",
            f"https://www.youtube.com/embed/{VIDEO_ID}",
            f"https://www.youtube.com/v/{VIDEO_ID}",
            f"  https://www.youtube.com/watch?v={VIDEO_ID}  ",
        ],
    )
    def test_recognised_forms(self, url):
        assert extract_video_id(url) == VIDEO_ID

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "https://example.com/video.mp4",
            "https://vimeo.com/123456789",
            "https://www.youtube.com/watch?v=short",
            "not a url",
        ],
    )
    def test_unrecognised(self, url):
        assert extract_video_id(url) is None

    def test_validate_raises(self):
        with pytest.raises(InvalidVideoLink):
            validate_video_link("https://example.com/video.mp4")

    def test_invalid_link_is_a_validation_error(self):
        assert issubclass(InvalidVideoLink, ValidationError)

    def test_embed_url(self):
        assert embed_url(VIDEO_ID) == f"https://www.youtube.com/embed/{VIDEO_ID}"


@pytest.mark.anyio
class TestAdmitExternalLink:
    async def test_appends_external_entry(self, store):
        store.add(make_session())
        entry = await admit_external_link(store, 1, f"https://youtu.be/{VIDEO_ID}", "Pressing drill")

        assert entry.source_type == VideoSource.EXTERNAL
        assert entry.external_id == VIDEO_ID
        assert entry.url == f"https://youtu.be/{VIDEO_ID}"
        assert entry.caption == "Pressing drill"
        assert store.sessions[1].videos == [entry]

    async def test_appends_after_existing_videos(self, store):
        store.add(make_session())
        first = await admit_external_link(store, 1, f"https://youtu.be/{VIDEO_ID}")
        second = await admit_external_link(store, 1, f"https://www.youtube.com/watch?v={VIDEO_ID}")
        assert store.sessions[1].videos == [first, second]

    async def test_invalid_link_never_reaches_store(self, store):
        store.add(make_session())
        with pytest.raises(InvalidVideoLink):
            await admit_external_link(store, 1, "https://example.com/video.mp4")
        assert store.count("append_video") == 0
        assert store.sessions[1].videos == []
