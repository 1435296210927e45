"""
Externally hosted (YouTube) video links.

:func:`extract_video_id` is pure and needs no store; :func:`admit_external_link`
adds the side effect of appending the video to a session.
"""

import datetime
import re
from typing import Optional

from app.schemas.training_session import VideoEntry, VideoSource
from app.training.errors import InvalidVideoLink
from app.training.store import TrainingSessionStore

VIDEO_ID_LENGTH = 11

# watch?v=ID (or any ...&v=ID), /embed/ID, /v/ID, /e/ID, /<x>/<y>/ID, youtu.be/ID
_VIDEO_LINK_RE = re.compile(r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)"
                            r"([^\"&?/\s]{%d})" % VIDEO_ID_LENGTH)


def extract_video_id(raw_url: str) -> Optional[str]:
    """Return the 11-character video id in *raw_url*, or ``None``."""
    if not raw_url:
        return None
    match = _VIDEO_LINK_RE.search(raw_url.strip())
    return match.group(1) if match else None


def validate_video_link(raw_url: str) -> str:
    video_id = extract_video_id(raw_url)
    if video_id is None:
        raise InvalidVideoLink(f"Not a recognised video link: {raw_url!r}")
    return video_id


def embed_url(video_id: str) -> str:
    return f"https://www.youtube.com/embed/{video_id}"


def build_external_entry(raw_url: str, caption: Optional[str] = None) -> VideoEntry:
    video_id = validate_video_link(raw_url)
    return VideoEntry(url=raw_url.strip(), source_type=VideoSource.EXTERNAL, external_id=video_id, caption=caption,
                      uploaded_at=datetime.datetime.utcnow())


async def admit_external_link(store: TrainingSessionStore, session_id: int, raw_url: str,
                              caption: Optional[str] = None) -> VideoEntry:
    """Validate *raw_url* and append it to the session's videos.

    Raises :class:`InvalidVideoLink` before touching the store when the
    link is not recognised.
    """
    entry = build_external_entry(raw_url, caption)
    return await store.append_video(session_id, entry)
