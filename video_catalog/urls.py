"""Classify video URLs and derive embeddable player URLs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class UrlKind(str, Enum):
    YOUTUBE = "youtube"
    VIMEO = "vimeo"
    DIRECT_MEDIA = "direct_media"
    UNRECOGNIZED = "unrecognized"


_YOUTUBE_RE = re.compile(
    r"(?:https?://)?(?:www\.)?(?:youtube\.com/watch\?v=|youtu\.be/)(?P<video_id>[\w-]+)",
    re.ASCII,
)
_VIMEO_RE = re.compile(r"(?:https?://)?(?:www\.)?vimeo\.com/(?P<video_id>\d+)", re.ASCII)
_DIRECT_MEDIA_RE = re.compile(r"https?://.+\.(?:mp4|webm|ogg)\Z", re.IGNORECASE)

YOUTUBE_EMBED_TEMPLATE = "https://www.youtube.com/embed/{video_id}"
VIMEO_EMBED_TEMPLATE = "https://player.vimeo.com/video/{video_id}"


@dataclass(frozen=True)
class ClassifiedUrl:
    """Result of matching a URL against the supported hosting schemes."""

    kind: UrlKind
    url: str
    video_id: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.kind is not UrlKind.UNRECOGNIZED


def classify(url: str) -> ClassifiedUrl:
    """Match ``url`` against the YouTube, Vimeo and direct media patterns.

    YouTube and Vimeo are prefix matches, so trailing query parameters are
    allowed. Direct media links need an explicit http(s) scheme and must end
    with a known container extension.
    """

    if not isinstance(url, str):
        return ClassifiedUrl(UrlKind.UNRECOGNIZED, str(url))

    match = _YOUTUBE_RE.match(url)
    if match:
        return ClassifiedUrl(UrlKind.YOUTUBE, url, match.group("video_id"))

    match = _VIMEO_RE.match(url)
    if match:
        return ClassifiedUrl(UrlKind.VIMEO, url, match.group("video_id"))

    if _DIRECT_MEDIA_RE.match(url):
        return ClassifiedUrl(UrlKind.DIRECT_MEDIA, url)

    return ClassifiedUrl(UrlKind.UNRECOGNIZED, url)


def accepts(url: str) -> bool:
    """Return True when ``url`` is a YouTube, Vimeo or direct media link."""
    return classify(url).accepted


def to_embed_url(url: str) -> str:
    """Translate a video URL into the URL a player iframe should load.

    Direct media and unrecognized URLs are returned unchanged, as is any
    hosted URL whose id could not be extracted.
    """

    classified = classify(url)
    if not classified.video_id:
        return url
    if classified.kind is UrlKind.YOUTUBE:
        return YOUTUBE_EMBED_TEMPLATE.format(video_id=classified.video_id)
    if classified.kind is UrlKind.VIMEO:
        return VIMEO_EMBED_TEMPLATE.format(video_id=classified.video_id)
    return url
