"""Video record model, draft validation and tag parsing."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .urls import accepts


class CatalogError(RuntimeError):
    """Base class for failures surfaced to catalog users."""


class VideoValidationError(CatalogError, ValueError):
    """Raised when a draft or patch cannot be persisted as a video record."""


TITLE_REQUIRED = "Title is required"
VIDEO_URL_REQUIRED = "Video URL is required"
VIDEO_URL_INVALID = "Please provide a valid YouTube, Vimeo, or direct video URL"

EDITABLE_FIELDS = ("title", "description", "video_url", "tags")


def parse_tags(text: str | Iterable[str] | None) -> List[str]:
    """Split comma-separated tag input into trimmed, non-empty tokens.

    Order and duplicates are preserved. A sequence is accepted as well, in
    which case every element is trimmed and empties are dropped.
    """

    if not text:
        return []
    tokens = text.split(",") if isinstance(text, str) else list(text)
    return [token.strip() for token in tokens if token and token.strip()]


def utc_timestamp(after: Iterable[Optional[str]] = ()) -> str:
    """Return the current UTC time in ISO-8601 form.

    The result is strictly later than every timestamp in ``after``; when the
    clock has not advanced past them it is bumped by one microsecond.
    """

    now = datetime.now(timezone.utc)
    for previous in after:
        if not previous:
            continue
        try:
            floor = datetime.fromisoformat(previous.replace("Z", "+00:00"))
        except ValueError:
            # Not ISO-8601, e.g. an epoch-millisecond string; nothing to order against.
            continue
        if floor.tzinfo is None:
            floor = floor.replace(tzinfo=timezone.utc)
        if now <= floor:
            now = floor + timedelta(microseconds=1)
    return now.isoformat(timespec="microseconds")


@dataclass
class VideoDraft:
    """User supplied fields of a video before the store assigns identity."""

    title: str
    video_url: str
    description: str = ""
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_form(
        cls,
        *,
        title: str,
        video_url: str,
        description: str = "",
        tags: str | Iterable[str] | None = None,
    ) -> "VideoDraft":
        """Build a trimmed draft from raw form input, validating as it goes."""

        draft = cls(
            title=(title or "").strip(),
            video_url=(video_url or "").strip(),
            description=(description or "").strip(),
            tags=parse_tags(tags),
        )
        draft.validate()
        return draft

    def validate(self) -> None:
        validate_title(self.title)
        validate_video_url(self.video_url)


@dataclass
class VideoRecord:
    id: str
    title: str
    video_url: str
    created_at: str
    description: str = ""
    tags: List[str] = field(default_factory=list)
    updated_at: Optional[str] = None

    @classmethod
    def from_draft(cls, draft: VideoDraft, *, record_id: str, created_at: str) -> "VideoRecord":
        return cls(
            id=record_id,
            title=draft.title,
            video_url=draft.video_url,
            description=draft.description,
            tags=list(draft.tags),
            created_at=created_at,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VideoRecord":
        """Load a record from its persisted camelCase layout."""

        return cls(
            id=str(data["id"]),
            title=data["title"],
            video_url=data["videoUrl"],
            description=data.get("description") or "",
            tags=list(data.get("tags") or []),
            created_at=data["createdAt"],
            updated_at=data.get("updatedAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "videoUrl": self.video_url,
            "tags": list(self.tags),
            "createdAt": self.created_at,
        }
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data

    def merged(self, patch: Mapping[str, Any]) -> "VideoRecord":
        """Return a copy with ``patch`` shallow-merged and ``updated_at`` refreshed."""

        changes = normalize_patch(patch)
        updated_at = utc_timestamp(after=(self.created_at, self.updated_at))
        return replace(self.copy(), **changes, updated_at=updated_at)

    def copy(self) -> "VideoRecord":
        """Return a copy that shares no mutable state with this record."""
        return replace(self, tags=list(self.tags))


def validate_title(title: Optional[str]) -> None:
    if not title or not title.strip():
        raise VideoValidationError(TITLE_REQUIRED)


def validate_video_url(video_url: Optional[str]) -> None:
    if not video_url or not video_url.strip():
        raise VideoValidationError(VIDEO_URL_REQUIRED)
    if not accepts(video_url.strip()):
        raise VideoValidationError(VIDEO_URL_INVALID)


def normalize_patch(patch: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate an update patch and return it limited to editable fields."""

    unknown = set(patch) - set(EDITABLE_FIELDS)
    if unknown:
        raise VideoValidationError(f"Unknown video fields: {', '.join(sorted(unknown))}")

    changes: Dict[str, Any] = {}
    if "title" in patch:
        validate_title(patch["title"])
        changes["title"] = patch["title"].strip()
    if "video_url" in patch:
        validate_video_url(patch["video_url"])
        changes["video_url"] = patch["video_url"].strip()
    if "description" in patch:
        changes["description"] = (patch["description"] or "").strip()
    if "tags" in patch:
        changes["tags"] = parse_tags(patch["tags"])
    return changes
