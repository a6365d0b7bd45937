"""Client-side filtering over the video collection."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .records import VideoRecord


def matches_search(record: VideoRecord, search: str) -> bool:
    needle = search.lower()
    return needle in record.title.lower() or needle in (record.description or "").lower()


def filter_records(
    records: Iterable[VideoRecord],
    search: Optional[str] = None,
    tag: Optional[str] = None,
) -> List[VideoRecord]:
    """Return the records matching both the text search and the tag.

    Search is a case-insensitive substring match over title and description.
    Tag membership is exact and case-sensitive. Empty values match everything.
    """

    filtered = list(records)
    if search:
        filtered = [record for record in filtered if matches_search(record, search)]
    if tag:
        filtered = [record for record in filtered if tag in record.tags]
    return filtered


def collect_tags(records: Iterable[VideoRecord]) -> List[str]:
    """Distinct tags across ``records`` in first-seen order."""

    seen: dict[str, None] = {}
    for record in records:
        for tag in record.tags:
            seen.setdefault(tag, None)
    return list(seen)
