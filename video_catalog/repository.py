"""Repositories owning the persisted video collection."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from .filters import filter_records
from .records import CatalogError, VideoDraft, VideoRecord, utc_timestamp
from .storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

STORAGE_KEY = "videoProfiles"
DEFAULT_LATENCY_SECONDS = 0.5
DEFAULT_READ_LATENCY_SECONDS = 0.3


class VideoNotFoundError(CatalogError, LookupError):
    """Raised when an update targets an id that is not in the collection."""

    def __init__(self, video_id: str) -> None:
        super().__init__("Video not found")
        self.video_id = video_id


def new_video_id() -> str:
    return uuid.uuid4().hex


class VideoRepository(ABC):
    """Async contract for storing video records.

    Implementations may keep the whole collection in one blob, in a table
    or in memory; callers only rely on the operations below. Operations
    issued sequentially by one caller complete in issue order.
    """

    @abstractmethod
    async def list_all(self, search: Optional[str] = None, tag: Optional[str] = None) -> List[VideoRecord]:
        """Return all records, narrowed by the search text and tag when given."""

    @abstractmethod
    async def get_by_id(self, video_id: str) -> Optional[VideoRecord]:
        """Return the record or None when no record has that id."""

    @abstractmethod
    async def create(self, draft: VideoDraft) -> VideoRecord:
        """Validate and store a new record, assigning its id and creation time."""

    @abstractmethod
    async def update(self, video_id: str, patch: Mapping[str, Any]) -> VideoRecord:
        """Merge ``patch`` into an existing record.

        Raises:
            VideoNotFoundError: If no record has ``video_id``.
            VideoValidationError: If the patch carries an invalid title or URL.
        """

    @abstractmethod
    async def delete(self, video_id: str) -> Dict[str, bool]:
        """Remove a record. Removing a missing id still reports success."""


class KeyValueVideoRepository(VideoRepository):
    """Keep the full collection as one JSON array in a storage slot.

    Every mutation reads the array, changes it and writes it back whole.
    There is no locking: concurrent writers race and the last write wins.
    Each call waits a fixed simulated network latency first.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = STORAGE_KEY,
        latency: float = DEFAULT_LATENCY_SECONDS,
        read_latency: float = DEFAULT_READ_LATENCY_SECONDS,
    ) -> None:
        self.storage = storage
        self.key = key
        self.latency = latency
        self.read_latency = read_latency

    # Internal helpers -------------------------------------------------
    async def _simulate_latency(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    async def _load(self) -> List[VideoRecord]:
        raw = await self.storage.get(self.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Stored video collection is not valid JSON", exc_info=exc)
            raise StorageError("Stored video collection is corrupted.") from exc
        if not isinstance(data, list):
            raise StorageError("Stored video collection is not a list.")
        try:
            return [VideoRecord.from_dict(entry) for entry in data]
        except (KeyError, TypeError, AttributeError) as exc:
            logger.error("Stored video record is malformed", exc_info=exc)
            raise StorageError(f"Stored video record is malformed: {exc}") from exc

    async def _save(self, records: List[VideoRecord]) -> None:
        payload = json.dumps([record.to_dict() for record in records])
        await self.storage.set(self.key, payload)

    # Public API -------------------------------------------------------
    async def list_all(self, search: Optional[str] = None, tag: Optional[str] = None) -> List[VideoRecord]:
        await self._simulate_latency(self.latency)
        records = await self._load()
        return filter_records(records, search=search, tag=tag)

    async def get_by_id(self, video_id: str) -> Optional[VideoRecord]:
        await self._simulate_latency(self.read_latency)
        for record in await self._load():
            if record.id == video_id:
                return record
        return None

    async def create(self, draft: VideoDraft) -> VideoRecord:
        draft.validate()
        await self._simulate_latency(self.latency)
        records = await self._load()
        record = VideoRecord.from_draft(draft, record_id=new_video_id(), created_at=utc_timestamp())
        records.append(record)
        await self._save(records)
        logger.info("Created video %s", record.id)
        return record

    async def update(self, video_id: str, patch: Mapping[str, Any]) -> VideoRecord:
        await self._simulate_latency(self.latency)
        records = await self._load()
        for idx, existing in enumerate(records):
            if existing.id == video_id:
                records[idx] = existing.merged(patch)
                await self._save(records)
                logger.info("Updated video %s", video_id)
                return records[idx]
        raise VideoNotFoundError(video_id)

    async def delete(self, video_id: str) -> Dict[str, bool]:
        await self._simulate_latency(self.latency)
        records = await self._load()
        remaining = [record for record in records if record.id != video_id]
        await self._save(remaining)
        if len(remaining) != len(records):
            logger.info("Deleted video %s", video_id)
        return {"success": True}


class InMemoryVideoRepository(VideoRepository):
    """Dictionary-backed repository with lock-guarded mutations.

    Callers always receive copies, so changing a returned record never
    touches stored state.
    """

    def __init__(self) -> None:
        self._records: Dict[str, VideoRecord] = {}
        self._lock = asyncio.Lock()

    async def list_all(self, search: Optional[str] = None, tag: Optional[str] = None) -> List[VideoRecord]:
        records = filter_records(self._records.values(), search=search, tag=tag)
        return [record.copy() for record in records]

    async def get_by_id(self, video_id: str) -> Optional[VideoRecord]:
        record = self._records.get(video_id)
        return record.copy() if record else None

    async def create(self, draft: VideoDraft) -> VideoRecord:
        draft.validate()
        async with self._lock:
            record = VideoRecord.from_draft(draft, record_id=new_video_id(), created_at=utc_timestamp())
            self._records[record.id] = record
        return record.copy()

    async def update(self, video_id: str, patch: Mapping[str, Any]) -> VideoRecord:
        async with self._lock:
            existing = self._records.get(video_id)
            if existing is None:
                raise VideoNotFoundError(video_id)
            updated = existing.merged(patch)
            self._records[video_id] = updated
        return updated.copy()

    async def delete(self, video_id: str) -> Dict[str, bool]:
        async with self._lock:
            self._records.pop(video_id, None)
        return {"success": True}
