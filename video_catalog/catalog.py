"""High-level orchestration of a catalog editing session."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .filters import collect_tags, filter_records
from .records import CatalogError, VideoDraft, VideoRecord, VideoValidationError
from .repository import (
    DEFAULT_LATENCY_SECONDS,
    DEFAULT_READ_LATENCY_SECONDS,
    KeyValueVideoRepository,
    VideoRepository,
)
from .storage import JsonFileStorage, KeyValueStorage, MemoryStorage, StorageError
from .urls import to_embed_url

logger = logging.getLogger(__name__)

LOAD_FAILED = "Failed to load videos"
SAVE_FAILED = "Failed to save video"
DELETE_FAILED = "Failed to delete video"


@dataclass
class CatalogConfig:
    """Runtime configuration for the catalog."""

    data_dir: Path = Path("data")
    storage: str = "file"
    latency: float = DEFAULT_LATENCY_SECONDS
    read_latency: float = DEFAULT_READ_LATENCY_SECONDS

    @classmethod
    def from_env(cls) -> "CatalogConfig":
        """Read overrides from ``CATALOG_*`` environment variables."""

        config = cls()
        if os.getenv("CATALOG_DATA_DIR"):
            config.data_dir = Path(os.environ["CATALOG_DATA_DIR"])
        if os.getenv("CATALOG_STORAGE"):
            config.storage = os.environ["CATALOG_STORAGE"].strip().lower()
        if os.getenv("CATALOG_LATENCY_SECONDS"):
            config.latency = float(os.environ["CATALOG_LATENCY_SECONDS"])
        if os.getenv("CATALOG_READ_LATENCY_SECONDS"):
            config.read_latency = float(os.environ["CATALOG_READ_LATENCY_SECONDS"])
        return config

    def build_storage(self) -> KeyValueStorage:
        if self.storage == "memory":
            return MemoryStorage()
        if self.storage == "file":
            return JsonFileStorage(self.data_dir)
        raise ValueError(f"Unsupported storage backend: {self.storage}")

    def build_repository(self, storage: KeyValueStorage) -> KeyValueVideoRepository:
        return KeyValueVideoRepository(storage, latency=self.latency, read_latency=self.read_latency)


@dataclass
class VideoForm:
    """Raw text as typed into the add/edit form."""

    title: str = ""
    description: str = ""
    video_url: str = ""
    tags: str = ""

    @classmethod
    def from_record(cls, record: VideoRecord) -> "VideoForm":
        return cls(
            title=record.title,
            description=record.description,
            video_url=record.video_url,
            tags=", ".join(record.tags),
        )


@dataclass
class VideoCatalog:
    """Headless controller for listing, filtering and editing videos.

    The cached ``videos`` list is never patched in place: every successful
    mutation is followed by a full reload from the repository.
    """

    repository: VideoRepository
    videos: List[VideoRecord] = field(default_factory=list)
    search_term: str = ""
    selected_tag: str = ""
    error: str = ""
    loading: bool = False
    form: VideoForm = field(default_factory=VideoForm)
    show_form: bool = False
    editing: Optional[VideoRecord] = None
    detail: Optional[VideoRecord] = None
    delete_candidate: Optional[VideoRecord] = None

    # Derived views ----------------------------------------------------
    @property
    def filtered_videos(self) -> List[VideoRecord]:
        return filter_records(self.videos, search=self.search_term, tag=self.selected_tag)

    @property
    def all_tags(self) -> List[str]:
        return collect_tags(self.videos)

    @staticmethod
    def embed_url(record: VideoRecord) -> str:
        return to_embed_url(record.video_url)

    # Loading ----------------------------------------------------------
    async def load(self) -> None:
        self.loading = True
        try:
            self.videos = await self.repository.list_all()
        except CatalogError as exc:
            logger.error("Loading videos failed", exc_info=exc)
            self.error = LOAD_FAILED
        finally:
            self.loading = False

    # Form handling ----------------------------------------------------
    def open_form(self) -> None:
        self.show_form = True
        self.detail = None

    def start_edit(self, record: VideoRecord) -> None:
        self.editing = record
        self.form = VideoForm.from_record(record)
        self.show_form = True
        self.detail = None

    def reset_form(self) -> None:
        self.form = VideoForm()
        self.editing = None
        self.show_form = False
        self.error = ""

    async def submit(self) -> bool:
        """Validate the form and create or update the video.

        Returns True when the record was saved. Validation problems and
        repository failures are reported through ``error`` instead.
        """

        self.error = ""
        try:
            draft = VideoDraft.from_form(
                title=self.form.title,
                video_url=self.form.video_url,
                description=self.form.description,
                tags=self.form.tags,
            )
        except VideoValidationError as exc:
            self.error = str(exc)
            return False

        self.loading = True
        try:
            if self.editing is not None:
                await self.repository.update(
                    self.editing.id,
                    {
                        "title": draft.title,
                        "description": draft.description,
                        "video_url": draft.video_url,
                        "tags": draft.tags,
                    },
                )
            else:
                await self.repository.create(draft)
        except StorageError as exc:
            logger.error("Saving video failed", exc_info=exc)
            self.error = SAVE_FAILED
            return False
        except CatalogError as exc:
            logger.warning("Saving video failed: %s", exc)
            self.error = str(exc) or SAVE_FAILED
            return False
        finally:
            self.loading = False

        self.reset_form()
        await self.load()
        return True

    # Detail and deletion ----------------------------------------------
    def view(self, record: VideoRecord) -> None:
        self.detail = record
        self.show_form = False

    def close_detail(self) -> None:
        self.detail = None

    def request_delete(self, record: VideoRecord) -> None:
        self.delete_candidate = record

    def cancel_delete(self) -> None:
        self.delete_candidate = None

    async def confirm_delete(self) -> bool:
        if self.delete_candidate is None:
            return False
        self.loading = True
        try:
            await self.repository.delete(self.delete_candidate.id)
        except CatalogError as exc:
            logger.error("Deleting video failed", exc_info=exc)
            self.error = DELETE_FAILED
            return False
        finally:
            self.loading = False

        await self.load()
        self.delete_candidate = None
        self.detail = None
        return True

    def clear_error(self) -> None:
        self.error = ""
