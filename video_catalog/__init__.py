"""Video catalog: manage video profile records referenced by URL."""

from .catalog import CatalogConfig, VideoCatalog, VideoForm
from .records import CatalogError, VideoDraft, VideoRecord, VideoValidationError
from .repository import (
    InMemoryVideoRepository,
    KeyValueVideoRepository,
    VideoNotFoundError,
    VideoRepository,
)
from .storage import JsonFileStorage, KeyValueStorage, MemoryStorage, StorageError
from .urls import ClassifiedUrl, UrlKind, accepts, classify, to_embed_url

__all__ = [
    "CatalogConfig",
    "CatalogError",
    "ClassifiedUrl",
    "InMemoryVideoRepository",
    "JsonFileStorage",
    "KeyValueStorage",
    "KeyValueVideoRepository",
    "MemoryStorage",
    "StorageError",
    "UrlKind",
    "VideoCatalog",
    "VideoDraft",
    "VideoForm",
    "VideoNotFoundError",
    "VideoRecord",
    "VideoRepository",
    "VideoValidationError",
    "accepts",
    "classify",
    "to_embed_url",
]
