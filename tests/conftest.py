import pytest
import pytest_asyncio

from video_catalog.records import VideoDraft
from video_catalog.repository import KeyValueVideoRepository
from video_catalog.storage import MemoryStorage


@pytest_asyncio.fixture
async def storage():
    async with MemoryStorage() as store:
        yield store


@pytest.fixture
def repository(storage):
    return KeyValueVideoRepository(storage, latency=0, read_latency=0)


@pytest.fixture
def react_draft():
    return VideoDraft(
        title="React Basics",
        description="Components and hooks",
        video_url="https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        tags=["react", "tutorial"],
    )


@pytest.fixture
def go_draft():
    return VideoDraft(
        title="Go Intro",
        description="Goroutines for beginners",
        video_url="https://vimeo.com/76979871",
        tags=["go"],
    )
