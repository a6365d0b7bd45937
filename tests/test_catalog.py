import pytest

from video_catalog.catalog import (
    DELETE_FAILED,
    LOAD_FAILED,
    SAVE_FAILED,
    CatalogConfig,
    VideoCatalog,
    VideoForm,
)
from video_catalog.records import TITLE_REQUIRED, VIDEO_URL_INVALID, VIDEO_URL_REQUIRED
from video_catalog.repository import STORAGE_KEY, InMemoryVideoRepository, KeyValueVideoRepository
from video_catalog.storage import JsonFileStorage, MemoryStorage, StorageError


class BrokenDeleteRepository(InMemoryVideoRepository):
    async def delete(self, video_id):
        raise StorageError("disk full")


class ExplodingRepository(InMemoryVideoRepository):
    async def create(self, draft):
        raise RuntimeError("unexpected")

    async def delete(self, video_id):
        raise RuntimeError("unexpected")


@pytest.fixture
def catalog(repository):
    return VideoCatalog(repository)


@pytest.mark.asyncio
class TestVideoCatalog:
    async def test_load_fills_cache_and_tags(self, catalog, repository, react_draft, go_draft):
        await repository.create(react_draft)
        await repository.create(go_draft)

        await catalog.load()

        assert [v.title for v in catalog.videos] == ["React Basics", "Go Intro"]
        assert catalog.all_tags == ["react", "tutorial", "go"]
        assert catalog.loading is False

    async def test_filtered_videos_follow_search_and_tag(self, catalog, repository, react_draft, go_draft):
        await repository.create(react_draft)
        await repository.create(go_draft)
        await catalog.load()

        catalog.search_term = "REACT"
        assert [v.title for v in catalog.filtered_videos] == ["React Basics"]
        catalog.search_term = ""
        catalog.selected_tag = "go"
        assert [v.title for v in catalog.filtered_videos] == ["Go Intro"]

    @pytest.mark.parametrize(
        "form, message",
        [
            (VideoForm(title="  ", video_url="https://youtu.be/x"), TITLE_REQUIRED),
            (VideoForm(title="T", video_url="   "), VIDEO_URL_REQUIRED),
            (VideoForm(title="T", video_url="https://example.com/video"), VIDEO_URL_INVALID),
        ],
    )
    async def test_submit_reports_validation_errors(self, catalog, repository, form, message):
        catalog.open_form()
        catalog.form = form

        assert await catalog.submit() is False
        assert catalog.error == message
        assert catalog.show_form is True
        assert await repository.list_all() == []

    async def test_submit_creates_and_reloads(self, catalog):
        catalog.open_form()
        catalog.form = VideoForm(
            title=" Intro ",
            description=" desc ",
            video_url="https://vimeo.com/42",
            tags="a, , b",
        )

        assert await catalog.submit() is True

        assert len(catalog.videos) == 1
        video = catalog.videos[0]
        assert (video.title, video.description, video.tags) == ("Intro", "desc", ["a", "b"])
        assert catalog.form == VideoForm()
        assert catalog.show_form is False
        assert catalog.error == ""

    async def test_edit_prefills_form_and_updates(self, catalog, repository, react_draft):
        created = await repository.create(react_draft)
        await catalog.load()
        catalog.view(catalog.videos[0])

        catalog.start_edit(catalog.videos[0])
        assert catalog.form.tags == "react, tutorial"
        assert catalog.detail is None
        catalog.form.title = "React Advanced"

        assert await catalog.submit() is True

        assert [v.title for v in catalog.videos] == ["React Advanced"]
        assert catalog.videos[0].id == created.id
        assert catalog.videos[0].updated_at is not None
        assert catalog.editing is None

    async def test_editing_vanished_record_reports_error(self, catalog, repository, react_draft):
        created = await repository.create(react_draft)
        await catalog.load()
        catalog.start_edit(catalog.videos[0])
        await repository.delete(created.id)

        assert await catalog.submit() is False
        assert catalog.error == "Video not found"
        assert catalog.loading is False

    async def test_confirm_delete_removes_and_closes_detail(self, catalog, repository, react_draft):
        await repository.create(react_draft)
        await catalog.load()
        catalog.view(catalog.videos[0])
        catalog.request_delete(catalog.videos[0])

        assert await catalog.confirm_delete() is True

        assert catalog.videos == []
        assert catalog.detail is None
        assert catalog.delete_candidate is None

    async def test_cancel_delete_keeps_record(self, catalog, repository, react_draft):
        await repository.create(react_draft)
        await catalog.load()
        catalog.request_delete(catalog.videos[0])
        catalog.cancel_delete()

        assert await catalog.confirm_delete() is False
        assert len(await repository.list_all()) == 1

    async def test_delete_failure_sets_error(self, react_draft):
        repository = BrokenDeleteRepository()
        catalog = VideoCatalog(repository)
        await repository.create(react_draft)
        await catalog.load()
        catalog.request_delete(catalog.videos[0])

        assert await catalog.confirm_delete() is False
        assert catalog.error == DELETE_FAILED
        catalog.clear_error()
        assert catalog.error == ""

    async def test_load_failure_sets_error(self, catalog, storage):
        await storage.set(STORAGE_KEY, "garbage")
        await catalog.load()
        assert catalog.error == LOAD_FAILED
        assert catalog.videos == []

    async def test_storage_failure_on_save_shows_generic_message(self):
        catalog = VideoCatalog(KeyValueVideoRepository(MemoryStorage(), latency=0, read_latency=0))
        catalog.open_form()
        catalog.form = VideoForm(title="Intro", video_url="https://vimeo.com/42")

        assert await catalog.submit() is False
        assert catalog.error == SAVE_FAILED
        assert catalog.loading is False
        assert catalog.show_form is True

    async def test_unexpected_save_error_still_clears_loading(self):
        catalog = VideoCatalog(ExplodingRepository())
        catalog.form = VideoForm(title="Intro", video_url="https://vimeo.com/42")

        with pytest.raises(RuntimeError):
            await catalog.submit()
        assert catalog.loading is False

    async def test_unexpected_delete_error_still_clears_loading(self, react_draft):
        repository = ExplodingRepository()
        catalog = VideoCatalog(repository)
        record = await InMemoryVideoRepository.create(repository, react_draft)
        catalog.request_delete(record)

        with pytest.raises(RuntimeError):
            await catalog.confirm_delete()
        assert catalog.loading is False

    async def test_embed_url_for_display(self, catalog, repository, react_draft):
        created = await repository.create(react_draft)
        assert catalog.embed_url(created) == "https://www.youtube.com/embed/dQw4w9WgXcQ"


def test_config_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("CATALOG_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CATALOG_STORAGE", "Memory")
    monkeypatch.setenv("CATALOG_LATENCY_SECONDS", "0")
    monkeypatch.setenv("CATALOG_READ_LATENCY_SECONDS", "0.05")

    config = CatalogConfig.from_env()

    assert config.data_dir == tmp_path
    assert config.storage == "memory"
    assert config.latency == 0
    assert config.read_latency == 0.05
    assert isinstance(config.build_storage(), MemoryStorage)


def test_config_builds_file_storage(tmp_path):
    config = CatalogConfig(data_dir=tmp_path)
    storage = config.build_storage()
    assert isinstance(storage, JsonFileStorage)
    assert storage.directory == tmp_path
    repository = config.build_repository(storage)
    assert repository.latency == 0.5
    assert repository.read_latency == 0.3


def test_config_rejects_unknown_backend():
    with pytest.raises(ValueError):
        CatalogConfig(storage="redis").build_storage()
