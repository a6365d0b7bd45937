"""FastAPI application exposing the video catalog as a REST service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from video_catalog.catalog import LOAD_FAILED, SAVE_FAILED, CatalogConfig
from video_catalog.filters import collect_tags
from video_catalog.records import VideoDraft, VideoRecord, VideoValidationError
from video_catalog.repository import VideoNotFoundError, VideoRepository
from video_catalog.storage import StorageError
from video_catalog.urls import to_embed_url

logger = logging.getLogger(__name__)


class VideoIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., description="Title to display for the video.")
    description: str = Field("", description="Free-form description.")
    video_url: str = Field(..., alias="videoUrl", description="YouTube, Vimeo or direct media URL.")
    tags: List[str] | str = Field(default_factory=list, description="Tag list or comma-separated tags.")


class VideoPatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    video_url: Optional[str] = Field(None, alias="videoUrl")
    tags: Optional[List[str] | str] = None


def serialize(record: VideoRecord) -> Dict[str, Any]:
    data = record.to_dict()
    data["embedUrl"] = to_embed_url(record.video_url)
    return data


def create_app(
    config: Optional[CatalogConfig] = None,
    repository: Optional[VideoRepository] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    When no repository is given, one is built from ``config`` and its storage
    is opened for the lifetime of the app.
    """

    config = config or CatalogConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if repository is not None:
            app.state.repository = repository
            yield
            return
        storage = config.build_storage()
        await storage.open()
        app.state.repository = config.build_repository(storage)
        logger.info("Video catalog storage opened (%s)", config.storage)
        try:
            yield
        finally:
            await storage.close()

    app = FastAPI(title="Video Catalog", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Dependency to access the repository within endpoints -------------
    def get_repository(request: Request) -> VideoRepository:
        return request.app.state.repository

    # Routes ---------------------------------------------------------
    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/videos")
    async def list_videos(
        search: Optional[str] = Query(None, description="Case-insensitive text in title or description."),
        tag: Optional[str] = Query(None, description="Exact tag the video must carry."),
        repo: VideoRepository = Depends(get_repository),
    ) -> list[dict]:
        try:
            records = await repo.list_all(search=search, tag=tag)
        except StorageError as exc:
            raise HTTPException(status_code=500, detail=LOAD_FAILED) from exc
        return [serialize(record) for record in records]

    @app.get("/videos/tags")
    async def list_tags(repo: VideoRepository = Depends(get_repository)) -> list[str]:
        try:
            records = await repo.list_all()
        except StorageError as exc:
            raise HTTPException(status_code=500, detail=LOAD_FAILED) from exc
        return collect_tags(records)

    @app.get("/videos/{video_id}")
    async def get_video(video_id: str, repo: VideoRepository = Depends(get_repository)) -> dict:
        try:
            record = await repo.get_by_id(video_id)
        except StorageError as exc:
            raise HTTPException(status_code=500, detail=LOAD_FAILED) from exc
        if not record:
            raise HTTPException(status_code=404, detail="Video not found.")
        return serialize(record)

    @app.post("/videos", status_code=201)
    async def create_video(
        payload: VideoIn = Body(...),
        repo: VideoRepository = Depends(get_repository),
    ) -> dict:
        try:
            draft = VideoDraft.from_form(
                title=payload.title,
                video_url=payload.video_url,
                description=payload.description,
                tags=payload.tags,
            )
            record = await repo.create(draft)
        except VideoValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except StorageError as exc:
            raise HTTPException(status_code=500, detail=SAVE_FAILED) from exc
        return serialize(record)

    @app.put("/videos/{video_id}")
    async def update_video(
        video_id: str,
        payload: VideoPatch = Body(...),
        repo: VideoRepository = Depends(get_repository),
    ) -> dict:
        patch = payload.model_dump(exclude_unset=True)
        try:
            record = await repo.update(video_id, patch)
        except VideoNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Video not found.") from exc
        except VideoValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except StorageError as exc:
            raise HTTPException(status_code=500, detail=SAVE_FAILED) from exc
        return serialize(record)

    @app.delete("/videos/{video_id}")
    async def delete_video(video_id: str, repo: VideoRepository = Depends(get_repository)) -> dict:
        try:
            return await repo.delete(video_id)
        except StorageError as exc:
            raise HTTPException(status_code=500, detail="Failed to delete video") from exc

    return app
