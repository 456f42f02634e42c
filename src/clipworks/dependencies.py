"""Dependency wiring helpers."""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import FastAPI

from .api.errors import ApiError, api_error_handler
from .config import AppConfig
from .jobs.job_pipeline import JobPipeline
from .jobs.jobs_api import router as jobs_router
from .media.artifact_publisher import ArtifactPublisher
from .media.retention_sweeper import RetentionSweeper
from .media.temp_file_store import TempFileStore
from .storage.storage_base import ObjectStorage
from .storage.storage_supabase import SupabaseStorage
from .transform.ffmpeg_invoker import TransformInvoker
from .ui.views import router as ui_router

logger = logging.getLogger(__name__)


def build_storage(config: AppConfig) -> ObjectStorage:
    """Create the artifact bucket client from configuration."""
    if not config.storage_url or not config.storage_key:
        logger.warning(
            "storage.not_configured",
            extra={"has_url": bool(config.storage_url), "has_key": bool(config.storage_key)},
        )
    return SupabaseStorage(
        base_url=config.storage_url,
        api_key=config.storage_key,
        bucket=config.storage_bucket,
        timeout_seconds=config.storage_timeout_seconds,
    )


def build_sweeper(config: AppConfig, storage: ObjectStorage) -> RetentionSweeper:
    return RetentionSweeper(storage=storage, max_age=timedelta(hours=config.retention_hours))


def include_routers(
    app: FastAPI, config: AppConfig, *, storage: ObjectStorage | None = None
) -> None:
    """Build process-scoped services once, attach them and mount routers."""
    storage = storage or build_storage(config)
    temp_store = TempFileStore(
        root=config.scratch_dir,
        max_upload_bytes=config.max_upload_bytes,
        chunk_size=config.upload_chunk_bytes,
    )
    temp_store.ensure_structure()
    invoker = TransformInvoker(
        temp_store=temp_store,
        binary=config.ffmpeg_binary,
        threads=config.ffmpeg_threads,
        preset=config.ffmpeg_preset,
    )
    publisher = ArtifactPublisher(storage=storage, content_type=config.artifact_content_type)
    pipeline = JobPipeline(temp_store=temp_store, invoker=invoker, publisher=publisher)

    app.state.config = config
    app.state.storage = storage
    app.state.temp_store = temp_store
    app.state.job_pipeline = pipeline
    app.state.retention_sweeper = build_sweeper(config, storage)

    app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]
    app.include_router(jobs_router)
    app.include_router(ui_router)
