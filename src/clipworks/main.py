"""FastAPI application entry point."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI

from .config import AppConfig, load_config
from .dependencies import include_routers
from .lifecycle import run_periodic_retention_sweep
from .logging import configure_logging
from .storage.storage_base import ObjectStorage


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run the retention sweep next to the HTTP server."""
    shutdown_event = asyncio.Event()
    task = asyncio.create_task(
        run_periodic_retention_sweep(
            sweeper=app.state.retention_sweeper,
            shutdown_event=shutdown_event,
            interval_seconds=app.state.config.sweep_interval_seconds,
        )
    )
    try:
        yield
    finally:
        shutdown_event.set()
        await task


def create_app(
    config: AppConfig | None = None, *, storage: ObjectStorage | None = None
) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    cfg = config or load_config()
    configure_logging(cfg.log_level)
    app = FastAPI(title="Clipworks", lifespan=lifespan)
    include_routers(app, cfg, storage=storage)
    return app


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual launch
    uvicorn.run(app, host=app.state.config.host, port=app.state.config.port)
