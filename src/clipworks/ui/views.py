"""Documentation page and liveness probe."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from ..jobs.job_models import OPERATION_INPUTS, Operation

TEMPLATES = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

ENDPOINTS = (
    {
        "path": "/trim",
        "operation": Operation.TRIM,
        "summary": "Cuts a specific segment out of a video.",
        "fields": (
            ("startTime", "Seconds to start cutting from (default 0)."),
            ("duration", "Length of the clip in seconds (default 5)."),
        ),
    },
    {
        "path": "/crop",
        "operation": Operation.CROP,
        "summary": "Crops the video dimensions.",
        "fields": (
            ("w, h", "Width and height (default 1080 and 1920 for vertical)."),
            ("x, y", "Coordinates to start cropping from (default 0)."),
        ),
    },
    {
        "path": "/add-voice",
        "operation": Operation.ADD_VOICE,
        "summary": "Replaces the audio track of a video; output stops at the shorter stream.",
        "fields": (),
    },
    {
        "path": "/add-caption",
        "operation": Operation.ADD_CAPTION,
        "summary": "Burns a subtitle file (.srt) directly into the video.",
        "fields": (),
    },
    {
        "path": "/merge",
        "operation": Operation.MERGE,
        "summary": "Combines two videos sequentially.",
        "fields": (),
    },
)

router = APIRouter(tags=["ui"])


@router.get("/", name="ui:docs", response_class=HTMLResponse)
def docs_page(request: Request) -> Response:
    """Render the API documentation page."""

    config = request.app.state.config
    endpoints = [
        {**endpoint, "uploads": OPERATION_INPUTS[endpoint["operation"]]}
        for endpoint in ENDPOINTS
    ]
    context = {
        "endpoints": endpoints,
        "max_upload_mb": config.max_upload_bytes // (1024 * 1024),
        "retention_hours": config.retention_hours,
    }
    return TEMPLATES.TemplateResponse(request, "index.html", context)


@router.get("/health", name="health", response_class=PlainTextResponse)
def health() -> str:
    return "OK"
