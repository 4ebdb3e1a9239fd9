"""
API routes for the Query Clip application.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from queryclip.api.schems import ClipResponse, ErrorResponse
from queryclip.main import run_clip_request

router = APIRouter(prefix="/api", tags=["clips"])


@router.post(
    "/process-video",
    response_model=ClipResponse,
    responses={400: {"model": ErrorResponse}},
)
def process_video_request(payload: Dict[str, Any] = Body(...)):
    """
    Turn a video URL and a free-text request into a merged clip.

    - Downloads, transcribes, selects ranges with the LLM and merges them
    - Blocks until the clip is rendered; runs on the worker thread pool
    - Any failure is returned as ``{"error": ...}`` with status 400
    """
    status_code, body = run_clip_request(payload)
    return JSONResponse(status_code=status_code, content=body)
