"""
Tests for the FastAPI application.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from queryclip.api.app import app


@pytest.fixture
def client():
    """Fixture to create a test client."""
    return TestClient(app)


def test_root(client):
    """Test the root endpoint returns app information."""
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["name"] == "Query Clip"
    assert "X-Process-Time" in response.headers


@patch("queryclip.api.routes.run_clip_request")
def test_process_video_success(mock_run, client):
    """Test a successful request returns the clip URL."""
    mock_run.return_value = (200, {"resultUrl": "/outputs/abc.mp4"})
    payload = {"sourceUrl": "https://valid.example/watch?v=abc", "query": "find where they discuss pricing"}

    response = client.post("/api/process-video", json=payload)

    assert response.status_code == 200
    assert response.json() == {"resultUrl": "/outputs/abc.mp4"}
    mock_run.assert_called_once_with(payload)


@patch("queryclip.api.routes.run_clip_request")
def test_process_video_error(mock_run, client):
    """Test a failed request returns an error body with status 400."""
    mock_run.return_value = (400, {"error": "yt-dlp failed (1): ERROR: Private video"})

    response = client.post(
        "/api/process-video",
        json={"sourceUrl": "https://valid.example/watch?v=abc", "query": "pricing"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "yt-dlp failed (1): ERROR: Private video"}


def test_process_video_invalid_payload(client):
    """Test payload validation errors use the same error shape."""
    response = client.post("/api/process-video", json={"sourceUrl": "nope", "query": "pricing"})

    assert response.status_code == 400
    assert "error" in response.json()


def test_rendered_clips_are_served(client):
    """Test files in the output directory are served under /outputs."""
    from queryclip.config import config

    clip = config.OUTPUT_DIR / "served-clip.mp4"
    clip.write_bytes(b"fake mp4")
    try:
        response = client.get("/outputs/served-clip.mp4")
    finally:
        clip.unlink()

    assert response.status_code == 200
    assert response.content == b"fake mp4"


@pytest.mark.parametrize(
    "request_kwargs",
    [
        {"json": ["not", "an", "object"]},
        {"content": b"{bad json", "headers": {"Content-Type": "application/json"}},
        {},
    ],
)
def test_process_video_malformed_body(request_kwargs, client):
    """Test bodies FastAPI cannot decode still get a 400 error body."""
    with patch("queryclip.api.routes.run_clip_request") as mock_run:
        response = client.post("/api/process-video", **request_kwargs)

    assert response.status_code == 400
    assert set(response.json()) == {"error"}
    assert response.json()["error"].startswith("Invalid request")
    mock_run.assert_not_called()
