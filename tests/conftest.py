"""
Configuration for pytest tests.
"""

import os
import tempfile

import pytest

# Config is read at import time, so the environment must be set first.
os.environ.setdefault("GROQ_API_KEY", "test_api_key")
os.environ.setdefault("OUTPUT_DIR", tempfile.mkdtemp(prefix="queryclip-test-outputs-"))
os.environ["ENVIRONMENT"] = "development"

from queryclip.utils.process import ToolResult  # noqa: E402


class FakeRunner:
    """Records external tool invocations and replays canned results."""

    def __init__(self, *results, on_call=None):
        self.results = list(results) or [ToolResult(exit_code=0)]
        self.on_call = on_call
        self.calls = []

    def __call__(self, executable, args, timeout=None):
        self.calls.append((executable, list(args)))
        if self.on_call:
            self.on_call(executable, list(args))
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_runner():
    """Return a runner whose processes all succeed."""
    return FakeRunner()


@pytest.fixture
def test_video_url():
    """Return a test video URL."""
    return "https://valid.example/watch?v=abc"


@pytest.fixture
def output_dir(tmp_path):
    """Return a directory for rendered clips."""
    path = tmp_path / "outputs"
    path.mkdir()
    return path
