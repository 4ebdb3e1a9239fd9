"""
Tests for the video downloader module.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from queryclip.core.downloader import VideoDownloader, resolve_yt_dlp_path
from queryclip.utils.error_handling import DownloadFailedError, ToolNotFoundError
from queryclip.utils.process import ToolResult

from conftest import FakeRunner


def _make_executable(path: Path) -> str:
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)
    return str(path)


def test_resolve_prefers_override(tmp_path):
    """Test the explicit override wins over well-known locations."""
    override = _make_executable(tmp_path / "custom-yt-dlp")
    candidate = _make_executable(tmp_path / "yt-dlp")

    assert resolve_yt_dlp_path(override, candidates=[candidate]) == override


def test_resolve_skips_missing_override(tmp_path):
    """Test a non-executable override falls through to the candidates in order."""
    first = _make_executable(tmp_path / "first")
    second = _make_executable(tmp_path / "second")

    resolved = resolve_yt_dlp_path(
        str(tmp_path / "missing"),
        candidates=[str(tmp_path / "absent"), first, second],
    )

    assert resolved == first


@patch("queryclip.core.downloader.shutil.which", return_value="/env/bin/yt-dlp")
def test_resolve_falls_back_to_path_search(mock_which, tmp_path):
    """Test the PATH search is only used when no candidate exists."""
    resolved = resolve_yt_dlp_path(None, candidates=[str(tmp_path / "absent")])

    assert resolved == "/env/bin/yt-dlp"
    mock_which.assert_called_once_with("yt-dlp")


@patch("queryclip.core.downloader.shutil.which", return_value=None)
def test_resolve_returns_bare_name_when_nothing_found(mock_which):
    """Test the command name is returned so invoking it reports ToolNotFound."""
    assert resolve_yt_dlp_path(None, candidates=[]) == "yt-dlp"


def test_fetch_invokes_yt_dlp(fake_runner, tmp_path, test_video_url):
    """Test the downloader arguments and output location."""
    downloader = VideoDownloader(runner=fake_runner, executable="/usr/bin/yt-dlp")
    media_path = downloader.fetch(test_video_url, tmp_path)

    executable, args = fake_runner.calls[0]
    assert executable == "/usr/bin/yt-dlp"
    assert args[:2] == ["-f", "bestvideo[ext=mp4]+bestaudio[ext=m4a]/mp4"]
    assert "--no-check-certificate" in args
    assert "--newline" in args
    assert args[args.index("-o") + 1] == str(media_path)
    assert args[-1] == test_video_url

    assert media_path.parent == tmp_path
    assert media_path.suffix == ".mp4"


def test_fetch_uses_private_temp_dir_without_work_dir(fake_runner, test_video_url):
    """Test a fresh private directory is created when none is given."""
    downloader = VideoDownloader(runner=fake_runner, executable="yt-dlp")
    first = downloader.fetch(test_video_url)
    second = downloader.fetch(test_video_url)

    try:
        assert first.parent.is_dir()
        assert first.parent != second.parent
        assert first.name != second.name
    finally:
        os.rmdir(first.parent)
        os.rmdir(second.parent)


def test_fetch_failure_carries_stderr(tmp_path, test_video_url):
    """Test a non-zero exit surfaces the captured diagnostic text."""
    runner = FakeRunner(ToolResult(exit_code=1, stderr="ERROR: Private video"))
    downloader = VideoDownloader(runner=runner, executable="yt-dlp")

    with pytest.raises(DownloadFailedError, match="Private video") as excinfo:
        downloader.fetch(test_video_url, tmp_path)

    assert excinfo.value.exit_code == 1
    assert excinfo.value.stderr == "ERROR: Private video"


def test_fetch_missing_binary(tmp_path, test_video_url):
    """Test a missing executable is reported as ToolNotFoundError."""
    runner = FakeRunner(ToolNotFoundError("/opt/homebrew/bin/yt-dlp"))
    downloader = VideoDownloader(runner=runner, executable="/opt/homebrew/bin/yt-dlp")

    with pytest.raises(ToolNotFoundError, match="YT_DLP_PATH"):
        downloader.fetch(test_video_url, tmp_path)
