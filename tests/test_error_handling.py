"""
Tests for the pipeline error types.
"""

from queryclip.utils.error_handling import (
    CompositionFailedError,
    DownloadFailedError,
    InvalidSelectionError,
    NoRangesSelectedError,
    ProcessFailedError,
    ToolNotFoundError,
    describe_error,
    tail,
)


def test_process_errors_share_a_base():
    """Test every stage process failure is a ProcessFailedError."""
    error = DownloadFailedError("yt-dlp", 1, "ERROR: Unsupported URL")

    assert isinstance(error, ProcessFailedError)
    assert str(error) == "yt-dlp failed (1): ERROR: Unsupported URL"


def test_long_stderr_is_trimmed_to_its_tail():
    """Test only the end of a long diagnostic stream reaches the message."""
    stderr = "frame=1\n" * 1000 + "Conversion failed!"
    error = CompositionFailedError("ffmpeg", 1, stderr)

    assert str(error).endswith("Conversion failed!")
    assert len(str(error)) < 2100
    assert error.stderr == stderr


def test_tail():
    assert tail("  short  ") == "short"
    assert tail("abcdef", limit=3) == "...def"


def test_no_ranges_is_an_invalid_selection():
    assert issubclass(NoRangesSelectedError, InvalidSelectionError)


def test_describe_error():
    """Test known and unexpected errors become user-facing messages."""
    assert describe_error(ToolNotFoundError("ffmpeg")) == "ffmpeg not found."
    assert describe_error(RuntimeError("boom")) == "boom"
    assert describe_error(RuntimeError()) == "Unknown error"
