"""
Centralized error handling for the application.
"""

import traceback
from typing import Optional

from queryclip.utils.logger import logging

# Diagnostic streams from yt-dlp/ffmpeg can be huge; only the tail is useful.
STDERR_TAIL_CHARS = 2000


class ClipperError(Exception):
    """Base class for every failure raised by the clip pipeline."""


class ToolNotFoundError(ClipperError):
    """A required external executable is missing or cannot be started."""

    def __init__(self, tool: str, hint: Optional[str] = None):
        self.tool = tool
        message = f"{tool} not found."
        if hint:
            message += f" {hint}"
        super().__init__(message)


class MissingCredentialsError(ClipperError, ValueError):
    """A required API key is not configured."""


class ToolTimeoutError(ClipperError):
    """An external executable did not finish within the configured timeout."""

    def __init__(self, tool: str, timeout: float):
        self.tool = tool
        self.timeout = timeout
        super().__init__(f"{tool} timed out after {timeout:g} seconds")


class ProcessFailedError(ClipperError):
    """An external executable exited with a non-zero status."""

    def __init__(self, tool: str, exit_code: int, stderr: str = ""):
        self.tool = tool
        self.exit_code = exit_code
        self.stderr = stderr or ""
        super().__init__(f"{tool} failed ({exit_code}): {tail(self.stderr)}")


class DownloadFailedError(ProcessFailedError):
    """The downloader could not fetch the source media."""


class AudioExtractionFailedError(ProcessFailedError):
    """The transcoder could not extract the audio track."""


class CompositionFailedError(ProcessFailedError):
    """The transcoder could not cut and merge the selected ranges."""


class TranscriptionFailedError(ClipperError):
    """The speech service failed permanently or retries were exhausted."""


class InvalidSelectionError(ClipperError):
    """The language model returned ranges that failed validation."""


class NoRangesSelectedError(InvalidSelectionError):
    """No time ranges are available to compose a clip from."""

    def __init__(self, message: str = "No timestamps selected for the clip"):
        super().__init__(message)


def tail(text: str, limit: int = STDERR_TAIL_CHARS) -> str:
    """Return the last ``limit`` characters of ``text``."""
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return "..." + text[-limit:]


def describe_error(error: Exception) -> str:
    """
    Turn any pipeline failure into the message shown to the client.

    Known pipeline errors carry their own message. Anything else is
    unexpected, so it is logged with its traceback before being reported.

    Args:
        error: The exception that aborted the request

    Returns:
        User-facing error message
    """
    if isinstance(error, ClipperError):
        logging.error(f"Clip request failed: {error}")
        return str(error)

    logging.error(f"Unexpected error while processing clip request: {error}")
    logging.error("".join(traceback.format_exception(type(error), error, error.__traceback__)))
    return str(error) or "Unknown error"
