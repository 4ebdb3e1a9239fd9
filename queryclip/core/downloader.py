"""
Source video downloader backed by the yt-dlp executable.
"""

import os
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import Optional, Sequence

from queryclip.config import config
from queryclip.utils.error_handling import DownloadFailedError, ToolNotFoundError
from queryclip.utils.logger import logging
from queryclip.utils.process import ToolRunner, run_external_tool

YT_DLP = "yt-dlp"


def _can_execute(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def resolve_yt_dlp_path(
    override: Optional[str] = None,
    candidates: Sequence[str] = config.YT_DLP_CANDIDATES,
) -> str:
    """
    Locate the yt-dlp executable.

    The explicit override (``YT_DLP_PATH``) wins, then the well-known
    install locations in order, then the ``PATH`` search. When nothing is
    found the bare command name is returned so that running it raises
    ToolNotFoundError.

    Args:
        override: Explicit path to the binary, usually from the environment
        candidates: Well-known install locations, checked in order

    Returns:
        Path or command name to invoke
    """
    if override and _can_execute(override):
        return override

    for candidate in candidates:
        if _can_execute(candidate):
            return candidate

    return shutil.which(YT_DLP) or YT_DLP


class VideoDownloader:
    """Class to handle downloading source videos."""

    def __init__(
        self,
        runner: ToolRunner = run_external_tool,
        executable: Optional[str] = None,
        timeout: Optional[float] = config.TOOL_TIMEOUT_SECONDS,
    ):
        """
        Initialize the downloader.

        Args:
            runner: Callable used to run the external downloader
            executable: yt-dlp path; resolved from the environment if None
            timeout: Seconds before the download is abandoned, None to wait
        """
        self.runner = runner
        self.executable = executable or resolve_yt_dlp_path(config.YT_DLP_PATH)
        self.timeout = timeout

    def build_args(self, source_url: str, output_path: Path) -> list:
        """Build the yt-dlp argument list for one download."""
        return [
            "-f", config.YT_DLP_FORMAT,
            "--no-check-certificate",
            "--newline",
            "-o", str(output_path),
            source_url,
        ]

    def fetch(self, source_url: str, work_dir: Optional[Path] = None) -> Path:
        """
        Download the video at ``source_url`` and return the local file path.

        Args:
            source_url: Public video URL, already validated by the caller
            work_dir: Directory to download into; a private temporary
                directory is created when omitted

        Returns:
            Path to the downloaded mp4 file
        """
        if work_dir is None:
            work_dir = Path(tempfile.mkdtemp(prefix=f"{config.TEMP_PREFIX}yt-"))
        output_path = Path(work_dir) / f"{uuid.uuid4().hex}.mp4"

        logging.info(f"Downloading video: {source_url}")
        try:
            result = self.runner(
                self.executable,
                self.build_args(source_url, output_path),
                timeout=self.timeout,
            )
        except ToolNotFoundError as e:
            raise ToolNotFoundError(
                YT_DLP,
                "Install it (e.g., 'pip install yt-dlp') or set YT_DLP_PATH to the binary.",
            ) from e

        if result.exit_code != 0:
            logging.error(f"yt-dlp exited with {result.exit_code} for {source_url}")
            raise DownloadFailedError(YT_DLP, result.exit_code, result.stderr)

        logging.info(f"Video saved to: {output_path}")
        return output_path
