"""
Subprocess helpers for the external tools (yt-dlp, ffmpeg).

Every stage receives a ``runner`` with the signature of
:func:`run_external_tool`, so tests can swap in a fake and exercise the
pipeline without the real binaries.
"""

import subprocess
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from queryclip.utils.error_handling import ToolNotFoundError, ToolTimeoutError
from queryclip.utils.logger import logging


@dataclass
class ToolResult:
    """Exit status and captured diagnostic stream of a finished process."""

    exit_code: int
    stderr: str = ""


ToolRunner = Callable[..., ToolResult]


def run_external_tool(
    executable: str,
    args: Sequence[str],
    timeout: Optional[float] = None,
) -> ToolResult:
    """Run ``executable`` with ``args`` to completion and capture stderr.

    Raises ToolNotFoundError when the process cannot be started and
    ToolTimeoutError when ``timeout`` elapses. A non-zero exit is returned,
    not raised; each stage decides which error it maps to.
    """
    cmd = [executable, *args]
    logging.debug(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except (FileNotFoundError, PermissionError) as e:
        raise ToolNotFoundError(executable, f"Original error: {e}") from e
    except subprocess.TimeoutExpired as e:
        raise ToolTimeoutError(executable, timeout) from e

    return ToolResult(exit_code=result.returncode, stderr=result.stderr or "")
