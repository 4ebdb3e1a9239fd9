"""
Helper utility functions for the query clip application.
"""

import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from queryclip.config import config
from queryclip.utils.logger import logging


@contextmanager
def request_workspace(parent: Optional[Path] = None) -> Iterator[Path]:
    """
    Provide a private directory for the files one request creates.

    The source download and anything left behind by a failed download live
    here. The directory is removed when the request finishes, whether it
    succeeded or not; rendered clips are written elsewhere and survive.

    Args:
        parent: Directory to create the workspace in (system temp if None)

    Yields:
        Path of the workspace directory
    """
    workspace = Path(tempfile.mkdtemp(prefix=config.TEMP_PREFIX, dir=parent))
    logging.debug(f"Created request workspace: {workspace}")
    try:
        yield workspace
    finally:
        try:
            shutil.rmtree(workspace)
        except OSError as e:
            logging.warning(f"Could not remove request workspace {workspace}: {e}")


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
