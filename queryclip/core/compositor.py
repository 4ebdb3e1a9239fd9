"""
Cuts the selected time ranges out of the source video and merges them.
"""

import uuid
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from queryclip.config import config
from queryclip.models.schemas import ClipResult, TimeRange
from queryclip.utils.error_handling import (
    CompositionFailedError,
    NoRangesSelectedError,
    ToolNotFoundError,
)
from queryclip.utils.logger import logging
from queryclip.utils.process import ToolRunner, run_external_tool

FFMPEG = "ffmpeg"


def sanitize_range(
    time_range: TimeRange, min_duration: float = config.MIN_RANGE_SECONDS
) -> Tuple[float, float]:
    """Clamp a range so it starts at or after 0 and lasts at least ``min_duration``."""
    start = max(0.0, float(time_range.start))
    end = max(start + min_duration, float(time_range.end))
    return start, end


def build_filter_graph(ranges: Sequence[TimeRange]) -> str:
    """Build a single filter_complex that trims every range and concatenates them.

    Ranges are concatenated in the order given. Only the sanitized floats
    reach the expression, formatted to millisecond precision.
    """
    if not ranges:
        raise NoRangesSelectedError()

    filter_parts: List[str] = []
    stream_labels: List[str] = []

    for i, time_range in enumerate(ranges):
        start, end = sanitize_range(time_range)
        filter_parts.append(
            f"[0:v]trim=start={start:.3f}:end={end:.3f},setpts=PTS-STARTPTS[v{i}]"
        )
        filter_parts.append(
            f"[0:a]atrim=start={start:.3f}:end={end:.3f},asetpts=PTS-STARTPTS[a{i}]"
        )
        stream_labels.append(f"[v{i}][a{i}]")

    concat_input = "".join(stream_labels)
    filter_parts.append(f"{concat_input}concat=n={len(ranges)}:v=1:a=1[outv][outa]")

    return ";".join(filter_parts)


class VideoCompositor:
    """Class to render the final clip with ffmpeg."""

    def __init__(
        self,
        output_dir: Path = config.OUTPUT_DIR,
        url_prefix: str = config.OUTPUT_URL_PREFIX,
        runner: ToolRunner = run_external_tool,
        ffmpeg_path: str = config.FFMPEG_PATH,
        timeout: Optional[float] = config.TOOL_TIMEOUT_SECONDS,
    ):
        self.output_dir = Path(output_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.runner = runner
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout

    def build_args(self, media_path: Path, filter_graph: str, output_path: Path) -> list:
        return [
            "-y",
            "-i", str(media_path),
            "-filter_complex", filter_graph,
            "-map", "[outv]",
            "-map", "[outa]",
            "-c:v", config.VIDEO_CODEC,
            "-c:a", config.AUDIO_CODEC,
            "-movflags", "+faststart",
            str(output_path),
        ]

    def compose(self, media_path: Path, ranges: Sequence[TimeRange]) -> ClipResult:
        """
        Trim every range out of ``media_path`` and merge them into one file.

        Args:
            media_path: Downloaded source media
            ranges: Validated ranges, in playback order

        Returns:
            The written clip and the public URL it is served under
        """
        if not ranges:
            raise NoRangesSelectedError("No timestamps provided by LLM")

        filter_graph = build_filter_graph(ranges)

        self.output_dir.mkdir(parents=True, exist_ok=True)
        clip_id = str(uuid.uuid4())
        output_path = self.output_dir / f"{clip_id}.mp4"

        logging.info(f"Merging {len(ranges)} ranges into: {output_path}")
        try:
            result = self.runner(
                self.ffmpeg_path,
                self.build_args(media_path, filter_graph, output_path),
                timeout=self.timeout,
            )
        except ToolNotFoundError as e:
            raise ToolNotFoundError(
                FFMPEG, "Install it (e.g., 'brew install ffmpeg') and ensure it's on PATH."
            ) from e
        except Exception:
            self._discard(output_path)
            raise

        if result.exit_code != 0:
            logging.error(f"ffmpeg exited with {result.exit_code} while merging clip {clip_id}")
            self._discard(output_path)
            raise CompositionFailedError(FFMPEG, result.exit_code, result.stderr)

        logging.info(f"Clip saved to: {output_path}")
        return ClipResult(
            clip_id=clip_id,
            output_path=output_path,
            result_url=f"{self.url_prefix}/{clip_id}.mp4",
        )

    @staticmethod
    def _discard(output_path: Path) -> None:
        """Remove a partially written clip so it is never served."""
        try:
            output_path.unlink(missing_ok=True)
        except OSError as e:
            logging.warning(f"Could not remove partial clip {output_path}: {e}")
