"""
Main entry point for the Query Clip application.
"""

import argparse
import sys
from typing import Any, Callable, Dict, Optional, Tuple

from dotenv import load_dotenv
from pydantic import ValidationError

from queryclip.models.schemas import ClipRequest, ClipResult, PipelineStage
from queryclip.core.downloader import VideoDownloader
from queryclip.core.transcriber import AudioTranscriber
from queryclip.core.selector import ClipSelector
from queryclip.core.compositor import VideoCompositor
from queryclip.utils.error_handling import describe_error
from queryclip.utils.helpers import request_workspace, truncate_text
from queryclip.utils.logger import logging

StatusCallback = Callable[[PipelineStage], None]


def process_video(
    source_url: str,
    query: str,
    on_status: Optional[StatusCallback] = None,
    downloader: Optional[VideoDownloader] = None,
    transcriber: Optional[AudioTranscriber] = None,
    selector: Optional[ClipSelector] = None,
    compositor: Optional[VideoCompositor] = None,
) -> ClipResult:
    """
    Process a video: download, transcribe, select ranges and merge them.

    Every stage runs to completion before the next starts, and the first
    failure aborts the request. The downloaded source lives in a request
    workspace that is removed on exit; the rendered clip is kept.

    Args:
        source_url: Public video URL
        query: What the clip should show
        on_status: Optional callback receiving each PipelineStage
        downloader: Fetcher stage (built from config if None)
        transcriber: Transcriber stage (built from config if None)
        selector: Selector stage (built from config if None)
        compositor: Compositor stage (built from config if None)

    Returns:
        ClipResult for the rendered clip
    """

    def _status(stage: PipelineStage) -> None:
        if on_status:
            on_status(stage)

    logging.info(f"Clip request for {source_url}: {truncate_text(query)}")
    try:
        with request_workspace() as workspace:
            _status(PipelineStage.DOWNLOADING)

            # Default stages are built before any download starts
            downloader = downloader or VideoDownloader()
            transcriber = transcriber or AudioTranscriber()
            selector = selector or ClipSelector()
            compositor = compositor or VideoCompositor()

            # 1. Download source video
            media_path = downloader.fetch(source_url, workspace)

            # 2. Transcribe
            _status(PipelineStage.TRANSCRIBING)
            transcript = transcriber.transcribe(media_path)

            # 3. Ask the LLM for time ranges, 4. clip and merge
            _status(PipelineStage.CLIPPING)
            ranges = selector.select_ranges(transcript, query)

            result = compositor.compose(media_path, ranges)
    except Exception:
        _status(PipelineStage.ERROR)
        raise

    _status(PipelineStage.DONE)
    logging.info(f"Clip request complete: {result.result_url}")
    return result


def run_clip_request(
    payload: Any, **stages: Any
) -> Tuple[int, Dict[str, str]]:
    """
    Handle one request at the client boundary.

    Never raises: every failure, including an invalid payload, becomes an
    ``{"error": ...}`` body.

    Args:
        payload: Decoded JSON body with ``sourceUrl`` and ``query``
        **stages: Optional stage overrides forwarded to process_video

    Returns:
        (status_code, body) with ``{"resultUrl": ...}`` on success
    """
    try:
        request = ClipRequest.model_validate(payload)
    except ValidationError as e:
        logging.warning(f"Rejected clip request: {e}")
        return 400, {"error": f"Invalid request: {e}"}

    try:
        result = process_video(str(request.source_url), request.query, **stages)
    except Exception as e:
        return 400, {"error": describe_error(e)}

    return 200, {"resultUrl": result.result_url}


def main():
    """Main function to run the application from command line."""
    parser = argparse.ArgumentParser(description="Query Clip: cut a video down to what you ask for")
    parser.add_argument("url", help="Public video URL")
    parser.add_argument("query", help="What the clip should show, e.g. 'where they discuss pricing'")

    args = parser.parse_args()

    # Load environment variables
    load_dotenv()

    def on_status(stage: PipelineStage) -> None:
        print(f"  [{stage.value}]")

    status_code, body = run_clip_request(
        {"sourceUrl": args.url, "query": args.query}, on_status=on_status
    )

    print("\n" + "=" * 80)
    if status_code != 200:
        print(f"Error: {body['error']}")
        print("=" * 80)
        sys.exit(1)

    print(f"Clip ready: {body['resultUrl']}")
    print("=" * 80)


if __name__ == "__main__":
    main()
