"""
Module for transcribing a video's audio track using Groq's API.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import groq
from groq import Groq
from retry.api import retry_call

from queryclip.config import config
from queryclip.models.schemas import TranscriptionConfig, TranscriptSegment
from queryclip.utils.error_handling import (
    AudioExtractionFailedError,
    MissingCredentialsError,
    ToolNotFoundError,
    TranscriptionFailedError,
)
from queryclip.utils.logger import logging
from queryclip.utils.process import ToolRunner, run_external_tool

FFMPEG = "ffmpeg"

# Client errors whose text suggests the upload arrived damaged.
MALFORMED_BODY_HINTS = re.compile(
    r"malformed|truncat|corrupt|unexpected end|could not (?:be )?(?:parse|decode|read)"
    r"|invalid (?:file|audio|multipart|request body)",
    re.IGNORECASE,
)


class RetryableTranscriptionError(Exception):
    """Raised inside the retry loop for a failure worth another attempt."""


def is_transient_failure(error: Exception, attempt: int) -> bool:
    """
    Decide whether a failed transcription attempt should be retried.

    Connection resets, timeouts and server errors are always transient. A
    client error is retried only after the first attempt, and only when its
    message hints at a malformed or truncated upload.

    Args:
        error: Exception raised by the speech service call
        attempt: 1-based number of the attempt that failed

    Returns:
        True if the attempt should be retried
    """
    if isinstance(error, (groq.APIConnectionError, ConnectionError, TimeoutError)):
        return True
    if isinstance(error, groq.APIStatusError):
        if error.status_code >= 500:
            return True
        if attempt == 1 and 400 <= error.status_code < 500:
            return bool(MALFORMED_BODY_HINTS.search(str(error)))
    return False


def _response_to_dict(response: Any) -> Dict[str, Any]:
    if isinstance(response, dict):
        return response
    if hasattr(response, "model_dump"):
        return response.model_dump()
    return {"text": getattr(response, "text", ""), "segments": getattr(response, "segments", None)}


def normalize_segments(response: Any) -> List[TranscriptSegment]:
    """
    Map a verbose speech service response to transcript segments.

    A response without timed segments (silence, or a plain text response)
    becomes a single ``{0, 0}`` segment carrying the flat text.
    """
    data = _response_to_dict(response)
    segments = data.get("segments") or []

    if not segments:
        return [TranscriptSegment(start=0, end=0, text=data.get("text") or "")]

    try:
        return [
            TranscriptSegment(
                start=float(segment["start"]),
                end=float(segment["end"]),
                text=segment.get("text") or "",
            )
            for segment in segments
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise TranscriptionFailedError(f"Unexpected transcription segment format: {e!r}") from e


class AudioTranscriber:
    """Class to handle audio extraction and transcription."""

    def __init__(
        self,
        transcribe_config: Optional[TranscriptionConfig] = None,
        api_key: Optional[str] = None,
        client: Optional[Groq] = None,
        runner: ToolRunner = run_external_tool,
        ffmpeg_path: str = config.FFMPEG_PATH,
        tool_timeout: Optional[float] = config.TOOL_TIMEOUT_SECONDS,
    ):
        """
        Initialize the transcriber.

        Args:
            transcribe_config: Speech model and retry settings
            api_key: Groq API key (if None, will try to get from environment)
            client: Preconfigured Groq client, mainly for tests
            runner: Callable used to run ffmpeg
            ffmpeg_path: ffmpeg executable
            tool_timeout: Seconds before audio extraction is abandoned
        """
        self.transcribe_config = transcribe_config or TranscriptionConfig()
        self.runner = runner
        self.ffmpeg_path = ffmpeg_path
        self.tool_timeout = tool_timeout

        if client is None:
            self.api_key = api_key or os.getenv("GROQ_API_KEY")
            if not self.api_key:
                raise MissingCredentialsError(
                    "Groq API key is required. Set GROQ_API_KEY in the .env file or pass it directly."
                )
            # Retries are handled here, not by the SDK.
            client_kwargs = {"api_key": self.api_key, "max_retries": 0}
            if self.transcribe_config.timeout is not None:
                client_kwargs["timeout"] = self.transcribe_config.timeout
            client = Groq(**client_kwargs)

        self.client = client

    def extract_audio(self, media_path: Path) -> Path:
        """
        Extract a mono 16 kHz, 64 kbps audio track into a temporary file.

        Args:
            media_path: Source media file

        Returns:
            Path to the extracted mp3; the caller owns it
        """
        fd, name = tempfile.mkstemp(prefix=f"{config.TEMP_PREFIX}audio-", suffix=".mp3")
        os.close(fd)
        audio_path = Path(name)

        args = [
            "-y",
            "-i", str(media_path),
            "-vn",
            "-ac", str(config.AUDIO_CHANNELS),
            "-ar", str(config.AUDIO_SAMPLE_RATE),
            "-b:a", config.AUDIO_BITRATE,
            str(audio_path),
        ]

        logging.info(f"Extracting audio from: {media_path}")
        try:
            result = self.runner(self.ffmpeg_path, args, timeout=self.tool_timeout)
        except ToolNotFoundError as e:
            self._remove_quietly(audio_path)
            raise ToolNotFoundError(
                FFMPEG, "Install it (e.g., 'brew install ffmpeg') and ensure it's on PATH."
            ) from e
        except Exception:
            self._remove_quietly(audio_path)
            raise

        if result.exit_code != 0:
            self._remove_quietly(audio_path)
            raise AudioExtractionFailedError(FFMPEG, result.exit_code, result.stderr)

        return audio_path

    def _request_transcription(self, audio_path: Path) -> Any:
        """Submit the audio file to the speech service once."""
        options = {
            "model": self.transcribe_config.model,
            "response_format": self.transcribe_config.response_format,
            "temperature": self.transcribe_config.temperature,
        }
        if self.transcribe_config.language:
            options["language"] = self.transcribe_config.language

        with open(audio_path, "rb") as audio_file:
            return self.client.audio.transcriptions.create(
                file=(audio_path.name, audio_file.read()),
                **options,
            )

    def _transcribe_with_retry(self, audio_path: Path) -> Any:
        max_attempts = self.transcribe_config.max_attempts
        delay = self.transcribe_config.retry_delay
        attempt = 0

        def attempt_once():
            nonlocal attempt
            attempt += 1
            try:
                return self._request_transcription(audio_path)
            except Exception as e:
                if attempt < max_attempts and is_transient_failure(e, attempt):
                    raise RetryableTranscriptionError(
                        f"Transcription attempt {attempt} failed: {e}"
                    ) from e
                raise TranscriptionFailedError(
                    f"Transcription failed after {attempt} attempt(s): {e}"
                ) from e

        # backoff=1 with jitter=delay waits delay * attempt_number between tries
        return retry_call(
            attempt_once,
            exceptions=RetryableTranscriptionError,
            tries=max_attempts,
            delay=delay,
            backoff=1,
            jitter=delay,
            logger=logging,
        )

    def transcribe(self, media_path: Path) -> List[TranscriptSegment]:
        """
        Transcribe the audio track of a media file.

        Args:
            media_path: Downloaded source media

        Returns:
            Chronological transcript segments
        """
        audio_path = self.extract_audio(media_path)

        logging.info(f"Transcribing audio file: {audio_path}")
        try:
            response = self._transcribe_with_retry(audio_path)
        finally:
            self._remove_quietly(audio_path)

        segments = normalize_segments(response)
        logging.info(f"Transcription complete: {len(segments)} segments.")
        return segments

    @staticmethod
    def _remove_quietly(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logging.warning(f"Could not remove temporary audio file {path}: {e}")
