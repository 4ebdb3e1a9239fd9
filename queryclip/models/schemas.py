"""
Data models for the query clip application.
"""
from enum import Enum
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter

from queryclip.config import config


class PipelineStage(str, Enum):
    """Request-level status labels, reported to progress callbacks only."""
    IDLE = "idle"
    DOWNLOADING = "downloading"
    TRANSCRIBING = "transcribing"
    CLIPPING = "clipping"
    DONE = "done"
    ERROR = "error"


class TranscriptSegment(BaseModel):
    """A time-aligned piece of transcribed speech."""
    start: float = Field(ge=0)
    end: float = Field(ge=0)
    text: str = ""

    model_config = ConfigDict(frozen=True)


class TimeRange(BaseModel):
    """A span of the source media selected by the language model."""
    start: float = Field(ge=0, allow_inf_nan=False)
    end: float = Field(gt=0, allow_inf_nan=False)

    # Model output is untrusted: "12" or true must not pass as a number.
    model_config = ConfigDict(frozen=True, strict=True)


TimeRangeList = TypeAdapter(Annotated[List[TimeRange], Field(min_length=1)])


class ClipRequest(BaseModel):
    """Payload accepted at the request boundary."""
    source_url: HttpUrl = Field(
        validation_alias=AliasChoices("sourceUrl", "youtubeUrl", "source_url")
    )
    query: str = Field(min_length=3)


class ClipResult(BaseModel):
    """The merged clip produced for one request."""
    clip_id: str
    output_path: Path
    result_url: str


class TranscriptionConfig(BaseModel):
    """Configuration for transcription operations."""
    model: str = config.TRANSCRIPTION_MODEL
    language: Optional[str] = None
    response_format: str = "verbose_json"
    temperature: float = 0.0
    max_attempts: int = config.TRANSCRIPTION_RETRIES
    retry_delay: float = config.TRANSCRIPTION_RETRY_DELAY
    timeout: Optional[float] = config.SPEECH_TIMEOUT_SECONDS


class SelectionConfig(BaseModel):
    """Configuration for time range selection."""
    model: str = config.SELECTION_MODEL
    model_provider: str = config.SELECTION_MODEL_PROVIDER
    temperature: float = config.SELECTION_TEMPERATURE
    segment_limit: int = config.TRANSCRIPT_SEGMENT_LIMIT
    target_seconds: int = config.TARGET_CLIP_SECONDS
    timeout: Optional[float] = config.LLM_TIMEOUT_SECONDS
