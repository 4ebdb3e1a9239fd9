"""
Module for selecting clip time ranges from a transcript using LLM models.
"""

import json
import re
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError
from langchain_core.prompts import ChatPromptTemplate
from langchain.chat_models import init_chat_model

from queryclip.core.prompts import selection_system_template, selection_user_template
from queryclip.models.schemas import (
    SelectionConfig,
    TimeRange,
    TimeRangeList,
    TranscriptSegment,
)
from queryclip.utils.error_handling import InvalidSelectionError, NoRangesSelectedError
from queryclip.utils.logger import logging

JSON_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


def build_transcript_preview(transcript: Sequence[TranscriptSegment], limit: int) -> str:
    """Render the first ``limit`` segments as ``[start-end] text`` lines."""
    return "\n".join(
        f"[{segment.start:.2f}-{segment.end:.2f}] {segment.text}"
        for segment in transcript[:limit]
    )


def message_text(content: Any) -> str:
    """Flatten a chat message's content, joining text blocks when it is a list."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text") or "")
        if content and not parts:
            raise InvalidSelectionError("LLM returned no text content")
        return "".join(parts)
    raise InvalidSelectionError(
        f"LLM returned unexpected content type: {type(content).__name__}"
    )


def parse_model_output(content: str) -> Any:
    """
    Parse the raw model answer into JSON.

    Strict parsing first; failing that, the outermost bracketed array in
    the text. Anything unparseable is treated as an empty selection.
    """
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass

    match = JSON_ARRAY_PATTERN.search(content)
    if not match:
        return []
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError:
        return []


def validate_ranges(parsed: Any) -> List[TimeRange]:
    """
    Validate parsed model output before it is allowed near ffmpeg.

    Raises:
        NoRangesSelectedError: The model selected nothing
        InvalidSelectionError: The output is not a list of well-formed ranges
    """
    if isinstance(parsed, list) and not parsed:
        raise NoRangesSelectedError("LLM returned no timestamps")

    try:
        return TimeRangeList.validate_python(parsed)
    except ValidationError as e:
        raise InvalidSelectionError(f"LLM returned invalid JSON: {e}") from e


class ClipSelector:
    """Class to choose the moments of a transcript that answer a query."""

    def __init__(self, selection_config: Optional[SelectionConfig] = None, llm: Any = None):
        """
        Initialize the selector.

        Args:
            selection_config: Model and prompt settings
            llm: Preconfigured chat model; built from the config if None
        """
        self.selection_config = selection_config or SelectionConfig()
        self._llm = llm

    @property
    def llm(self):
        if self._llm is None:
            model_kwargs = {}
            if self.selection_config.timeout is not None:
                model_kwargs["timeout"] = self.selection_config.timeout
            self._llm = init_chat_model(
                model=self.selection_config.model,
                model_provider=self.selection_config.model_provider,
                temperature=self.selection_config.temperature,
                **model_kwargs,
            )
        return self._llm

    def build_prompt(self) -> ChatPromptTemplate:
        return ChatPromptTemplate.from_messages([
            ("system", selection_system_template),
            ("user", selection_user_template),
        ])

    def select_ranges(
        self, transcript: Sequence[TranscriptSegment], query: str
    ) -> List[TimeRange]:
        """
        Ask the model which parts of the transcript answer ``query``.

        Args:
            transcript: Chronological transcript segments
            query: Free-text editing request

        Returns:
            Validated time ranges, in the order the model gave them
        """
        preview = build_transcript_preview(transcript, self.selection_config.segment_limit)
        if len(transcript) > self.selection_config.segment_limit:
            logging.info(
                f"Transcript has {len(transcript)} segments; only the first "
                f"{self.selection_config.segment_limit} are sent to the model"
            )

        chain = self.build_prompt() | self.llm
        logging.info(f"Selecting clip ranges with {self.selection_config.model}")
        response = chain.invoke({
            "transcript": preview,
            "query": query,
            "target_seconds": self.selection_config.target_seconds,
        })

        content = message_text(response.content)
        ranges = validate_ranges(parse_model_output(content or "[]"))
        logging.info(f"LLM selected {len(ranges)} ranges")
        return ranges
