"""
Configuration settings for the query clip application.
"""

import os
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv

from queryclip.utils.logger import logging


# Ensure environment variables are loaded
load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    """Read an optional float from the environment; unset or empty means None."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return float(value)


class Config:
    """Base configuration class."""

    # Application info
    APP_NAME = "Query Clip"
    APP_VERSION = "0.1.0"

    # Data directories
    BASE_DIR = Path(__file__).resolve().parent.parent.absolute()
    PUBLIC_DIR = BASE_DIR / "public"
    OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", str(PUBLIC_DIR / "outputs")))
    OUTPUT_URL_PREFIX = "/outputs"
    TEMP_PREFIX = "queryclip-"

    # API keys
    GROQ_API_KEY = os.getenv("GROQ_API_KEY")

    # Default models
    TRANSCRIPTION_MODEL = os.getenv("TRANSCRIPTION_MODEL", "whisper-large-v3-turbo")
    SELECTION_MODEL = os.getenv("SELECTION_MODEL", "llama-3.3-70b-versatile")
    SELECTION_MODEL_PROVIDER = "groq"
    SELECTION_TEMPERATURE = 0.2

    # External tools
    YT_DLP_PATH = os.getenv("YT_DLP_PATH")
    YT_DLP_CANDIDATES = (
        "/opt/homebrew/bin/yt-dlp",
        "/usr/local/bin/yt-dlp",
        "/usr/bin/yt-dlp",
    )
    YT_DLP_FORMAT = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/mp4"
    FFMPEG_PATH = os.getenv("FFMPEG_PATH", "ffmpeg")

    # Audio extraction
    AUDIO_SAMPLE_RATE = 16000
    AUDIO_CHANNELS = 1
    AUDIO_BITRATE = "64k"

    # Transcription retry policy: wait RETRY_DELAY * attempt between attempts
    TRANSCRIPTION_RETRIES = 3
    TRANSCRIPTION_RETRY_DELAY = 0.8

    # Selection
    TRANSCRIPT_SEGMENT_LIMIT = 200
    TARGET_CLIP_SECONDS = 90

    # Composition
    MIN_RANGE_SECONDS = 0.1
    VIDEO_CODEC = "libx264"
    AUDIO_CODEC = "aac"

    # Timeouts; None keeps the call unbounded
    TOOL_TIMEOUT_SECONDS = _optional_float("TOOL_TIMEOUT_SECONDS")
    SPEECH_TIMEOUT_SECONDS = _optional_float("SPEECH_TIMEOUT_SECONDS")
    LLM_TIMEOUT_SECONDS = _optional_float("LLM_TIMEOUT_SECONDS")

    @classmethod
    def initialize(cls):
        """Initialize the application configuration."""
        cls.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

        # Validate required environment variables
        if not cls.GROQ_API_KEY:
            logging.warning("GROQ_API_KEY environment variable not set.")
            logging.warning("Please set it in the .env file or environment variables.")


class DevelopmentConfig(Config):
    """Development configuration."""

    DEBUG = True
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG = False
    LOG_LEVEL = "INFO"


# Determine which configuration to use based on environment
def get_config():
    """Get the appropriate configuration based on environment."""
    env = os.getenv("ENVIRONMENT", "development").lower()
    if env == "production":
        return ProductionConfig
    else:
        return DevelopmentConfig


# Create a config instance
config = get_config()
config.initialize()
