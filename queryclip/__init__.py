"""
Query Clip Application.

This application downloads a public video, transcribes its audio, asks an
LLM which moments answer a free-text request, and merges those moments into
a single short clip.
"""

from queryclip.config import config

__version__ = config.APP_VERSION
