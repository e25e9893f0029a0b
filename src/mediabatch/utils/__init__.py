"""
Constants, structured logging, subprocess helpers and time formatting shared
by the conversion pipeline.
"""

from .constants import (
    DEFAULT_OUTPUT_EXTENSION,
    EXIT_FAILURES,
    EXIT_INTERRUPTED,
    EXIT_OK,
    EXIT_USAGE,
    FFMPEG_BIN,
    FFPROBE_BIN,
    VIDEO_EXTENSIONS,
)
from .logger import LogLevel

__all__ = [
    "DEFAULT_OUTPUT_EXTENSION",
    "EXIT_FAILURES",
    "EXIT_INTERRUPTED",
    "EXIT_OK",
    "EXIT_USAGE",
    "FFMPEG_BIN",
    "FFPROBE_BIN",
    "VIDEO_EXTENSIONS",
    "LogLevel",
]
