"""
Constants and configuration settings for batch media conversion.

This module holds the defaults used across the pipeline: accepted media
extensions, binary names for ffmpeg/ffprobe, encoder parameter tables and
the environment variable names used for logging. Values can be overridden
through the environment or a local `.env` file.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# External binaries (override with a full path when not on PATH)
FFMPEG_BIN = os.getenv("MEDIABATCH_FFMPEG", "ffmpeg")
FFPROBE_BIN = os.getenv("MEDIABATCH_FFPROBE", "ffprobe")

# Logging configuration
LOG_DIR_ENV = "MEDIABATCH_LOG_DIR"
LOG_FILE_ENV = "MEDIABATCH_LOG_FILE"

# Seconds between encoder progress log lines for a single file
PROGRESS_LOG_INTERVAL = int(os.getenv("MEDIABATCH_PROGRESS_INTERVAL", "60"))

# Accepted media file extensions for directory scans
VIDEO_EXTENSIONS = {".mkv", ".mp4", ".m4v", ".avi", ".mov", ".wmv", ".webm", ".ts", ".m2ts", ".mpg"}

# Output naming
DEFAULT_OUTPUT_EXTENSION = ".mp4"
CONVERTED_SUFFIX = "-converted"
MP4_FAMILY_EXTENSIONS = {".mp4", ".m4v", ".mov"}

# Fixed H.264 profile: High profile, capped bitrate, fixed keyframe interval
H264_PARAMS = [
    "-c:v", "libx264",
    "-preset", "medium",
    "-profile:v", "high",
    "-level:v", "4.1",
    "-crf", "20",
    "-maxrate", "12M",
    "-bufsize", "24M",
    "-g", "48",
    "-keyint_min", "48",
    "-pix_fmt", "yuv420p",
]

# Fixed H.265 profile: level 5.1, constant quality, 10-bit output
H265_PARAMS = [
    "-c:v", "libx265",
    "-preset", "medium",
    "-crf", "22",
    "-x265-params", "level-idc=5.1",
    "-pix_fmt", "yuv420p10le",
    "-tag:v", "hvc1",
]

# Audio strategy parameters
MIN_SAMPLE_RATE = 48000
HIGH_RES_SAMPLE_RATE = 96000
MAX_SURROUND_CHANNELS = 8
FALLBACK_AUDIO_BITRATE = "256k"
SURROUND_AUDIO_BITRATE = "640k"
STEREO_BITRATE_HIGH_RES = "320k"
STEREO_BITRATE_STANDARD = "256k"
STEREO_BITRATE_LOW = "224k"

# Job outcome reasons
REASON_OUTPUT_EXISTS = "output exists"
REASON_DECLINED = "declined"
REASON_DRY_RUN = "dry run"
REASON_INPUT_MISSING = "input missing"
REASON_EMPTY_INPUT = "empty input"
REASON_DIRECTORY_CREATE_FAILED = "directory create failed"
REASON_ENCODER_NONZERO_EXIT = "encoder nonzero exit"
REASON_OK = "converted"

# Process exit codes
EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130
