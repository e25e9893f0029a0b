"""
A batch media conversion package built around ffmpeg.

This package turns a set of source media files into ffmpeg conversion jobs.
Each file is probed for its audio and subtitle streams, per-file audio and
subtitle strategies are derived from that metadata, and the resulting
argument vector is run sequentially with progress and ETA reporting.

The package is organized into two parts:
- transcode: stream strategies, ffmpeg command building, batch execution and
  the run report.
- utils: constants, structured logging, subprocess helpers and time formatting.
"""

__version__ = "1.0.0"

# Debug flag for controlling verbose output
DEBUG: bool = False

__all__ = ["__version__", "DEBUG"]
