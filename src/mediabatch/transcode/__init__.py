"""Batch media conversion with ffmpeg.

This package provides:
- models: records shared by every stage (files, stream info, strategies, jobs, outcomes)
- probe: the ffprobe boundary producing ProbeResult records
- audio / subtitles: per-file stream strategies
- core: ffmpeg command building and encoder execution
- batch: file discovery and the sequential batch engine
- report: run summary aggregation
"""

from .models import (
    AudioMode,
    AudioStrategy,
    AudioStreamInfo,
    BatchSummary,
    EncodingJob,
    FailureKind,
    JobOutcome,
    JobStatus,
    MediaFile,
    ProbeResult,
    SubtitleKind,
    SubtitleMode,
    SubtitleStrategy,
    SubtitleStreamInfo,
    VideoMode,
)
from .audio import resolve_audio_strategy
from .subtitles import classify_subtitle_codec, resolve_subtitle_strategy
from .probe import parse_probe_output, probe_media
from .core import build_ffmpeg_cmd, run_encoder
from .batch import (
    BatchContext,
    BatchEngine,
    BatchOptions,
    drop_planned_outputs,
    enumerate_media_files,
    iter_media_files,
    parse_extensions,
    plan_output_path,
)
from .report import BatchReport

__all__ = [
    # Records
    "AudioMode",
    "AudioStrategy",
    "AudioStreamInfo",
    "BatchSummary",
    "EncodingJob",
    "FailureKind",
    "JobOutcome",
    "JobStatus",
    "MediaFile",
    "ProbeResult",
    "SubtitleKind",
    "SubtitleMode",
    "SubtitleStrategy",
    "SubtitleStreamInfo",
    "VideoMode",
    # Strategies
    "resolve_audio_strategy",
    "classify_subtitle_codec",
    "resolve_subtitle_strategy",
    # Probing and encoding
    "parse_probe_output",
    "probe_media",
    "build_ffmpeg_cmd",
    "run_encoder",
    # Batch
    "BatchContext",
    "BatchEngine",
    "BatchOptions",
    "BatchReport",
    "enumerate_media_files",
    "iter_media_files",
    "parse_extensions",
    "drop_planned_outputs",
    "plan_output_path",
]
