"""
Records passed between the conversion stages.

Stream metadata is turned into these tagged records once, at the probe
boundary; the strategy resolvers, the command builder and the batch engine
only ever see these types.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


class VideoMode(Enum):
    PASSTHROUGH = "passthrough"
    H264 = "h264"
    H265 = "h265"


class AudioMode(Enum):
    PASSTHROUGH = "passthrough"
    STRATEGY = "strategy"


class SubtitleMode(Enum):
    AUTO = "auto"
    ALL = "all"
    NONE = "none"


class SubtitleKind(Enum):
    TEXT_BASED = "text"
    CLOSED_CAPTION = "closed_caption"
    BITMAP = "bitmap"
    UNKNOWN = "unknown"


class JobStatus(Enum):
    SUCCESS = "OK"
    SKIPPED = "SKIP"
    FAILED = "FAIL"


class FailureKind(Enum):
    """Why a job did not simply succeed."""
    PATH_NOT_FOUND = "path_not_found"
    EMPTY_INPUT = "empty_input"
    OUTPUT_EXISTS = "output_exists"
    DECLINED = "declined"
    DIRECTORY_CREATE_FAILURE = "directory_create_failure"
    ENCODER_NONZERO_EXIT = "encoder_nonzero_exit"
    SOURCE_DELETE_FAILURE = "source_delete_failure"
    PROBE_UNAVAILABLE = "probe_unavailable"


@dataclass(frozen=True)
class MediaFile:
    path: Path
    source_directory: Path
    size_bytes: int


@dataclass(frozen=True)
class AudioStreamInfo:
    channels: int
    sample_rate_hz: int
    codec: str


@dataclass(frozen=True)
class SubtitleStreamInfo:
    index: int
    codec: str
    language: Optional[str] = None
    title: Optional[str] = None
    forced: bool = False
    default: bool = False
    hearing_impaired: bool = False


@dataclass(frozen=True)
class ProbeResult:
    """Stream metadata for one file, as reported by the prober."""
    audio_streams: Tuple[AudioStreamInfo, ...] = ()
    subtitle_streams: Tuple[SubtitleStreamInfo, ...] = ()
    duration: Optional[float] = None

    @property
    def primary_audio(self) -> Optional[AudioStreamInfo]:
        return self.audio_streams[0] if self.audio_streams else None


@dataclass(frozen=True)
class AudioStrategy:
    codec: str
    bitrate: str
    channels: int
    sample_rate_hz: int
    reasoning: str


@dataclass(frozen=True)
class SubtitleStrategy:
    include_subtitles: bool
    stream_mappings: Tuple[int, ...] = ()
    # Mapped streams that are bitmap or unrecognized; always stream-copied
    bitmap_mappings: Tuple[int, ...] = ()
    warning: Optional[str] = None
    mode: SubtitleMode = SubtitleMode.AUTO


@dataclass(frozen=True)
class EncodingJob:
    """Everything needed to build one encoder invocation. Created at dispatch."""
    input_path: Path
    output_path: Path
    video_mode: VideoMode
    audio_mode: AudioMode
    subtitle_strategy: SubtitleStrategy
    audio_strategy: Optional[AudioStrategy] = None
    clear_metadata: bool = False
    force_overwrite: bool = False


@dataclass(frozen=True)
class JobOutcome:
    status: JobStatus
    reason: str
    elapsed: float = 0.0
    kind: Optional[FailureKind] = None
    detail: Optional[str] = None


@dataclass
class BatchSummary:
    processed: int = 0
    successful: int = 0
    skipped: int = 0
    failed: int = 0
    elapsed_time: str = ""
    elapsed_seconds: float = 0.0
    outcomes: list = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0
