"""
File discovery and sequential batch execution.

`enumerate_media_files` resolves the operator's paths into an ordered list of
`MediaFile`. `BatchEngine` then walks that list one file at a time: it decides
whether the job is skipped or failed before the encoder is ever started,
probes the source, freezes an `EncodingJob`, runs ffmpeg and records one
`JobOutcome` per file. A failing file never stops the batch.
"""
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from tqdm import tqdm

from mediabatch.utils import DEFAULT_OUTPUT_EXTENSION, FFMPEG_BIN, VIDEO_EXTENSIONS, LogLevel
from mediabatch.utils import logger, time_util
from mediabatch.utils.constants import (
    CONVERTED_SUFFIX,
    REASON_DECLINED,
    REASON_DIRECTORY_CREATE_FAILED,
    REASON_DRY_RUN,
    REASON_EMPTY_INPUT,
    REASON_ENCODER_NONZERO_EXIT,
    REASON_INPUT_MISSING,
    REASON_OK,
    REASON_OUTPUT_EXISTS,
)
from . import core, probe
from .audio import resolve_audio_strategy
from .models import (
    AudioMode,
    BatchSummary,
    EncodingJob,
    FailureKind,
    JobOutcome,
    JobStatus,
    MediaFile,
    ProbeResult,
    SubtitleMode,
    VideoMode,
)
from .report import BatchReport
from .subtitles import resolve_subtitle_strategy

Prober = Callable[[Path], Optional[ProbeResult]]
Confirmer = Callable[[MediaFile, Path], bool]


def parse_extensions(value: str | Iterable[str]) -> set[str]:
    """Normalize 'mkv,.MP4' or ['mkv', '.mp4'] to {'.mkv', '.mp4'}."""
    items = value.split(",") if isinstance(value, str) else value
    result = set()
    for item in items:
        item = item.strip().lower()
        if item:
            result.add(item if item.startswith(".") else f".{item}")
    return result


def _is_excluded(path: Path, root: Path, exclude_dirs: Sequence[str]) -> bool:
    """True if any directory between root and path contains an excluded fragment."""
    dirs = path.relative_to(root).parent.parts
    return any(fragment in part for part in dirs for fragment in exclude_dirs)


def iter_media_files(root: Path, extensions: Iterable[str] = VIDEO_EXTENSIONS, recurse: bool = False,
                     exclude_dirs: Sequence[str] = ()) -> Iterator[Path]:
    """Find media files under a directory, recursively if requested."""
    extensions = set(extensions)
    candidates = root.rglob("*") if recurse else root.glob("*")
    for p in sorted(candidates):
        if not p.is_file() or p.suffix.lower() not in extensions:
            continue
        if recurse and exclude_dirs and _is_excluded(p, root, exclude_dirs):
            continue
        yield p


def enumerate_media_files(paths: Iterable[str | Path], extensions: Iterable[str] = VIDEO_EXTENSIONS,
                          recurse: bool = False, exclude_dirs: Sequence[str] = ()) -> List[MediaFile]:
    """
    Resolve input files and directories into an ordered list of media files.

    Explicitly named files are always included, regardless of extension.
    Missing paths are logged and skipped; the remaining paths are still
    enumerated. A file reached through more than one input is listed once.
    """
    files: List[MediaFile] = []
    seen = set()
    extensions = parse_extensions(extensions)

    for raw in paths:
        root = Path(raw).expanduser()
        if not root.exists():
            logger.log("enumerate.missing", LogLevel.ERROR, path=str(root))
            continue

        if root.is_dir():
            candidates = [(p, root) for p in iter_media_files(root, extensions, recurse, exclude_dirs)]
        else:
            candidates = [(root, root.parent)]

        for path, source_dir in candidates:
            key = path.resolve()
            if key in seen:
                continue
            seen.add(key)
            try:
                size = path.stat().st_size
            except OSError as e:
                logger.log("enumerate.unreadable", LogLevel.ERROR, path=str(path), error=str(e))
                continue
            files.append(MediaFile(path=path, source_directory=source_dir, size_bytes=size))

    logger.log("enumerate.complete", LogLevel.DEBUG, files=len(files), recurse=recurse)
    return files


@dataclass(frozen=True)
class BatchOptions:
    """Operator switches for one run."""
    video_mode: VideoMode = VideoMode.H264
    audio_mode: AudioMode = AudioMode.STRATEGY
    subtitle_mode: SubtitleMode = SubtitleMode.AUTO
    force: bool = False
    delete_source: bool = False
    pause_on_error: bool = False
    clear_metadata: bool = False
    output_path: Optional[Path] = None
    output_dir: Optional[Path] = None
    output_extension: str = DEFAULT_OUTPUT_EXTENSION
    dry_run: bool = False
    debug: bool = False
    ffmpeg: str = FFMPEG_BIN
    show_progress: bool = True


@dataclass
class BatchContext:
    """Per-run counters, owned by a single BatchEngine.run call."""
    total: int
    start_time: float = field(default_factory=time.time)
    completed: int = 0
    report: BatchReport = field(default_factory=BatchReport)

    @property
    def elapsed(self) -> float:
        return time.time() - self.start_time


def plan_output_path(file: MediaFile, options: BatchOptions) -> Path:
    """
    Decide where the converted file goes.

    An explicit output path wins. Otherwise the file keeps its position
    relative to its source directory, under output_dir when one is set and
    next to the source when not, with the output extension applied. An
    output that would overwrite the source gets a '-converted' stem suffix.
    """
    if options.output_path is not None:
        return options.output_path

    if options.output_dir is not None:
        try:
            rel = file.path.relative_to(file.source_directory)
        except ValueError:
            rel = Path(file.path.name)
        dst = options.output_dir / rel
    else:
        dst = file.path

    ext = options.output_extension if options.output_extension.startswith(".") else f".{options.output_extension}"
    dst = dst.with_suffix(ext)
    if dst.resolve() == file.path.resolve():
        dst = dst.with_name(f"{dst.stem}{CONVERTED_SUFFIX}{dst.suffix}")
    return dst


def drop_planned_outputs(files: Sequence[MediaFile], options: BatchOptions) -> List[MediaFile]:
    """
    Remove files that another file in the batch would be converted into.

    Outputs written next to their sources share a directory (and usually an
    extension) with the inputs, so a second run over the same directory
    would otherwise pick up the first run's results as new inputs.
    """
    if options.output_path is not None:
        return list(files)
    planned = {plan_output_path(f, options).resolve() for f in files}
    kept = []
    for file in files:
        if file.path.resolve() in planned:
            logger.log("enumerate.skip_output", LogLevel.DEBUG, file=file.path.name)
            continue
        kept.append(file)
    return kept


def _wait_for_enter() -> None:
    try:
        input("Conversion failed. Press Enter to continue with the next file...")
    except EOFError:
        # No interactive stdin; carry on as if Enter was pressed
        logger.safe_print("")


class BatchEngine:
    """Runs conversion jobs one after another and collects their outcomes."""

    def __init__(self, options: BatchOptions, prober: Optional[Prober] = None, runner=None,
                 confirm: Optional[Confirmer] = None, acknowledge: Optional[Callable[[], None]] = None):
        """
        Args:
            options: Run switches
            prober: Callable returning a ProbeResult (or None) for a path
            runner: Callable with run_encoder's signature returning (exit_code, stderr)
            confirm: Asked once per job; returning False skips the job
            acknowledge: Blocks after a failed encode when pause_on_error is set
        """
        self.options = options
        self.prober = prober or probe.probe_media
        self.runner = runner or core.run_encoder
        self.confirm = confirm
        self.acknowledge = acknowledge or _wait_for_enter

    def run(self, files: Sequence[MediaFile]) -> BatchSummary:
        files = drop_planned_outputs(files, self.options)
        context = BatchContext(total=len(files))
        opts = self.options

        logger.log("batch.start", LogLevel.INFO,
                   files=context.total,
                   video=opts.video_mode.value,
                   audio=opts.audio_mode.value,
                   subtitles=opts.subtitle_mode.value,
                   force=opts.force,
                   delete_source=opts.delete_source,
                   dry_run=opts.dry_run)

        for file in tqdm(files, desc="Converting", unit="file", disable=not opts.show_progress):
            self._log_progress(context, file)
            outcome = self.run_job(file, context)
            context.report.record(file, outcome)
            context.completed += 1

        summary = context.report.finish(context.elapsed)
        logger.log("batch.end", LogLevel.INFO,
                   processed=summary.processed,
                   ok=summary.successful,
                   skip=summary.skipped,
                   fail=summary.failed,
                   runtime=summary.elapsed_time)
        return summary

    def _log_progress(self, context: BatchContext, file: MediaFile) -> None:
        pct = (context.completed / context.total) * 100 if context.total else 100.0
        logger.log("batch.progress", LogLevel.INFO,
                   file=file.path.name,
                   job=context.completed + 1,
                   total=context.total,
                   pct=round(pct, 1),
                   eta=time_util.get_eta_total(context.completed, context.total, context.elapsed))

    def run_job(self, file: MediaFile, context: Optional[BatchContext] = None) -> JobOutcome:
        """Take one file from pending to a terminal outcome."""
        started = time.time()
        opts = self.options
        dst = plan_output_path(file, opts)

        def done(status: JobStatus, reason: str, kind: Optional[FailureKind] = None,
                 detail: Optional[str] = None) -> JobOutcome:
            return JobOutcome(status=status, reason=reason, elapsed=time.time() - started, kind=kind, detail=detail)

        if dst.exists() and not opts.force:
            return done(JobStatus.SKIPPED, REASON_OUTPUT_EXISTS, FailureKind.OUTPUT_EXISTS, str(dst))

        if opts.dry_run:
            logger.log("job.plan", LogLevel.INFO, file=file.path.name, dst=str(dst))
            return done(JobStatus.SKIPPED, REASON_DRY_RUN, FailureKind.DECLINED)

        if self.confirm is not None and not self.confirm(file, dst):
            return done(JobStatus.SKIPPED, REASON_DECLINED, FailureKind.DECLINED)

        try:
            size = file.path.stat().st_size if file.path.is_file() else None
        except OSError:
            size = None
        if size is None:
            return done(JobStatus.FAILED, REASON_INPUT_MISSING, FailureKind.PATH_NOT_FOUND, str(file.path))
        if size == 0:
            return done(JobStatus.SKIPPED, REASON_EMPTY_INPUT, FailureKind.EMPTY_INPUT)

        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return done(JobStatus.FAILED, REASON_DIRECTORY_CREATE_FAILED, FailureKind.DIRECTORY_CREATE_FAILURE, str(e))

        job, duration = self._build_job(file, dst)
        cmd = core.build_ffmpeg_cmd(job, ffmpeg=opts.ffmpeg)

        logger.log("transcode.start", LogLevel.INFO,
                   file=file.path.name,
                   dst=str(dst),
                   job=f"{context.completed + 1}/{context.total}" if context else None)
        logger.log("transcode.command", LogLevel.DEBUG, cmd=" ".join(cmd))

        try:
            code, _ = self.runner(cmd, file.path, duration, opts.debug)
        except OSError as e:
            code, detail = None, f"could not start encoder: {e}"
        else:
            detail = f"exit code {code}"

        if code != 0:
            outcome = done(JobStatus.FAILED, REASON_ENCODER_NONZERO_EXIT, FailureKind.ENCODER_NONZERO_EXIT, detail)
            if opts.pause_on_error:
                logger.log("job.paused", LogLevel.WARN, file=file.path.name, reason=outcome.reason)
                self.acknowledge()
            return outcome

        kind, detail = None, None
        if opts.delete_source:
            try:
                file.path.unlink()
            except OSError as e:
                kind, detail = FailureKind.SOURCE_DELETE_FAILURE, str(e)
                logger.log("job.delete_failed", LogLevel.WARN, file=file.path.name, error=str(e))

        logger.log("transcode.complete", LogLevel.INFO,
                   file=file.path.name,
                   source_deleted=opts.delete_source and kind is None)
        return done(JobStatus.SUCCESS, REASON_OK, kind, detail)

    def _build_job(self, file: MediaFile, dst: Path) -> tuple[EncodingJob, Optional[float]]:
        """Probe the source and freeze the job description."""
        opts = self.options
        result = self.prober(file.path)
        if result is None:
            logger.log("job.probe_unavailable", LogLevel.DEBUG, file=file.path.name,
                       kind=FailureKind.PROBE_UNAVAILABLE.value)
            result = ProbeResult()

        audio_strategy = None
        if opts.audio_mode is AudioMode.STRATEGY:
            audio_strategy = resolve_audio_strategy(result.primary_audio)
            logger.log("job.audio", LogLevel.DEBUG,
                       file=file.path.name,
                       codec=audio_strategy.codec,
                       bitrate=audio_strategy.bitrate,
                       channels=audio_strategy.channels,
                       sample_rate=audio_strategy.sample_rate_hz,
                       reasoning=audio_strategy.reasoning)

        subtitle_strategy = resolve_subtitle_strategy(result.subtitle_streams, opts.subtitle_mode)
        if subtitle_strategy.warning:
            logger.log("job.subtitles", LogLevel.WARN, file=file.path.name, warning=subtitle_strategy.warning)

        job = EncodingJob(
            input_path=file.path,
            output_path=dst,
            video_mode=opts.video_mode,
            audio_mode=opts.audio_mode,
            subtitle_strategy=subtitle_strategy,
            audio_strategy=audio_strategy,
            clear_metadata=opts.clear_metadata,
            force_overwrite=opts.force,
        )
        return job, result.duration
