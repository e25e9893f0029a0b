"""
batchconvert: convert a batch of media files with ffmpeg, one file at a time.

Files and directories given on the command line are resolved into a job
list; each file is probed, audio and subtitle handling is chosen from its
streams, and ffmpeg is run sequentially. A summary is printed at the end and
the exit status is non-zero if any conversion failed.
"""

import argparse
import os
import signal
import sys
from datetime import datetime
from pathlib import Path

import mediabatch as mediabatch_module
from mediabatch import transcode
from mediabatch.transcode import AudioMode, BatchEngine, BatchOptions, MediaFile, SubtitleMode, VideoMode
from mediabatch.utils import LogLevel, logger, system_util
from mediabatch.utils.constants import (
    DEFAULT_OUTPUT_EXTENSION,
    EXIT_FAILURES,
    EXIT_INTERRUPTED,
    EXIT_OK,
    EXIT_USAGE,
    FFMPEG_BIN,
    FFPROBE_BIN,
    LOG_DIR_ENV,
    LOG_FILE_ENV,
    VIDEO_EXTENSIONS,
)


def _signal_handler(signum, _frame):
    """Route SIGTERM through the same path as Ctrl+C."""
    if mediabatch_module.DEBUG:
        try:
            sig_name = signal.Signals(signum).name
        except ValueError:
            sig_name = str(signum)
        logger.log("batch.signal", LogLevel.DEBUG, signal=sig_name)
    logger.safe_print(f"\nSignal {signum} received. Stopping batch...")
    raise KeyboardInterrupt


def _confirm_job(file: MediaFile, dst: Path) -> bool:
    try:
        answer = input(f"Convert {file.path} -> {dst}? [y/N] ").strip().lower()
    except EOFError:
        # No answer available; treat as "no"
        logger.safe_print("")
        return False
    return answer in ("y", "yes")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batchconvert",
        description="Convert media files with ffmpeg. Audio and subtitle handling is chosen per file "
                    "from its probed streams; files are converted one at a time.",
        epilog="Example: batchconvert ~/Videos --recurse --exclude-dir Extras --video-encoder h265",
    )
    parser.add_argument("paths", nargs="+", help="Media files and/or directories to convert")
    parser.add_argument(
        "--extensions",
        default=",".join(sorted(VIDEO_EXTENSIONS)),
        help="Comma-separated extensions to pick up from directories (files named explicitly are always included)",
    )
    parser.add_argument("--recurse", action="store_true", help="Scan directories recursively")
    parser.add_argument(
        "--exclude-dir", action="append", default=[], metavar="FRAGMENT",
        help="Skip files under directories whose name contains FRAGMENT (with --recurse; repeatable)",
    )
    parser.add_argument("--force", action="store_true", help="Overwrite existing outputs")
    parser.add_argument("--delete-source", action="store_true", help="Delete each source file after it converts successfully")
    parser.add_argument("--pause-on-error", action="store_true", help="Wait for Enter after a failed conversion")
    parser.add_argument("--clear-metadata", action="store_true", help="Strip global metadata from outputs")

    video = parser.add_mutually_exclusive_group()
    video.add_argument("--passthrough-video", action="store_true", help="Copy the video stream without re-encoding")
    video.add_argument("--video-encoder", choices=["h264", "h265"], default="h264",
                       help="Video encoder when not passing video through (default: h264)")

    parser.add_argument("--passthrough-audio", action="store_true", help="Copy audio streams without re-encoding")
    parser.add_argument("--subtitles", choices=[m.value for m in SubtitleMode], default=SubtitleMode.AUTO.value,
                        help="auto: text subtitles only; all: every subtitle stream; none: drop subtitles")
    parser.add_argument("--output-path", help="Output file (only valid when converting a single file)")
    parser.add_argument("--output-dir", help="Write outputs under this directory, mirroring the source layout")
    parser.add_argument("--output-extension", default=DEFAULT_OUTPUT_EXTENSION,
                        help=f"Output container extension (default: {DEFAULT_OUTPUT_EXTENSION})")
    parser.add_argument("--confirm", action="store_true", help="Ask before converting each file")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be converted without running ffmpeg")
    parser.add_argument("--log-dir", help=f"Directory for a timestamped log file (or ${LOG_DIR_ENV})")
    parser.add_argument("--log-file", help=f"Also write log output to this file; overrides --log-dir (or ${LOG_FILE_ENV})")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {mediabatch_module.__version__}")
    return parser


def options_from_args(args: argparse.Namespace) -> BatchOptions:
    if args.passthrough_video:
        video_mode = VideoMode.PASSTHROUGH
    else:
        video_mode = VideoMode.H265 if args.video_encoder == "h265" else VideoMode.H264

    return BatchOptions(
        video_mode=video_mode,
        audio_mode=AudioMode.PASSTHROUGH if args.passthrough_audio else AudioMode.STRATEGY,
        subtitle_mode=SubtitleMode(args.subtitles),
        force=args.force,
        delete_source=args.delete_source,
        pause_on_error=args.pause_on_error,
        clear_metadata=args.clear_metadata,
        output_path=Path(args.output_path).expanduser() if args.output_path else None,
        output_dir=Path(args.output_dir).expanduser().resolve() if args.output_dir else None,
        output_extension=args.output_extension,
        dry_run=args.dry_run,
        debug=args.debug,
        ffmpeg=FFMPEG_BIN,
        show_progress=sys.stderr.isatty(),
    )


def _configure_logging(args: argparse.Namespace) -> None:
    # Allow log configuration via environment variables.
    log_file = args.log_file or os.getenv(LOG_FILE_ENV)
    log_dir = args.log_dir or os.getenv(LOG_DIR_ENV)

    logger.set_log_level(LogLevel.DEBUG if args.debug else LogLevel.INFO)

    if log_file:
        log_path = Path(log_file).expanduser().resolve()
    elif log_dir:
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        log_path = (Path(log_dir).expanduser() / f"batchconvert-{timestamp}.log").resolve()
    else:
        return
    logger.set_log_file(log_path)
    logger.safe_print(f"Logging to: {log_path}")


def run_batch(args: argparse.Namespace) -> int:
    """Enumerate, convert and summarize. Returns the process exit code."""
    options = options_from_args(args)
    if not args.dry_run:
        system_util.which_or_die(FFMPEG_BIN, FFPROBE_BIN)

    files = transcode.enumerate_media_files(
        args.paths,
        extensions=transcode.parse_extensions(args.extensions),
        recurse=args.recurse,
        exclude_dirs=args.exclude_dir,
    )
    if not files:
        logger.log("batch.empty", LogLevel.WARN, msg="No media files found", paths=", ".join(args.paths))
        return EXIT_OK

    if options.output_path is not None and len(files) > 1:
        logger.log("startup.error", LogLevel.ERROR,
                   msg="--output-path can only be used with a single input file",
                   files=len(files))
        return EXIT_USAGE

    engine = BatchEngine(options, confirm=_confirm_job if args.confirm else None)
    try:
        summary = engine.run(files)
    except KeyboardInterrupt:
        logger.log("batch.interrupted", LogLevel.WARN, msg="Batch cancelled; the file in progress may be incomplete")
        return EXIT_INTERRUPTED

    logger.safe_print(
        f"\nDone in {summary.elapsed_time}. "
        f"Processed={summary.processed} OK={summary.successful} SKIP={summary.skipped} FAIL={summary.failed}"
    )
    return EXIT_OK if summary.success else EXIT_FAILURES


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    mediabatch_module.DEBUG = args.debug
    _configure_logging(args)

    signal.signal(signal.SIGTERM, _signal_handler)
    try:
        return run_batch(args)
    finally:
        logger.set_log_file(None)


if __name__ == "__main__":
    sys.exit(main())
