"""
Functions to build ffmpeg argument vectors and run the encoder.

`build_ffmpeg_cmd` turns a frozen `EncodingJob` into the full command line,
choosing exactly one of four video/audio paths (stream copy, copy video with
re-encoded audio, H.264, H.265) and appending the shared trailing options.
`run_encoder` executes that command, logging periodic progress parsed from
ffmpeg's `-stats` output.
"""
import re
import subprocess
import time
from pathlib import Path
from typing import Optional, List, Tuple

from mediabatch.utils import FFMPEG_BIN, LogLevel
from mediabatch.utils import logger, time_util
from mediabatch.utils.constants import H264_PARAMS, H265_PARAMS, MP4_FAMILY_EXTENSIONS, PROGRESS_LOG_INTERVAL
from .models import AudioMode, AudioStrategy, EncodingJob, SubtitleStrategy, VideoMode

_TIME_RE = re.compile(r'time=(\S+)')
_SPEED_RE = re.compile(r'speed=(\S+)')


def _audio_strategy_args(strategy: AudioStrategy) -> List[str]:
    return [
        "-c:a", strategy.codec,
        "-b:a", strategy.bitrate,
        "-ac", str(strategy.channels),
        "-ar", str(strategy.sample_rate_hz),
    ]


def _audio_args(job: EncodingJob) -> List[str]:
    if job.audio_mode is AudioMode.PASSTHROUGH:
        return ["-c:a", "copy"]
    if job.audio_strategy is None:
        raise ValueError(f"audio strategy required for {job.input_path.name}")
    return _audio_strategy_args(job.audio_strategy)


def subtitle_codec_for(strategy: SubtitleStrategy, index: int, output_path: Path) -> str:
    """Convert text streams to mov_text for MP4 outputs; copy bitmap streams and other containers."""
    if output_path.suffix.lower() in MP4_FAMILY_EXTENSIONS and index not in strategy.bitmap_mappings:
        return "mov_text"
    return "copy"


def _subtitle_args(job: EncodingJob) -> List[str]:
    strategy = job.subtitle_strategy
    args = []
    for index in strategy.stream_mappings:
        args += ["-map", f"0:{index}"]
    # Output subtitle streams are numbered in mapping order
    for n, index in enumerate(strategy.stream_mappings):
        args += [f"-c:s:{n}", subtitle_codec_for(strategy, index, job.output_path)]
    return args


def _audio_map(job: EncodingJob) -> str:
    # The audio strategy describes the primary track only
    return "0:a?" if job.audio_mode is AudioMode.PASSTHROUGH else "0:a:0?"


def build_ffmpeg_cmd(job: EncodingJob, ffmpeg: str = FFMPEG_BIN) -> List[str]:
    """Build the ordered ffmpeg argument vector for one job."""
    cmd = [
        ffmpeg,
        "-hide_banner",
        "-loglevel", "error",
        "-stats",
        "-i", str(job.input_path),
        "-map", "0:v:0",
        "-map", _audio_map(job),
    ]

    if job.video_mode is VideoMode.PASSTHROUGH and job.audio_mode is AudioMode.PASSTHROUGH:
        cmd += ["-c:v", "copy", "-c:a", "copy"]
    elif job.video_mode is VideoMode.PASSTHROUGH:
        cmd += ["-c:v", "copy"] + _audio_args(job)
    elif job.video_mode is VideoMode.H264:
        cmd += H264_PARAMS + _audio_args(job)
    elif job.video_mode is VideoMode.H265:
        cmd += H265_PARAMS + _audio_args(job)
    else:
        raise ValueError(f"unsupported video mode: {job.video_mode}")

    if job.subtitle_strategy.include_subtitles:
        cmd += _subtitle_args(job)
    if job.clear_metadata:
        cmd += ["-map_metadata", "-1"]
    cmd += ["-movflags", "+faststart"]
    if job.force_overwrite:
        cmd += ["-y"]
    cmd += [str(job.output_path)]
    return cmd


def _parse_clock(value: str) -> Optional[float]:
    """Convert ffmpeg's HH:MM:SS.xx clock to seconds."""
    parts = value.split(':')
    if len(parts) != 3:
        return None
    try:
        return float(parts[0]) * 3600 + float(parts[1]) * 60 + float(parts[2])
    except ValueError:
        return None


def _log_progress(src: Path, line: str, duration: Optional[float]) -> None:
    # Example: frame= 1234 fps=18 q=-0.0 size=  10240KiB time=00:01:23.45 bitrate=1234.5kbits/s speed=0.75x
    time_match = _TIME_RE.search(line)
    speed_match = _SPEED_RE.search(line)
    if not time_match or not speed_match:
        return

    position = _parse_clock(time_match.group(1))
    speed_str = speed_match.group(1).rstrip('x')
    if position is None:
        return

    if not duration:
        logger.log("transcode.progress", LogLevel.INFO,
                   file=src.name,
                   pct="N/A",
                   eta="N/A",
                   speed=f"{speed_str}x")
        return

    fields = {"file": src.name, "pct": round(min(position / duration, 1.0) * 100, 1)}
    try:
        speed_val = float(speed_str)
    except ValueError:
        speed_val = 0.0
    if speed_val > 0:
        fields["eta"] = time_util.get_eta_single_file(duration, speed_val, position)
    fields["speed"] = f"{speed_str}x"
    logger.log("transcode.progress", LogLevel.INFO, **fields)


def run_encoder(cmd: List[str], src: Path, duration: Optional[float] = None,
                debug: bool = False) -> Tuple[int, str]:
    """
    Run ffmpeg and block until it exits.

    Args:
        cmd: Argument vector from build_ffmpeg_cmd
        src: Source file, used for log fields
        duration: Source duration in seconds, enables percentage/ETA progress
        debug: Log an excerpt of stderr when the encoder fails

    Returns:
        Tuple of (exit_code, stderr)

    Raises:
        OSError: If the encoder binary cannot be launched.
        KeyboardInterrupt: Re-raised after terminating the encoder.
    """
    process = subprocess.Popen(
        cmd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
        text=True,
        errors="replace",
    )

    stderr_output = []
    last_progress_log = time.time()

    try:
        # -stats rewrites one line with carriage returns; text mode splits on them
        for line in process.stderr:
            stderr_output.append(line)
            if "time=" in line and "speed=" in line:
                now = time.time()
                if now - last_progress_log >= PROGRESS_LOG_INTERVAL:
                    _log_progress(src, line, duration)
                    last_progress_log = now
        code = process.wait()
    except KeyboardInterrupt:
        # The partially written output is left as-is
        process.terminate()
        process.wait()
        raise
    finally:
        process.stderr.close()

    stderr_text = ''.join(stderr_output)
    if code != 0:
        logger.log("transcode.failed", LogLevel.ERROR,
                   file=src.name,
                   exit_code=code,
                   error=stderr_text.strip()[-200:] if debug else "see logs")
    return code, stderr_text
