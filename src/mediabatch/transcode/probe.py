"""
ffprobe boundary.

Runs ffprobe once per file and converts its JSON into `ProbeResult`. Nothing
past this module reads raw ffprobe dictionaries. A probe that fails for any
reason yields None and the caller falls back to default strategies.
"""
import json
from pathlib import Path
from typing import Any, Dict, Optional

from mediabatch.utils import FFPROBE_BIN, LogLevel
from mediabatch.utils import logger, system_util
from .models import AudioStreamInfo, ProbeResult, SubtitleStreamInfo


def _to_int(value: Any) -> int:
    # ffprobe reports sample_rate as a string
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _flag(disposition: Dict[str, Any], key: str) -> bool:
    return bool(_to_int(disposition.get(key, 0)))


def parse_probe_output(data: Dict[str, Any]) -> ProbeResult:
    """Build a ProbeResult from ffprobe `-show_streams -show_format` JSON."""
    audio = []
    subtitles = []
    for s in data.get("streams") or []:
        codec_type = s.get("codec_type")
        if codec_type == "audio":
            audio.append(AudioStreamInfo(
                channels=_to_int(s.get("channels")),
                sample_rate_hz=_to_int(s.get("sample_rate")),
                codec=s.get("codec_name", ""),
            ))
        elif codec_type == "subtitle":
            tags = s.get("tags") or {}
            disposition = s.get("disposition") or {}
            subtitles.append(SubtitleStreamInfo(
                index=_to_int(s.get("index")),
                codec=s.get("codec_name", ""),
                language=tags.get("language"),
                title=tags.get("title"),
                forced=_flag(disposition, "forced"),
                default=_flag(disposition, "default"),
                hearing_impaired=_flag(disposition, "hearing_impaired"),
            ))

    duration = None
    fmt = data.get("format") or {}
    if "duration" in fmt:
        try:
            duration = float(fmt["duration"])
        except (ValueError, TypeError):
            pass

    return ProbeResult(audio_streams=tuple(audio), subtitle_streams=tuple(subtitles), duration=duration)


def probe_media(path: Path, ffprobe: str = FFPROBE_BIN) -> Optional[ProbeResult]:
    """Probe a media file for its audio and subtitle streams and duration."""
    cmd = [
        ffprobe, "-v", "error",
        "-show_streams",
        "-show_format",
        "-of", "json",
        str(path),
    ]
    code, out, err = system_util.run_cmd(cmd)
    if code != 0:
        logger.log("probe.unavailable", LogLevel.DEBUG, file=path.name, exit_code=code, error=err.strip()[:200])
        return None
    try:
        data = json.loads(out)
    except json.JSONDecodeError as e:
        logger.log("probe.unavailable", LogLevel.DEBUG, file=path.name, error=str(e))
        return None
    return parse_probe_output(data)
