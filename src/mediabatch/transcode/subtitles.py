"""
Subtitle classification and stream selection.

Subtitle codecs fall into four groups. Text-based and closed-caption streams
can be converted into any output container; bitmap streams (PGS, VobSub,
DVB) cannot be turned into text and make MP4 muxing fail, so they are only
carried when the operator explicitly asks for every stream. Codecs that are
not in any table are treated like bitmaps.
"""
from typing import Iterable, List

from .models import SubtitleKind, SubtitleMode, SubtitleStrategy, SubtitleStreamInfo

TEXT_SUBTITLE_CODECS = frozenset({
    "subrip", "srt", "ass", "ssa", "webvtt", "mov_text", "tx3g", "text",
    "microdvd", "subviewer", "subviewer1", "sami", "realtext", "jacosub",
    "mpl2", "pjs", "stl", "vplayer", "ttml",
})

CLOSED_CAPTION_CODECS = frozenset({"eia_608", "eia_708", "cc_dec"})

BITMAP_SUBTITLE_CODECS = frozenset({
    "hdmv_pgs_subtitle", "pgssub", "dvd_subtitle", "dvdsub", "vobsub",
    "dvb_subtitle", "dvbsub", "dvb_teletext", "xsub",
})


def classify_subtitle_codec(codec: str | None) -> SubtitleKind:
    """Return the subtitle group for an ffprobe codec name."""
    name = (codec or "").strip().lower()
    if name in TEXT_SUBTITLE_CODECS:
        return SubtitleKind.TEXT_BASED
    if name in CLOSED_CAPTION_CODECS:
        return SubtitleKind.CLOSED_CAPTION
    if name in BITMAP_SUBTITLE_CODECS:
        return SubtitleKind.BITMAP
    return SubtitleKind.UNKNOWN


def is_text_compatible(kind: SubtitleKind) -> bool:
    return kind in (SubtitleKind.TEXT_BASED, SubtitleKind.CLOSED_CAPTION)


def resolve_subtitle_strategy(streams: Iterable[SubtitleStreamInfo], mode: SubtitleMode) -> SubtitleStrategy:
    """
    Select which subtitle streams to carry into the output.

    Args:
        streams: Probed subtitle streams in source order.
        mode: AUTO keeps text-compatible streams only, ALL keeps everything,
            NONE drops subtitles entirely.

    Returns:
        SubtitleStrategy with the absolute stream indices to map, in source
        order, and a warning when bitmap streams were skipped or included.
    """
    if mode is SubtitleMode.NONE:
        return SubtitleStrategy(include_subtitles=False, mode=mode)

    streams = list(streams)
    text_streams: List[SubtitleStreamInfo] = []
    bitmap_streams: List[SubtitleStreamInfo] = []
    for stream in streams:
        if is_text_compatible(classify_subtitle_codec(stream.codec)):
            text_streams.append(stream)
        else:
            bitmap_streams.append(stream)

    if mode is SubtitleMode.ALL:
        if not streams:
            return SubtitleStrategy(include_subtitles=False, mode=mode)
        warning = None
        if bitmap_streams:
            warning = (f"{len(bitmap_streams)} bitmap or unrecognized subtitle stream(s) included; "
                       "they may be incompatible with the output container and cause the encoder to fail")
        return SubtitleStrategy(
            include_subtitles=True,
            stream_mappings=tuple(s.index for s in streams),
            bitmap_mappings=tuple(s.index for s in bitmap_streams),
            warning=warning,
            mode=mode,
        )

    warning = None
    if bitmap_streams:
        warning = f"skipped {len(bitmap_streams)} bitmap subtitle stream(s)"
        if text_streams:
            warning += f"; keeping {len(text_streams)} text subtitle stream(s)"

    if not text_streams:
        return SubtitleStrategy(include_subtitles=False, warning=warning, mode=mode)

    return SubtitleStrategy(
        include_subtitles=True,
        stream_mappings=tuple(s.index for s in text_streams),
        warning=warning,
        mode=mode,
    )
