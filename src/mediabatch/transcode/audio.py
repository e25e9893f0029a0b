"""
Audio strategy selection.

Maps the primary audio stream of a source file to the codec, bitrate,
channel count and sample rate used for the converted output. Multichannel
sources keep their surround layout as E-AC-3; mono and stereo sources become
stereo AAC with a bitrate scaled to the source sample rate.
"""
from typing import Optional

from mediabatch.utils.constants import (
    FALLBACK_AUDIO_BITRATE,
    HIGH_RES_SAMPLE_RATE,
    MAX_SURROUND_CHANNELS,
    MIN_SAMPLE_RATE,
    STEREO_BITRATE_HIGH_RES,
    STEREO_BITRATE_LOW,
    STEREO_BITRATE_STANDARD,
    SURROUND_AUDIO_BITRATE,
)
from .models import AudioStrategy, AudioStreamInfo

FALLBACK_AUDIO_STRATEGY = AudioStrategy(
    codec="aac",
    bitrate=FALLBACK_AUDIO_BITRATE,
    channels=2,
    sample_rate_hz=MIN_SAMPLE_RATE,
    reasoning="no audio stream information available; using stereo AAC defaults",
)


def resolve_audio_strategy(info: Optional[AudioStreamInfo]) -> AudioStrategy:
    """Derive the output audio parameters from the probed source stream."""
    if info is None:
        return FALLBACK_AUDIO_STRATEGY

    source_rate = info.sample_rate_hz or 0
    sample_rate = max(source_rate, MIN_SAMPLE_RATE)
    source_desc = f"{info.channels}ch {info.codec or 'unknown'} @ {source_rate} Hz"

    if info.channels > 2:
        channels = min(info.channels, MAX_SURROUND_CHANNELS)
        return AudioStrategy(
            codec="eac3",
            bitrate=SURROUND_AUDIO_BITRATE,
            channels=channels,
            sample_rate_hz=sample_rate,
            reasoning=f"multichannel source ({source_desc}); E-AC-3 keeps {channels} channels",
        )

    if source_rate >= HIGH_RES_SAMPLE_RATE:
        bitrate = STEREO_BITRATE_HIGH_RES
        tier = "high-resolution"
    elif source_rate >= MIN_SAMPLE_RATE:
        bitrate = STEREO_BITRATE_STANDARD
        tier = "standard"
    else:
        bitrate = STEREO_BITRATE_LOW
        tier = "low sample rate, resampled to 48 kHz"

    return AudioStrategy(
        codec="aac",
        bitrate=bitrate,
        channels=2,
        sample_rate_hz=sample_rate,
        reasoning=f"stereo or mono source ({source_desc}); AAC {bitrate} for {tier} audio",
    )
