"""Shared test fixtures for mediabatch."""

from pathlib import Path

import pytest

from mediabatch.transcode import (
    AudioStreamInfo,
    BatchOptions,
    MediaFile,
    ProbeResult,
    SubtitleStreamInfo,
)


class FakeRunner:
    """Stands in for run_encoder: records commands and writes the output file on success."""

    def __init__(self, fail_names=(), exit_code=1):
        self.fail_names = set(fail_names)
        self.exit_code = exit_code
        self.calls = []

    def __call__(self, cmd, src, duration=None, debug=False):
        self.calls.append((cmd, src))
        if src.name in self.fail_names:
            return self.exit_code, "Conversion failed!"
        Path(cmd[-1]).write_bytes(b"converted")
        return 0, ""

    @property
    def converted(self):
        return [src.name for _, src in self.calls]


def make_probe(channels=2, sample_rate=48000, subtitle_codecs=()):
    subtitles = tuple(
        SubtitleStreamInfo(index=2 + i, codec=codec, language="eng")
        for i, codec in enumerate(subtitle_codecs)
    )
    return ProbeResult(
        audio_streams=(AudioStreamInfo(channels=channels, sample_rate_hz=sample_rate, codec="ac3"),),
        subtitle_streams=subtitles,
        duration=120.0,
    )


@pytest.fixture
def media_dir(tmp_path: Path) -> Path:
    """A source directory with three non-empty media files."""
    src = tmp_path / "media"
    src.mkdir()
    for name in ("a.mkv", "b.mkv", "c.mkv"):
        (src / name).write_bytes(b"source-bytes")
    return src


@pytest.fixture
def make_media_file():
    def _make(path: Path) -> MediaFile:
        return MediaFile(path=path, source_directory=path.parent, size_bytes=path.stat().st_size)
    return _make


@pytest.fixture
def media_files(media_dir: Path, make_media_file):
    return [make_media_file(p) for p in sorted(media_dir.iterdir())]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def stereo_prober():
    return lambda path: make_probe()


@pytest.fixture
def options() -> BatchOptions:
    return BatchOptions(show_progress=False)
