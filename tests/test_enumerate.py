"""Unit tests for media file discovery."""

from pathlib import Path

import pytest

from mediabatch.transcode import enumerate_media_files, parse_extensions


@pytest.fixture
def library(tmp_path: Path) -> Path:
    root = tmp_path / "library"
    (root / "Season 1").mkdir(parents=True)
    (root / "Extras").mkdir()
    (root / "Season 1" / "Featurettes").mkdir()
    (root / "movie.mkv").write_bytes(b"x")
    (root / "notes.txt").write_bytes(b"x")
    (root / "Trailer.MP4").write_bytes(b"x")
    (root / "Season 1" / "e01.mkv").write_bytes(b"x")
    (root / "Season 1" / "Featurettes" / "bts.mkv").write_bytes(b"x")
    (root / "Extras" / "deleted.mkv").write_bytes(b"x")
    return root


def _names(files) -> list[str]:
    return [f.path.name for f in files]


class TestParseExtensions:
    def test_string_and_list_forms(self) -> None:
        assert parse_extensions("mkv, .MP4,") == {".mkv", ".mp4"}
        assert parse_extensions(["avi", ".mov"]) == {".avi", ".mov"}


class TestDirectories:
    def test_top_level_only_without_recurse(self, library: Path) -> None:
        files = enumerate_media_files([library], extensions={".mkv", ".mp4"})

        assert _names(files) == ["Trailer.MP4", "movie.mkv"]
        assert all(f.source_directory == library for f in files)

    def test_recursive(self, library: Path) -> None:
        files = enumerate_media_files([library], extensions={".mkv"}, recurse=True)

        assert sorted(_names(files)) == ["bts.mkv", "deleted.mkv", "e01.mkv", "movie.mkv"]

    def test_excluded_fragments_when_recursing(self, library: Path) -> None:
        files = enumerate_media_files([library], extensions={".mkv"}, recurse=True, exclude_dirs=["Extra", "Featur"])

        assert sorted(_names(files)) == ["e01.mkv", "movie.mkv"]

    def test_extension_filter(self, library: Path) -> None:
        assert _names(enumerate_media_files([library], extensions={".txt"})) == ["notes.txt"]

    def test_records_size(self, library: Path) -> None:
        (library / "movie.mkv").write_bytes(b"12345")
        files = enumerate_media_files([library], extensions={".mkv"})

        assert files[0].size_bytes == 5


class TestExplicitFiles:
    def test_file_bypasses_extension_filter(self, library: Path) -> None:
        files = enumerate_media_files([library / "notes.txt"], extensions={".mkv"})

        assert _names(files) == ["notes.txt"]
        assert files[0].source_directory == library

    def test_input_order_is_kept(self, library: Path) -> None:
        files = enumerate_media_files([library / "movie.mkv", library / "Season 1" / "e01.mkv"])
        reverse = enumerate_media_files([library / "Season 1" / "e01.mkv", library / "movie.mkv"])

        assert _names(files) == ["movie.mkv", "e01.mkv"]
        assert _names(reverse) == ["e01.mkv", "movie.mkv"]

    def test_duplicates_listed_once(self, library: Path) -> None:
        files = enumerate_media_files([library / "movie.mkv", library], extensions={".mkv"})

        assert _names(files) == ["movie.mkv"]


class TestMissingPaths:
    def test_missing_path_is_skipped(self, library: Path, tmp_path: Path) -> None:
        files = enumerate_media_files([tmp_path / "nope", library / "movie.mkv"])

        assert _names(files) == ["movie.mkv"]

    def test_all_missing_yields_empty(self, tmp_path: Path) -> None:
        assert enumerate_media_files([tmp_path / "nope"]) == []
