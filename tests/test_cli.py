"""Tests for the batchconvert command line."""

import io
from pathlib import Path
from unittest.mock import patch

import pytest

import batchconvert
from conftest import FakeRunner, make_probe
from mediabatch.transcode import AudioMode, SubtitleMode, VideoMode


def _args(*argv):
    return batchconvert.build_parser().parse_args(list(argv))


class TestOptions:
    def test_defaults(self) -> None:
        opts = batchconvert.options_from_args(_args("in"))

        assert opts.video_mode is VideoMode.H264
        assert opts.audio_mode is AudioMode.STRATEGY
        assert opts.subtitle_mode is SubtitleMode.AUTO
        assert opts.force is False
        assert opts.output_path is None

    def test_switches(self) -> None:
        opts = batchconvert.options_from_args(_args(
            "in", "--passthrough-video", "--passthrough-audio", "--subtitles", "none", "--force",
            "--delete-source", "--pause-on-error", "--clear-metadata"))

        assert opts.video_mode is VideoMode.PASSTHROUGH
        assert opts.audio_mode is AudioMode.PASSTHROUGH
        assert opts.subtitle_mode is SubtitleMode.NONE
        assert opts.force and opts.delete_source and opts.pause_on_error and opts.clear_metadata

    def test_h265(self) -> None:
        assert batchconvert.options_from_args(_args("in", "--video-encoder", "h265")).video_mode is VideoMode.H265

    def test_passthrough_video_excludes_encoder(self) -> None:
        with pytest.raises(SystemExit):
            _args("in", "--passthrough-video", "--video-encoder", "h265")


class TestMain:
    def test_no_files_is_success(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()

        assert batchconvert.main([str(empty), "--dry-run"]) == 0

    def test_output_path_requires_single_file(self, media_dir: Path, tmp_path: Path) -> None:
        code = batchconvert.main([str(media_dir), "--dry-run", "--output-path", str(tmp_path / "x.mp4")])

        assert code == 2

    def test_exit_code_reflects_failures(self, media_dir: Path) -> None:
        runner = FakeRunner(fail_names={"b.mkv"})
        with patch("mediabatch.utils.system_util.which_or_die"), \
                patch("mediabatch.transcode.core.run_encoder", runner), \
                patch("mediabatch.transcode.probe.probe_media", lambda path: make_probe()):
            code = batchconvert.main([str(media_dir)])

        assert code == 1
        assert runner.converted == ["a.mkv", "b.mkv", "c.mkv"]

    def test_all_success(self, media_dir: Path, tmp_path: Path) -> None:
        runner = FakeRunner()
        with patch("mediabatch.utils.system_util.which_or_die"), \
                patch("mediabatch.transcode.core.run_encoder", runner), \
                patch("mediabatch.transcode.probe.probe_media", lambda path: make_probe()):
            code = batchconvert.main([str(media_dir), "--output-dir", str(tmp_path / "out")])

        assert code == 0
        assert sorted(p.name for p in (tmp_path / "out").iterdir()) == ["a.mp4", "b.mp4", "c.mp4"]

    def test_interrupt_exit_code(self, media_dir: Path) -> None:
        def runner(cmd, src, duration=None, debug=False):
            raise KeyboardInterrupt

        with patch("mediabatch.utils.system_util.which_or_die"), \
                patch("mediabatch.transcode.core.run_encoder", runner), \
                patch("mediabatch.transcode.probe.probe_media", lambda path: make_probe()):
            assert batchconvert.main([str(media_dir)]) == 130

    def test_log_file(self, media_dir: Path, tmp_path: Path) -> None:
        log_path = tmp_path / "logs" / "run.log"

        batchconvert.main([str(media_dir), "--dry-run", "--log-file", str(log_path)])

        text = log_path.read_text()
        assert "batch.start" in text
        assert "batch.end" in text


class TestConfirm:
    def test_yes_accepts(self, media_files) -> None:
        with patch("sys.stdin", io.StringIO("y\n")):
            assert batchconvert._confirm_job(media_files[0], Path("/out/a.mp4")) is True

    def test_closed_stdin_declines(self, media_files) -> None:
        with patch("sys.stdin", io.StringIO("")):
            assert batchconvert._confirm_job(media_files[0], Path("/out/a.mp4")) is False

    def test_closed_stdin_skips_every_job_and_summarizes(self, media_dir: Path) -> None:
        runner = FakeRunner()
        with patch("mediabatch.utils.system_util.which_or_die"), \
                patch("mediabatch.transcode.core.run_encoder", runner), \
                patch("mediabatch.transcode.probe.probe_media", lambda path: make_probe()), \
                patch("sys.stdin", io.StringIO("")):
            code = batchconvert.main([str(media_dir), "--confirm"])

        assert code == 0
        assert runner.calls == []
