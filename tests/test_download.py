"""Tests for slycer.download module."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from slycer.download import (
    build_download_command,
    download_audio,
    extract_chapters,
    fetch_metadata,
    parse_progress,
    parse_video_info,
)
from slycer.exceptions import DownloadError
from slycer.process import CommandResult

URL = "https://www.youtube.com/watch?v=abc123"


class TestParseProgress:
    def test_progress_line(self) -> None:
        progress = parse_progress("[download]  81.6% of   59.10MiB at    3.47MiB/s ETA 00:01")
        assert progress is not None
        assert progress.percent == pytest.approx(81.6)
        assert progress.speed == "3.47MiB/s"
        assert progress.eta == "00:01"

    def test_finished_line(self) -> None:
        progress = parse_progress("[download] 100% of    3.00MiB in 00:00:01 at 2.50MiB/s")
        assert progress is not None
        assert progress.percent == 100.0
        assert progress.speed == "2.50MiB/s"
        assert progress.eta is None

    def test_unknown_speed_and_eta(self) -> None:
        progress = parse_progress("[download]   0.0% of ~  10.00MiB at  Unknown B/s ETA Unknown")
        assert progress is not None
        assert progress.percent == 0.0
        assert progress.speed is None
        assert progress.eta is None

    @pytest.mark.parametrize(
        "line",
        [
            "[youtube] abc123: Downloading webpage",
            "[ExtractAudio] Destination: out.mp3",
            "[download] Destination: out.webm",
            "",
        ],
    )
    def test_other_lines_ignored(self, line: str) -> None:
        assert parse_progress(line) is None


class TestParseVideoInfo:
    def test_chapters_in_order(self, sample_metadata: dict) -> None:
        info = parse_video_info(sample_metadata, URL)
        assert info.title == "Artist - Album (Full)"
        assert info.duration == 300.0
        assert [c.index for c in info.chapters] == [0, 1, 2]
        assert [c.title for c in info.chapters] == ["Intro", "Song: One/Two", "Outro"]
        assert info.chapters[1].start == 60.0
        assert info.chapters[1].end == 180.0

    @pytest.mark.parametrize("chapters", [None, []])
    def test_no_chapters_gives_whole_file(self, sample_metadata: dict, chapters) -> None:
        sample_metadata["chapters"] = chapters
        info = parse_video_info(sample_metadata, URL)
        assert len(info.chapters) == 1
        only = info.chapters[0]
        assert only.title == "Artist - Album (Full)"
        assert only.start == 0.0
        assert only.end == 300.0
        assert only.whole_file

    def test_missing_chapters_key(self, sample_metadata: dict) -> None:
        del sample_metadata["chapters"]
        info = parse_video_info(sample_metadata, URL)
        assert len(info.chapters) == 1

    def test_no_chapters_and_no_duration(self) -> None:
        info = parse_video_info({"title": "Live Stream"}, URL)
        assert info.chapters[0].end is None
        assert info.chapters[0].duration is None

    def test_untitled_chapter(self, sample_metadata: dict) -> None:
        sample_metadata["chapters"][0]["title"] = ""
        info = parse_video_info(sample_metadata, URL)
        assert info.chapters[0].title is None

    def test_title_falls_back_to_id(self) -> None:
        info = parse_video_info({"id": "abc123"}, URL)
        assert info.title == "abc123"

    def test_zero_length_chapter_is_kept(self, sample_metadata: dict) -> None:
        sample_metadata["chapters"][1]["start_time"] = 60.0
        sample_metadata["chapters"][1]["end_time"] = 60.0
        info = parse_video_info(sample_metadata, URL)
        assert len(info.chapters) == 3
        assert info.chapters[1].duration == 0.0

    def test_inverted_chapter_is_kept(self, sample_metadata: dict) -> None:
        sample_metadata["chapters"][0]["end_time"] = 0.0
        sample_metadata["chapters"][0]["start_time"] = 10.0
        info = parse_video_info(sample_metadata, URL)
        assert info.chapters[0].duration == -10.0
        assert not any(c.whole_file for c in info.chapters)

    def test_negative_start_clamped(self, sample_metadata: dict) -> None:
        sample_metadata["chapters"][0]["start_time"] = -0.5
        info = parse_video_info(sample_metadata, URL)
        assert info.chapters[0].start == 0.0
        assert info.chapters[0].end == 60.0

    def test_chapter_without_times_raises(self, sample_metadata: dict) -> None:
        del sample_metadata["chapters"][2]["start_time"]
        with pytest.raises(DownloadError, match="chapters"):
            parse_video_info(sample_metadata, URL)


class TestFetchMetadata:
    def test_parses_json(self, sample_metadata: dict) -> None:
        result = CommandResult(("yt-dlp",), 0, json.dumps(sample_metadata))
        with patch("slycer.download.run_command", return_value=result) as run:
            data = fetch_metadata(URL)
        assert data["title"] == "Artist - Album (Full)"
        assert run.call_args.args[0] == ["yt-dlp", "-J", "--no-playlist", URL]

    def test_nonzero_exit_raises(self) -> None:
        result = CommandResult(("yt-dlp",), 1, "", "ERROR: Unsupported URL: nope")
        with patch("slycer.download.run_command", return_value=result):
            with pytest.raises(DownloadError, match="Unsupported URL"):
                fetch_metadata("nope")

    def test_invalid_json_raises(self) -> None:
        result = CommandResult(("yt-dlp",), 0, "not json")
        with patch("slycer.download.run_command", return_value=result):
            with pytest.raises(DownloadError, match="invalid JSON"):
                fetch_metadata(URL)


class TestDownloadAudio:
    def test_command(self, make_config) -> None:
        config = make_config(audio_format="opus")
        cmd = build_download_command(URL, config)
        assert cmd[0] == "yt-dlp"
        assert cmd[-1] == URL
        assert cmd[cmd.index("--audio-format") + 1] == "opus"
        assert cmd[cmd.index("--output") + 1] == str(config.output)
        assert "--force-overwrites" in cmd
        assert "--newline" in cmd

    def test_reports_progress(self, make_config) -> None:
        config = make_config()

        def fake_run(args, on_line=None, env=None):
            on_line("[youtube] abc123: Downloading webpage")
            on_line("[download]  50.0% of 1.00MiB at 1.00MiB/s ETA 00:01")
            on_line("[download] 100% of 1.00MiB in 00:00:01 at 1.00MiB/s")
            Path(config.output).write_bytes(b"audio")
            return CommandResult(tuple(args), 0)

        seen = []
        with patch("slycer.download.run_command", side_effect=fake_run):
            path = download_audio(URL, config, on_progress=seen.append)

        assert path == config.output
        assert [p.percent for p in seen] == [50.0, 100.0]

    def test_failure_raises(self, make_config) -> None:
        result = CommandResult(("yt-dlp",), 1, "ERROR: Video unavailable")
        with patch("slycer.download.run_command", return_value=result):
            with pytest.raises(DownloadError, match="Video unavailable"):
                download_audio(URL, make_config())

    def test_missing_output_raises(self, make_config) -> None:
        result = CommandResult(("yt-dlp",), 0)
        with patch("slycer.download.run_command", return_value=result):
            with pytest.raises(DownloadError, match="not created"):
                download_audio(URL, make_config())


class TestExtractChapters:
    def test_metadata_failure_skips_download(self, make_config) -> None:
        with (
            patch("slycer.download.fetch_metadata", side_effect=DownloadError(URL, "boom")),
            patch("slycer.download.download_audio") as download,
        ):
            with pytest.raises(DownloadError):
                extract_chapters(URL, make_config())
        download.assert_not_called()

    def test_returns_info_after_download(self, make_config, sample_metadata: dict) -> None:
        config = make_config()
        with (
            patch("slycer.download.fetch_metadata", return_value=sample_metadata),
            patch("slycer.download.download_audio", return_value=config.output) as download,
        ):
            info = extract_chapters(URL, config)
        assert len(info.chapters) == 3
        download.assert_called_once()
