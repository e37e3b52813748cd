"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from slycer.config import RunConfig
from slycer.process import CommandResult


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., RunConfig]:
    """Return a factory for RunConfigs that write inside tmp_path."""

    def _make(**overrides) -> RunConfig:
        values = {
            "output": tmp_path / "out.mp3",
            "dest": tmp_path / "tracks",
        }
        values.update(overrides)
        return RunConfig(**values)

    return _make


@pytest.fixture
def sample_metadata() -> dict:
    """Return yt-dlp -J output for a video with three chapters."""
    return {
        "id": "abc123",
        "title": "Artist - Album (Full)",
        "duration": 300.0,
        "chapters": [
            {"title": "Intro", "start_time": 0.0, "end_time": 60.0},
            {"title": "Song: One/Two", "start_time": 60.0, "end_time": 180.0},
            {"title": "Outro", "start_time": 180.0, "end_time": 300.0},
        ],
    }


@pytest.fixture
def fake_ffmpeg() -> Callable[..., CommandResult]:
    """A run_command stand-in that copies the ffmpeg input to its output path."""

    def _run(args, on_line=None, env=None) -> CommandResult:
        args = list(args)
        source = Path(args[args.index("-i") + 1])
        Path(args[-1]).write_bytes(source.read_bytes())
        return CommandResult(tuple(args), 0)

    return _run
