"""
slycer.download - yt-dlp audio download and chapter metadata.

For one URL: read the video's JSON metadata (title, duration, chapters) and
download its audio track into the combined output file.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from slycer.config import RunConfig
from slycer.exceptions import DownloadError
from slycer.logging import logger
from slycer.models import Chapter, VideoInfo
from slycer.process import run_command

YTDLP = "yt-dlp"

# [download]  81.6% of   59.10MiB at    3.47MiB/s ETA 00:01
_PERCENT_RE = re.compile(r"^\[download\]\s+(?P<percent>\d+(?:\.\d+)?)%")
_SPEED_RE = re.compile(r"\bat\s+(?P<speed>\S+)")
_ETA_RE = re.compile(r"\bETA\s+(?P<eta>\S+)")


@dataclass(frozen=True)
class DownloadProgress:
    """One parsed yt-dlp progress line."""

    percent: float
    speed: str | None = None
    eta: str | None = None


def parse_progress(line: str) -> DownloadProgress | None:
    """Parse a ``--newline`` progress line, or return None for other output."""
    match = _PERCENT_RE.match(line.strip())
    if not match:
        return None

    percent = min(float(match.group("percent")), 100.0)

    speed = None
    speed_match = _SPEED_RE.search(line)
    if speed_match and not speed_match.group("speed").startswith("Unknown"):
        speed = speed_match.group("speed")

    eta = None
    eta_match = _ETA_RE.search(line)
    if eta_match and eta_match.group("eta") != "Unknown":
        eta = eta_match.group("eta")

    return DownloadProgress(percent=percent, speed=speed, eta=eta)


def build_download_command(url: str, config: RunConfig) -> list[str]:
    return [
        YTDLP,
        "--extract-audio",
        "--audio-format",
        config.audio_format,
        "--no-playlist",
        "--newline",
        "--force-overwrites",
        "--output",
        str(config.output),
        url,
    ]


def build_metadata_command(url: str) -> list[str]:
    return [YTDLP, "-J", "--no-playlist", url]


def fetch_metadata(url: str) -> dict[str, Any]:
    """Fetch the video's JSON metadata with ``yt-dlp -J``.

    Raises:
        DownloadError: If yt-dlp fails or prints invalid JSON
    """
    result = run_command(build_metadata_command(url))
    if not result.ok:
        raise DownloadError(url, f"metadata fetch failed: {result.error_tail(1)}")

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise DownloadError(url, f"invalid JSON from yt-dlp: {e}") from e

    if not isinstance(data, dict):
        raise DownloadError(url, "unexpected metadata from yt-dlp")
    return data


def parse_video_info(metadata: dict[str, Any], url: str = "") -> VideoInfo:
    """Build VideoInfo from yt-dlp metadata.

    A video without chapters becomes a single chapter covering the whole
    file, titled with the video title. Chapter ranges are taken as reported,
    except that a negative start is clamped to zero.

    Raises:
        DownloadError: If a chapter entry has missing or non-numeric times
    """
    title = metadata.get("title") or metadata.get("id") or "audio"

    duration = metadata.get("duration")
    try:
        duration = float(duration) if duration is not None else None
    except (TypeError, ValueError):
        duration = None
    if duration is not None and duration <= 0:
        duration = None

    raw_chapters = metadata.get("chapters") or []
    chapters: list[Chapter] = []
    try:
        for index, raw in enumerate(raw_chapters):
            chapters.append(
                Chapter(
                    index=index,
                    title=raw.get("title") or None,
                    start=max(0.0, float(raw["start_time"])),
                    end=float(raw["end_time"]),
                )
            )
    except (KeyError, TypeError, ValueError, AttributeError, ValidationError) as e:
        raise DownloadError(url, f"failed to parse chapters: {e}") from e

    if not chapters:
        logger.info("%s has no chapters, using the whole file", url or title)
        chapters = [Chapter(index=0, title=title, start=0.0, end=duration, whole_file=True)]

    return VideoInfo(title=title, duration=duration, chapters=chapters)


def download_audio(
    url: str,
    config: RunConfig,
    on_progress: Callable[[DownloadProgress], None] | None = None,
) -> Path:
    """Download the audio of *url* into ``config.output``.

    Raises:
        DownloadError: If yt-dlp fails or leaves no output file
    """

    def handle_line(line: str) -> None:
        progress = parse_progress(line)
        if progress is None:
            logger.debug("yt-dlp: %s", line)
        elif on_progress is not None:
            on_progress(progress)

    result = run_command(build_download_command(url, config), on_line=handle_line)
    if not result.ok:
        raise DownloadError(url, f"download failed: {result.error_tail(1)}")

    if not config.output.exists():
        raise DownloadError(url, f"yt-dlp finished but {config.output} was not created")
    return config.output


def extract_chapters(
    url: str,
    config: RunConfig,
    on_progress: Callable[[DownloadProgress], None] | None = None,
) -> VideoInfo:
    """Fetch chapter metadata and download the combined audio for one URL.

    Metadata is read first so an unresolvable URL fails before anything is
    written to disk.
    """
    info = parse_video_info(fetch_metadata(url), url)
    download_audio(url, config, on_progress=on_progress)
    return info
