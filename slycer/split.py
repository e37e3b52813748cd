"""
slycer.split - FFmpeg chapter splitting.

Cuts the combined audio file into one track per chapter. Chapters are cut
independently: a failed chapter is recorded and the next one is attempted.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from slycer.config import RunConfig
from slycer.exceptions import FilesystemError, SplitError
from slycer.logging import logger
from slycer.models import Chapter, TrackResult, TrackStatus, VideoInfo
from slycer.naming import derive_filename
from slycer.process import run_command

FFMPEG = "ffmpeg"


def ensure_dest_dir(config: RunConfig) -> Path:
    """Create the destination directory (and parents) if needed.

    Raises:
        FilesystemError: If the directory cannot be created
    """
    track_dir = config.track_dir
    try:
        track_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Failed to create destination directory {track_dir}: {e}") from e
    return track_dir


def build_split_command(source: Path, chapter: Chapter, out_path: Path) -> list[str]:
    """FFmpeg stream-copy command for the chapter's [start, end) range."""
    cmd = [
        FFMPEG,
        "-hide_banner",
        "-loglevel",
        "error",
        "-y",
        "-ss",
        f"{chapter.start:.3f}",
    ]
    if chapter.duration is not None:
        cmd += ["-t", f"{chapter.duration:.3f}"]
    cmd += [
        "-i",
        str(source),
        "-c",
        "copy",
        str(out_path),
    ]
    return cmd


def cut_track(source: Path, chapter: Chapter, out_path: Path) -> Path:
    """Run FFmpeg for one chapter.

    Raises:
        SplitError: If FFmpeg exits non-zero or writes no file
    """
    result = run_command(build_split_command(source, chapter, out_path))
    if not result.ok:
        raise SplitError(f"ffmpeg failed to split '{chapter.title}': {result.error_tail(1)}")
    if not out_path.exists():
        raise SplitError(f"ffmpeg did not create {out_path}")
    return out_path


def split_chapter(
    source: Path,
    chapter: Chapter,
    out_path: Path,
    config: RunConfig,
) -> TrackResult:
    """Cut one chapter, or skip it when it is empty or too short.

    The whole-file fallback chapter is never skipped.
    """
    duration = chapter.duration
    long_enough = duration is None or (duration > 0 and duration >= config.min_track_seconds)
    if not chapter.whole_file and not long_enough:
        logger.warning(
            "Skipping '%s' (%.2fs is shorter than %.2fs)",
            chapter.title,
            duration,
            config.min_track_seconds,
        )
        return TrackResult(
            chapter=chapter,
            path=out_path,
            status=TrackStatus.skipped,
            error="shorter than minimum track length",
        )

    try:
        cut_track(source, chapter, out_path)
    except SplitError as e:
        logger.warning("%s", e)
        return TrackResult(chapter=chapter, path=out_path, status=TrackStatus.failed, error=str(e))

    return TrackResult(chapter=chapter, path=out_path, status=TrackStatus.written)


def split_all(
    source: Path,
    info: VideoInfo,
    config: RunConfig,
    on_track: Callable[[TrackResult], None] | None = None,
) -> list[TrackResult]:
    """Cut every chapter of *info* out of *source*.

    Args:
        source: Combined audio file
        info: Video title and chapters
        config: Run configuration
        on_track: Optional callback invoked after each chapter

    Returns:
        One TrackResult per chapter, in chapter order
    """
    track_dir = ensure_dest_dir(config)
    total = len(info.chapters)

    results = []
    for chapter in info.chapters:
        filename = derive_filename(chapter, info.title, config, total)
        result = split_chapter(source, chapter, track_dir / filename, config)
        results.append(result)
        if on_track is not None:
            on_track(result)
    return results
