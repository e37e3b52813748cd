"""
slycer.models - Data passed between pipeline stages.

SourceItem → VideoInfo/Chapter → TrackResult/OutputTrack → ItemOutcome → RunSummary.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class SourceItem(FrozenModel):
    """One URL to process, with its 1-based position in the input."""

    url: str
    position: int = Field(default=1, ge=1)


class Chapter(FrozenModel):
    """A titled time range of the combined audio, in seconds.

    Ranges come straight from yt-dlp and are not checked for order, so a
    chapter can be empty or inverted; its ``duration`` is then zero or
    negative and the splitter skips it. ``end`` is None only for the
    whole-file fallback of a video whose duration yt-dlp did not report.
    """

    index: int = Field(ge=0)
    title: str | None = None
    start: float = Field(ge=0.0)
    end: float | None = None
    whole_file: bool = False

    @property
    def number(self) -> int:
        return self.index + 1

    @property
    def duration(self) -> float | None:
        if self.end is None:
            return None
        return self.end - self.start


class VideoInfo(FrozenModel):
    """Title, duration and chapters reported by yt-dlp for one URL."""

    title: str
    duration: float | None = None
    chapters: list[Chapter]


class OutputTrack(FrozenModel):
    """A written track file and the chapter it came from."""

    path: Path
    chapter: Chapter


class TrackStatus(StrEnum):
    written = "written"
    skipped = "skipped"
    failed = "failed"


class TrackResult(FrozenModel):
    """Outcome of cutting one chapter."""

    chapter: Chapter
    path: Path
    status: TrackStatus
    error: str | None = None

    @property
    def track(self) -> OutputTrack | None:
        if self.status != TrackStatus.written:
            return None
        return OutputTrack(path=self.path, chapter=self.chapter)


class ItemState(StrEnum):
    pending = "pending"
    downloading = "downloading"
    splitting = "splitting"
    done = "done"
    failed = "failed"


class ItemOutcome(FrozenModel):
    """Terminal result for one SourceItem."""

    item: SourceItem
    state: ItemState
    video_title: str | None = None
    tracks: list[TrackResult] = Field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == ItemState.done

    @property
    def written(self) -> list[OutputTrack]:
        return [r.track for r in self.tracks if r.track is not None]

    @property
    def failed_tracks(self) -> list[TrackResult]:
        return [r for r in self.tracks if r.status == TrackStatus.failed]


class RunSummary(FrozenModel):
    """End-of-run counts over all processed items."""

    outcomes: list[ItemOutcome] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def tracks_written(self) -> int:
        return sum(len(o.written) for o in self.outcomes)

    @property
    def failed_tracks(self) -> int:
        return sum(len(o.failed_tracks) for o in self.outcomes)
