"""
slycer.pipeline - Batch orchestration.

Processes SourceItems one at a time, in input order. Each item moves through
an explicit state machine:

    pending → downloading → splitting → done
                  └────────────┴──────→ failed

A failed item is logged and the batch moves on to the next one. Missing
dependencies and an unusable destination directory are fatal and propagate.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from contextlib import nullcontext
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from slycer.config import RunConfig
from slycer.download import DownloadProgress, extract_chapters
from slycer.exceptions import DownloadError, SlycerError
from slycer.logging import logger
from slycer.models import (
    ItemOutcome,
    ItemState,
    RunSummary,
    SourceItem,
    TrackResult,
    TrackStatus,
    VideoInfo,
)
from slycer.split import ensure_dest_dir, split_all

Extractor = Callable[..., VideoInfo]
Splitter = Callable[..., list[TrackResult]]

TRANSITIONS: dict[ItemState, frozenset[ItemState]] = {
    ItemState.pending: frozenset({ItemState.downloading, ItemState.failed}),
    ItemState.downloading: frozenset({ItemState.splitting, ItemState.failed}),
    ItemState.splitting: frozenset({ItemState.done, ItemState.failed}),
    ItemState.done: frozenset(),
    ItemState.failed: frozenset(),
}


class ItemRun:
    """Mutable state of one SourceItem while it is being processed."""

    def __init__(self, item: SourceItem) -> None:
        self.item = item
        self.state = ItemState.pending
        self.error: str | None = None

    def advance(self, state: ItemState) -> None:
        if state not in TRANSITIONS[self.state]:
            raise SlycerError(f"Invalid transition {self.state} -> {state} for {self.item.url}")
        logger.debug("%s: %s -> %s", self.item.url, self.state, state)
        self.state = state

    def fail(self, error: str) -> None:
        self.advance(ItemState.failed)
        self.error = error

    def outcome(
        self,
        video_title: str | None = None,
        tracks: list[TrackResult] | None = None,
    ) -> ItemOutcome:
        return ItemOutcome(
            item=self.item,
            state=self.state,
            video_title=video_title,
            tracks=tracks or [],
            error=self.error,
        )


def remove_combined(path: Path, console: Console | None = None) -> bool:
    """Delete the combined audio file. Failure is only a warning."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Failed to remove %s: %s", path, e)
        if console:
            console.print(
                f"[yellow]Warning: could not remove {escape(str(path))}: {escape(str(e))}[/yellow]"
            )
        return False
    return True


def _download_progress(console: Console | None):
    if console is None:
        return nullcontext(None)
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>5.1f}%"),
        TextColumn("[dim]{task.fields[speed]}[/dim]"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def _download(
    item: SourceItem,
    config: RunConfig,
    extractor: Extractor,
    console: Console | None,
) -> VideoInfo:
    with _download_progress(console) as progress:
        on_progress = None
        if progress is not None:
            task_id = progress.add_task("Downloading audio", total=100.0, speed="")

            def on_progress(p: DownloadProgress) -> None:
                progress.update(task_id, completed=p.percent, speed=p.speed or "")

        return extractor(item.url, config, on_progress=on_progress)


def _print_track(console: Console, result: TrackResult) -> None:
    name = escape(result.path.name)
    if result.status == TrackStatus.written:
        console.print(f"[green]  ✓[/green] {name}")
    elif result.status == TrackStatus.skipped:
        console.print(f"[dim]  - Skipped {name} ({escape(result.error or '')})[/dim]")
    else:
        console.print(f"[red]  ✗ {name}: {escape(result.error or '')}[/red]")


def process_item(
    item: SourceItem,
    config: RunConfig,
    console: Console | None = None,
    extractor: Extractor | None = None,
    splitter: Splitter | None = None,
) -> ItemOutcome:
    """Download and split one URL.

    Download failures and an interrupt mark the item failed; they never
    propagate. Tracks cut before an interrupt are still reported. The
    combined file is removed afterwards unless ``config.keep``.

    Args:
        item: URL to process
        config: Run configuration
        console: Optional rich console for output
        extractor: Chapter extractor (default: download.extract_chapters)
        splitter: Track splitter (default: split.split_all)

    Returns:
        ItemOutcome in state done or failed
    """
    extractor = extractor or extract_chapters
    splitter = splitter or split_all

    run = ItemRun(item)
    info: VideoInfo | None = None
    tracks: list[TrackResult] = []

    if console:
        console.print(f"\n[cyan][{item.position}] {escape(item.url)}[/cyan]")

    try:
        run.advance(ItemState.downloading)
        info = _download(item, config, extractor, console)

        run.advance(ItemState.splitting)
        if console:
            console.print(f"[dim]  {escape(info.title)}: {len(info.chapters)} chapter(s)[/dim]")

        # Collected as they finish so an interrupt still reports earlier tracks
        def on_track(result: TrackResult) -> None:
            tracks.append(result)
            if console:
                _print_track(console, result)

        tracks = list(splitter(config.output, info, config, on_track=on_track))

        written = sum(1 for t in tracks if t.status == TrackStatus.written)
        failed = sum(1 for t in tracks if t.status == TrackStatus.failed)
        if failed and not written:
            run.fail(f"all {failed} chapter(s) failed to split")
        else:
            run.advance(ItemState.done)
    except DownloadError as e:
        run.fail(e.message)
    except KeyboardInterrupt:
        run.fail("interrupted")
    finally:
        if not config.keep:
            remove_combined(config.output, console)

    if run.state == ItemState.failed:
        logger.warning("%s failed: %s", item.url, run.error)
        if console:
            console.print(f"[red]  Failed: {escape(item.url)}: {escape(run.error or '')}[/red]")

    return run.outcome(info.title if info else None, tracks)


def run_batch(
    items: Iterable[SourceItem],
    config: RunConfig,
    console: Console | None = None,
    extractor: Extractor | None = None,
    splitter: Splitter | None = None,
) -> RunSummary:
    """Process every item sequentially and summarize the run.

    Raises:
        FilesystemError: If the destination directory cannot be created
        DependencyError: If yt-dlp or FFmpeg disappears mid-run
    """
    ensure_dest_dir(config)

    outcomes = []
    for item in items:
        outcomes.append(
            process_item(item, config, console=console, extractor=extractor, splitter=splitter)
        )
    return RunSummary(outcomes=outcomes)
