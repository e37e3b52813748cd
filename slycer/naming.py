"""
slycer.naming - Track filename derivation.

A filename is built from an ordered list of optional components, each
produced by its own builder:

    [number] [prefix] [title prefix] chapter title . format

joined with the configured separator. Missing components are skipped rather
than left empty.

Unsafe characters are the path separators ``/`` and ``\\``, the characters
Windows rejects in filenames (``: * ? " < > |``) and every control character
(Unicode category Cc, which includes NUL).
"""

from __future__ import annotations

import unicodedata
from collections.abc import Callable
from dataclasses import dataclass

from slycer.config import RunConfig
from slycer.models import Chapter

UNSAFE_CHARACTERS = frozenset('/\\:*?"<>|')

TITLE_DELIMITERS = (" - ", "(", "[")

TITLE_PREFIX_MAX_LENGTH = 40


def is_unsafe_char(ch: str) -> bool:
    return ch in UNSAFE_CHARACTERS or unicodedata.category(ch) == "Cc"


def sanitize(text: str, separator: str = "_") -> str:
    """Make *text* safe to use inside a filename.

    Unsafe characters become whitespace, whitespace runs collapse to a single
    *separator*, and leading/trailing separators and dots are removed.
    """
    cleaned = "".join(" " if is_unsafe_char(ch) else ch for ch in text)
    joined = separator.join(cleaned.split())
    return joined.strip(separator + ".")


def pad_width(total: int) -> int:
    """Digits needed to number *total* tracks: 9 → 1, 10 → 2, 100 → 3."""
    return len(str(max(total, 1)))


def format_number(number: int, total: int) -> str:
    return str(number).zfill(pad_width(total))


def title_prefix(video_title: str, separator: str = "_") -> str | None:
    """Derive a short lowercase prefix from a video title.

    Takes the text before the earliest of ``" - "``, ``"("`` or ``"["``, so
    "Artist - Song (Live)" gives "artist". Returns None when nothing is left.
    """
    cut = len(video_title)
    for delimiter in TITLE_DELIMITERS:
        pos = video_title.find(delimiter)
        if pos != -1:
            cut = min(cut, pos)

    prefix = sanitize(video_title[:cut].lower(), separator)
    prefix = prefix[:TITLE_PREFIX_MAX_LENGTH].rstrip(separator + " .-")
    return prefix or None


@dataclass(frozen=True)
class NamingContext:
    chapter: Chapter
    video_title: str
    config: RunConfig
    total: int


def number_component(ctx: NamingContext) -> str | None:
    if not ctx.config.numbers:
        return None
    return format_number(ctx.chapter.number, ctx.total)


def prefix_component(ctx: NamingContext) -> str | None:
    if not ctx.config.prefix:
        return None
    return sanitize(ctx.config.prefix, ctx.config.separator) or None


def title_prefix_component(ctx: NamingContext) -> str | None:
    if not ctx.config.prefix_name:
        return None
    return title_prefix(ctx.video_title, ctx.config.separator)


def chapter_title_component(ctx: NamingContext) -> str:
    title = sanitize(ctx.chapter.title or "", ctx.config.separator)
    return title or f"track{ctx.config.separator}{ctx.chapter.number}"


COMPONENT_BUILDERS: tuple[Callable[[NamingContext], str | None], ...] = (
    number_component,
    prefix_component,
    title_prefix_component,
    chapter_title_component,
)


def derive_filename(
    chapter: Chapter,
    video_title: str,
    config: RunConfig,
    total: int,
) -> str:
    """Compute the output filename for one chapter.

    Args:
        chapter: Chapter being written
        video_title: Title of the source video
        config: Run configuration (numbering, prefixes, format, separator)
        total: Number of chapters in the video

    Returns:
        Filename with the audio format as extension, e.g. ``01_artist_Intro.mp3``
    """
    ctx = NamingContext(chapter=chapter, video_title=video_title, config=config, total=total)
    parts = [part for build in COMPONENT_BUILDERS if (part := build(ctx))]
    return f"{config.separator.join(parts)}.{config.audio_format}"
