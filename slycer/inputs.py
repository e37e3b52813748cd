"""
slycer.inputs - Single URL vs batch file classification.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from slycer.exceptions import InputError
from slycer.models import SourceItem


def read_batch_file(path: Path) -> list[str]:
    """Read candidate URLs from a newline-delimited file.

    Blank lines and lines starting with ``#`` are dropped; every other line is
    kept as-is (trimmed). URLs are not validated here.

    Raises:
        InputError: If the file cannot be read or holds no candidate lines
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Failed to read input file {path}: {e}") from e

    urls = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        urls.append(line)

    if not urls:
        raise InputError(f"Input file contains no URLs: {path}")
    return urls


def is_batch_input(raw: str) -> bool:
    return Path(raw).is_file()


def classify_input(raw: str) -> Iterator[SourceItem]:
    """Yield the SourceItems for a raw INPUT argument, in order.

    An existing file is read as a batch of URLs; anything else is treated as
    a single URL.
    """
    if is_batch_input(raw):
        urls = read_batch_file(Path(raw))
    else:
        urls = [raw.strip()]

    for position, url in enumerate(urls, start=1):
        yield SourceItem(url=url, position=position)
