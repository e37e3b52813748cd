"""
slycer.logging - The "slycer" logger.

Modules log per-item failures, skipped chapters and the external commands
they run. User-facing output goes through the rich console instead; these
records only show on stderr, at WARNING by default and DEBUG with --verbose
(which adds every yt-dlp/ffmpeg command line and state transition).
"""

from __future__ import annotations

import logging

logger = logging.getLogger("slycer")


def configure_logging(verbose: bool = False) -> None:
    """Send slycer log records to stderr.

    Args:
        verbose: Show DEBUG records (commands, yt-dlp output, item states)
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )
