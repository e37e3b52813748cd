"""
slycer.process - Synchronous subprocess execution.

Every external program (yt-dlp, FFmpeg, package managers) is run through
run_command, which blocks until the process exits and returns its exit status
and captured output instead of raising on failure.
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from slycer.exceptions import DependencyError
from slycer.logging import logger


@dataclass(frozen=True)
class CommandResult:
    """Exit status and output of a finished process."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def error_tail(self, lines: int = 5) -> str:
        """Last non-empty output lines, preferring stderr."""
        text = self.stderr if self.stderr.strip() else self.stdout
        tail = [line for line in text.splitlines() if line.strip()][-lines:]
        return "\n".join(tail) if tail else f"exit status {self.returncode}"


def run_command(
    args: Sequence[str],
    on_line: Callable[[str], None] | None = None,
    env: Mapping[str, str] | None = None,
) -> CommandResult:
    """Run a command and wait for it to finish.

    Args:
        args: Program and arguments
        on_line: If given, stdout and stderr are merged and each line is passed
            to this callback as it arrives; the merged text ends up in ``stdout``
        env: Optional full environment for the child process

    Returns:
        CommandResult with the exit status and captured output

    Raises:
        DependencyError: If the program cannot be found or started
    """
    argv = tuple(str(a) for a in args)
    logger.debug("Running: %s", " ".join(argv))

    try:
        if on_line is None:
            proc = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                env=env,
            )
            return CommandResult(argv, proc.returncode, proc.stdout or "", proc.stderr or "")
        return _run_streaming(argv, on_line, env)
    except FileNotFoundError as e:
        raise DependencyError(argv[0], "executable not found in PATH") from e
    except OSError as e:
        raise DependencyError(argv[0], f"cannot execute: {e.strerror or e}") from e


def _run_streaming(
    argv: tuple[str, ...],
    on_line: Callable[[str], None],
    env: Mapping[str, str] | None,
) -> CommandResult:
    collected: list[str] = []
    with subprocess.Popen(
        argv,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        bufsize=1,
        env=env,
    ) as proc:
        try:
            assert proc.stdout is not None
            for raw in proc.stdout:
                line = raw.rstrip("\r\n")
                collected.append(line)
                on_line(line)
            returncode = proc.wait()
        except BaseException:
            proc.kill()
            raise
    return CommandResult(argv, returncode, "\n".join(collected), "")
