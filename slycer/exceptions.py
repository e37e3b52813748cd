"""
slycer.exceptions - Custom exception classes.

All Slycer-specific exceptions inherit from SlycerError.
"""


class SlycerError(Exception):
    """Base exception for all Slycer errors."""

    pass


class ConfigError(SlycerError):
    """Configuration loading or validation error."""

    pass


class InputError(SlycerError):
    """Input argument or batch file could not be used."""

    pass


class DownloadError(SlycerError):
    """yt-dlp download or metadata error for a single URL."""

    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        super().__init__(f"{url}: {message}")


class SplitError(SlycerError):
    """FFmpeg failed to cut a chapter."""

    pass


class FilesystemError(SlycerError):
    """Destination directory could not be created."""

    pass


class DependencyError(SlycerError):
    """Required dependency missing or could not be installed."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
