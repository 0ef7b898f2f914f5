"""Exception hierarchy for stagebuild.

Every component raises one of these instead of terminating the process.
The CLI is the only place that turns them into an exit status.
"""

from pathlib import Path
from typing import Optional, Sequence


class StageBuildError(Exception):
    """Base class for all fatal stagebuild errors."""

    pass


class ConfigError(StageBuildError):
    """Raised when the project configuration is invalid."""

    pass


class MirrorError(StageBuildError):
    """Raised when a file cannot be mirrored from source to destination.

    Attributes:
        src: Source path of the failed mirror
        dst: Destination path of the failed mirror
    """

    def __init__(self, message: str, src: Path, dst: Optional[Path] = None):
        super().__init__(message)
        self.src = src
        self.dst = dst


class NonRegularFileError(MirrorError):
    """Raised when the mirror source is a symlink, directory, FIFO or device."""

    def __init__(self, src: Path, dst: Optional[Path] = None):
        super().__init__(f"cannot mirror non-regular file {src}", src, dst)


class ShortCopyError(MirrorError):
    """Raised when fewer (or more) bytes were copied than the source reported.

    Attributes:
        copied: Number of bytes actually written
        expected: Size reported by stat() before the copy started
    """

    def __init__(self, src: Path, dst: Path, copied: int, expected: int):
        super().__init__(
            f"copied wrong size for {src} -> {dst}: copied {copied}; want {expected}",
            src,
            dst,
        )
        self.copied = copied
        self.expected = expected


class ToolchainError(StageBuildError):
    """Raised when an external build command exits with a non-zero status.

    Attributes:
        argv: Command line that was executed
        cwd: Working directory of the command
        returncode: Exit status, or None if the process never started
    """

    def __init__(self, argv: Sequence[str], cwd: Path, returncode: Optional[int], message: Optional[str] = None):
        if message is None:
            message = f"command {list(argv)} in {cwd} exited with status {returncode}"
        super().__init__(message)
        self.argv = list(argv)
        self.cwd = cwd
        self.returncode = returncode


class ToolchainLaunchError(ToolchainError):
    """Raised when an external build command cannot be started at all."""

    def __init__(self, argv: Sequence[str], cwd: Path, reason: str):
        super().__init__(argv, cwd, None, f"failed to start {list(argv)} in {cwd}: {reason}")
        self.reason = reason
