"""Incremental file and directory mirroring.

A mirror is a one-directional conditional copy. A destination is considered
up to date when it is a regular file with the same size, the same
executable-bit state and the same modification time (whole seconds) as the
source. Nothing is hashed: the copy procedure stamps the destination with
the source's mtime, which is what lets the next run recognize it.
"""

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from .errors import MirrorError, NonRegularFileError, ShortCopyError
from .output import log

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024
_DIR_MODE = 0o755


@dataclass(frozen=True)
class FileEntry:
    """Metadata snapshot of a single path, the unit of mirror comparison.

    Attributes:
        path: Path the snapshot was taken from
        size: Size in bytes
        mtime_ns: Modification time in nanoseconds
        mode: Full st_mode (type and permission bits)
    """

    path: Path
    size: int
    mtime_ns: int
    mode: int

    @classmethod
    def from_stat(cls, path: Path, st: os.stat_result) -> "FileEntry":
        return cls(path=path, size=st.st_size, mtime_ns=st.st_mtime_ns, mode=st.st_mode)

    @property
    def is_regular(self) -> bool:
        return stat.S_ISREG(self.mode)

    @property
    def is_executable(self) -> bool:
        return (self.mode & 0o111) != 0

    @property
    def permissions(self) -> int:
        return stat.S_IMODE(self.mode)

    @property
    def mtime_seconds(self) -> int:
        return self.mtime_ns // 1_000_000_000

    def matches(self, other: "FileEntry") -> bool:
        """Return True if ``other`` looks like an unchanged copy of this entry."""
        return (
            other.is_regular
            and self.is_executable == other.is_executable
            and self.size == other.size
            and self.mtime_seconds == other.mtime_seconds
        )


@dataclass
class MirrorStats:
    """Counters describing what a mirror operation actually did."""

    copied: int = 0
    skipped: int = 0
    bytes_copied: int = 0

    @property
    def total(self) -> int:
        return self.copied + self.skipped

    def merge(self, other: "MirrorStats") -> "MirrorStats":
        self.copied += other.copied
        self.skipped += other.skipped
        self.bytes_copied += other.bytes_copied
        return self


def _copy_stream(src_file: BinaryIO, dst_file: BinaryIO) -> int:
    """Copy all bytes from src_file to dst_file and return the count written."""
    copied = 0
    while True:
        chunk = src_file.read(_CHUNK_SIZE)
        if not chunk:
            return copied
        dst_file.write(chunk)
        copied += len(chunk)


def _stat_destination(src: Path, dst: Path) -> Optional[FileEntry]:
    try:
        return FileEntry.from_stat(dst, os.stat(dst))
    except (FileNotFoundError, NotADirectoryError):
        return None
    except OSError as e:
        raise MirrorError(f"cannot stat destination {dst}: {e}", src, dst) from e


def mirror_file(src: Path, dst: Path, stats: Optional[MirrorStats] = None) -> bool:
    """Make dst an up-to-date regular-file copy of src.

    Args:
        src: Source file; must be a regular file (symlinks are rejected)
        dst: Destination path; parent directories are created as needed
        stats: Optional counters updated with the outcome

    Returns:
        True if bytes were copied, False if dst was already up to date

    Raises:
        NonRegularFileError: If src is not a regular file. Nothing is written.
        ShortCopyError: If the number of bytes copied differs from src's size
        MirrorError: On any other I/O failure
    """
    src = Path(src)
    dst = Path(dst)

    try:
        source = FileEntry.from_stat(src, os.lstat(src))
    except OSError as e:
        raise MirrorError(f"cannot stat source {src}: {e}", src, dst) from e

    if not source.is_regular:
        raise NonRegularFileError(src, dst)

    existing = _stat_destination(src, dst)
    if existing is not None and source.matches(existing):
        logger.debug(f"Unchanged, skipping {src} -> {dst}")
        if stats is not None:
            stats.skipped += 1
        return False

    try:
        dst.parent.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
    except OSError as e:
        raise MirrorError(f"cannot create directory {dst.parent}: {e}", src, dst) from e

    try:
        with open(src, "rb") as src_file:
            # Errors deferred until close() propagate from the with-block.
            with open(dst, "wb") as dst_file:
                copied = _copy_stream(src_file, dst_file)
                if copied != source.size:
                    raise ShortCopyError(src, dst, copied, source.size)
        os.chmod(dst, source.permissions)
        os.utime(dst, ns=(source.mtime_ns, source.mtime_ns))
    except MirrorError:
        raise
    except OSError as e:
        raise MirrorError(f"failed to mirror {src} -> {dst}: {e}", src, dst) from e

    logger.debug(f"Copied {src} -> {dst} ({copied} bytes)")
    if stats is not None:
        stats.copied += 1
        stats.bytes_copied += copied
    return True


def mirror_tree(src: Path, dst: Path) -> MirrorStats:
    """Mirror every file under src into the same relative path under dst.

    Directories are not mirrored as objects, so empty source directories do
    not appear in dst. Symbolic links found during the walk are handed to
    mirror_file, which rejects them. The first error aborts the walk.

    Args:
        src: Source directory
        dst: Destination directory

    Returns:
        MirrorStats for the whole tree

    Raises:
        MirrorError: If src is not a directory or any file fails to mirror
    """
    src = Path(src)
    dst = Path(dst)
    log(f"Copying '{src}' -> '{dst}'")

    if not src.is_dir():
        raise MirrorError(f"source directory {src} does not exist", src, dst)

    stats = MirrorStats()

    def _raise(error: OSError) -> None:
        raise MirrorError(f"cannot walk {error.filename}: {error}", src, dst) from error

    for root, dirs, files in os.walk(src, onerror=_raise):
        root_path = Path(root)
        rel_root = root_path.relative_to(src)
        # os.walk lists directory symlinks under dirs without descending.
        for name in [d for d in dirs if (root_path / d).is_symlink()] + files:
            mirror_file(root_path / name, dst / rel_root / name, stats)

    logger.debug(f"Mirrored {src} -> {dst}: {stats.copied} copied, {stats.skipped} unchanged")
    return stats
