"""Build workspace layout and assembly.

The workspace is the directory tree handed to the compiler:

    <workspace>/src   staged sources (dependencies, packages, executables)
    <workspace>/bin   binaries produced by the compiler
    <workspace>/pkg   compiler package cache

It is rebuilt in place on every build; mirroring keeps unchanged files
untouched so the compiler's own caches stay valid.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from .config import BuildConfig
from .errors import MirrorError
from .mirror import MirrorStats, mirror_tree
from .output import log_detail

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Workspace:
    """Paths of one build workspace."""

    root: Path
    src: Path
    bin: Path
    pkg: Path

    @classmethod
    def from_root(cls, root: Path) -> "Workspace":
        return cls(root=root, src=root / "src", bin=root / "bin", pkg=root / "pkg")

    @property
    def directories(self) -> tuple[Path, Path, Path]:
        return (self.src, self.bin, self.pkg)


def create_workspace(config: BuildConfig) -> Workspace:
    """Create the workspace directories. Existing directories are kept.

    Raises:
        MirrorError: If a directory cannot be created
    """
    workspace = Workspace.from_root(config.workspace_dir)
    for directory in workspace.directories:
        try:
            directory.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as e:
            raise MirrorError(f"cannot create workspace directory {directory}: {e}", directory) from e
        logger.debug(f"Workspace directory ready: {directory}")
    return workspace


def populate_workspace(config: BuildConfig, workspace: Workspace) -> MirrorStats:
    """Stage dependencies, packages and executables into the source root.

    Dependency trees are mirrored flat into the source root, since they are
    already laid out by import path. Each package and executable directory
    of the project is mirrored into a like-named directory of the source
    root.

    Returns:
        Combined MirrorStats of every staged tree

    Raises:
        MirrorError: On the first file that fails to mirror
    """
    stats = mirror_tree(config.deps_dir, workspace.src)
    for name in config.staged_names:
        stats.merge(mirror_tree(config.project_dir / name, workspace.src / name))

    log_detail(f"{stats.copied} files copied, {stats.skipped} unchanged", verbose_only=True)
    return stats
