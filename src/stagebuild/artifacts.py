"""Artifact collection and installation.

Built binaries are mirrored out of the transient workspace into the
project's output directory, and from there into ``<prefix>/bin`` on
install.
"""

import logging
from pathlib import Path
from typing import Optional

from .config import BuildConfig
from .errors import MirrorError
from .mirror import MirrorStats, mirror_file, mirror_tree
from .output import log, log_detail
from .workspace import Workspace

logger = logging.getLogger(__name__)


def collect_artifacts(config: BuildConfig, workspace: Workspace) -> tuple[Path, MirrorStats]:
    """Mirror the workspace bin directory into the output directory.

    Returns:
        Absolute output directory and the MirrorStats of the collection

    Raises:
        MirrorError: If the output directory or any binary cannot be written
    """
    try:
        config.output_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as e:
        raise MirrorError(f"cannot create output directory {config.output_dir}: {e}", workspace.bin) from e

    stats = mirror_tree(workspace.bin, config.output_dir)
    output_dir = config.output_dir.resolve()
    log(f"Binaries are available at: {output_dir}")
    return output_dir, stats


def resolve_prefix(config: BuildConfig, prefix: Optional[Path] = None) -> Path:
    """Return the explicit prefix, or the configured default when unset.

    A relative prefix is taken relative to the project directory.
    """
    chosen = prefix if prefix is not None else config.prefix
    if chosen is None:
        chosen = config.default_prefix
    chosen = Path(chosen)
    if not chosen.is_absolute():
        chosen = config.project_dir / chosen
    return chosen


def install_binaries(config: BuildConfig, prefix: Path) -> list[Path]:
    """Install every configured binary into ``<prefix>/bin``.

    Binaries are installed in order; the first failure aborts the rest.

    Returns:
        Destination paths of the installed binaries

    Raises:
        MirrorError: If a binary is missing or cannot be written
    """
    install_bin = prefix / "bin"
    installed: list[Path] = []
    for name in config.install_binaries:
        src = config.output_dir / name
        dst = install_bin / name
        copied = mirror_file(src, dst)
        log_detail(f"{dst}{'' if copied else ' (unchanged)'}")
        installed.append(dst)
    logger.debug(f"Installed {len(installed)} binaries into {install_bin}")
    return installed
