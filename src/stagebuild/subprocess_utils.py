"""Subprocess helpers for running external build tools.

Build tools run with stdout/stderr inherited from this process so their
progress reaches the terminal live. stdin is redirected to the null device
so a child can never steal keystrokes from the parent terminal, and on
Windows no extra console window is opened.
"""

import os
import subprocess
import sys
from pathlib import Path
from typing import Mapping, Optional, Sequence


def get_subprocess_creation_flags() -> int:
    """Get platform-specific subprocess creation flags.

    Returns:
        - Windows: subprocess.CREATE_NO_WINDOW (prevents console window)
        - Other platforms: 0 (no special flags)
    """
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


def build_env(overrides: Optional[Mapping[str, str]]) -> Optional[dict[str, str]]:
    """Return the current environment with overrides applied.

    Returns None when there is nothing to override, which lets the child
    inherit the environment unchanged.
    """
    if not overrides:
        return None
    env = dict(os.environ)
    env.update(overrides)
    return env


def run_inherited(argv: Sequence[str], cwd: Path, env_overrides: Optional[Mapping[str, str]] = None) -> int:
    """Run a command to completion with inherited output streams.

    Args:
        argv: Command and arguments
        cwd: Working directory for the child
        env_overrides: Environment variables to set for the child only

    Returns:
        Exit status of the child

    Raises:
        OSError: If the process cannot be started (missing executable, bad cwd)
    """
    kwargs = {}
    flags = get_subprocess_creation_flags()
    if flags:
        kwargs["creationflags"] = flags

    result = subprocess.run(
        list(argv),
        cwd=str(cwd),
        env=build_env(env_overrides),
        stdin=subprocess.DEVNULL,
        check=False,
        **kwargs,
    )
    return result.returncode
