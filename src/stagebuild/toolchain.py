"""External toolchain invocation.

The pipeline talks to its build tools through the narrow Toolchain
protocol, one method per verb. ExternalToolchain spawns the real commands;
tests substitute a recording double with the same methods.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable

from .config import BuildConfig
from .errors import ToolchainError, ToolchainLaunchError
from .output import log
from .subprocess_utils import run_inherited

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolchainInvocation:
    """One external command: where it runs, what it runs, extra environment."""

    cwd: Path
    argv: tuple[str, ...]
    env: dict[str, str] = field(default_factory=dict)

    def describe(self) -> str:
        return " ".join(self.argv)


@runtime_checkable
class Toolchain(Protocol):
    """Build tool capability used by the pipeline driver."""

    def install(self, workspace_root: Path, executables: Sequence[str]) -> None:
        """Compile and install the executables into the workspace bin directory."""
        ...

    def test(self, workspace_root: Path, package: str) -> None:
        """Run the test suite of one package inside the workspace."""
        ...

    def package(self, project_dir: Path) -> None:
        """Build the secondary-language project in project_dir."""
        ...


def run_invocation(invocation: ToolchainInvocation) -> None:
    """Run an invocation synchronously and fail on a non-zero exit.

    Raises:
        ToolchainLaunchError: If the command could not be started
        ToolchainError: If the command exited with a non-zero status
    """
    log(f"Execute {list(invocation.argv)}")
    try:
        returncode = run_inherited(invocation.argv, invocation.cwd, invocation.env)
    except OSError as e:
        raise ToolchainLaunchError(invocation.argv, invocation.cwd, str(e)) from e

    logger.debug(f"{invocation.describe()} exited with status {returncode}")
    if returncode != 0:
        raise ToolchainError(invocation.argv, invocation.cwd, returncode)


class ExternalToolchain:
    """Toolchain backed by the configured compiler and secondary build tool."""

    def __init__(self, config: BuildConfig):
        self.config = config

    def _workspace_env(self, workspace_root: Path) -> dict[str, str]:
        return {self.config.workspace_env: str(workspace_root.resolve())}

    def install_invocation(self, workspace_root: Path, executables: Sequence[str]) -> ToolchainInvocation:
        return ToolchainInvocation(
            cwd=workspace_root,
            argv=(self.config.compiler, "install", "-v", *executables),
            env=self._workspace_env(workspace_root),
        )

    def test_invocation(self, workspace_root: Path, package: str) -> ToolchainInvocation:
        return ToolchainInvocation(
            cwd=workspace_root,
            argv=(self.config.compiler, "test", package),
            env=self._workspace_env(workspace_root),
        )

    def package_invocation(self, project_dir: Path) -> ToolchainInvocation:
        return ToolchainInvocation(cwd=project_dir, argv=tuple(self.config.secondary_command))

    def install(self, workspace_root: Path, executables: Sequence[str]) -> None:
        invocation = self.install_invocation(workspace_root, executables)
        log(f"{self.config.workspace_env} = {invocation.env[self.config.workspace_env]}")
        run_invocation(invocation)

    def test(self, workspace_root: Path, package: str) -> None:
        run_invocation(self.test_invocation(workspace_root, package))

    def package(self, project_dir: Path) -> None:
        run_invocation(self.package_invocation(project_dir))
