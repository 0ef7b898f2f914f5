"""Project configuration for stagebuild.

BuildConfig is built once at startup and handed to every component. Values
come from built-in defaults, an optional ``stagebuild.ini`` in the project
root, the ``STAGEBUILD_PREFIX`` environment variable and the command line,
in increasing order of precedence.

Example stagebuild.ini:

    [stagebuild]
    deps_dir = third_party
    packages = common util
    executables = gauge, gauge-java
    secondary_command = ant jar
"""

import configparser
import os
import re
import shlex
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional

from .errors import ConfigError

CONFIG_FILE_NAME = "stagebuild.ini"
CONFIG_SECTION = "stagebuild"
PREFIX_ENV_VAR = "STAGEBUILD_PREFIX"

_PATH_KEYS = ("deps_dir", "workspace_dir", "output_dir", "secondary_dir")
_LIST_KEYS = ("packages", "executables", "install_binaries")
_STRING_KEYS = ("test_package", "compiler", "workspace_env", "default_prefix")
_COMMAND_KEYS = ("secondary_command",)


class BuildMode(Enum):
    """Which stage sequence the pipeline runs."""

    BUILD = "build"
    TEST = "test"
    INSTALL = "install"


@dataclass(frozen=True)
class BuildConfig:
    """Immutable configuration shared by every pipeline component.

    Attributes:
        project_dir: Project root; relative paths below resolve against it
        deps_dir: Directory of import-path-shaped dependency trees
        workspace_dir: Transient workspace root (holds src/, bin/, pkg/)
        output_dir: Stable directory the built binaries are collected into
        secondary_dir: Project of the secondary build tool
        packages: Library package directories staged into the workspace
        executables: Executable directories staged and compiled
        install_binaries: Binaries copied to <prefix>/bin on install
        test_package: Package handed to the compiler's test verb
        compiler: Primary compiler command
        secondary_command: Full command line of the secondary build tool
        workspace_env: Environment variable pointing the compiler at the workspace
        default_prefix: Install prefix used when none is given
        mode: Selected pipeline mode
        prefix: Explicit install prefix, if any
        verbose: Enable verbose output
    """

    project_dir: Path
    deps_dir: Path
    workspace_dir: Path
    output_dir: Path
    secondary_dir: Path
    packages: tuple[str, ...] = ("common",)
    executables: tuple[str, ...] = ("gauge", "gauge-java")
    install_binaries: tuple[str, ...] = ("gauge", "gauge-java")
    test_package: str = "gauge"
    compiler: str = "go"
    secondary_command: tuple[str, ...] = ("ant", "jar")
    workspace_env: str = "GOPATH"
    default_prefix: Path = field(default=Path("/usr/local"))
    mode: BuildMode = BuildMode.BUILD
    prefix: Optional[Path] = None
    verbose: bool = False

    @classmethod
    def defaults(cls, project_dir: Path) -> "BuildConfig":
        """Create a configuration with the built-in project layout."""
        return cls(
            project_dir=project_dir,
            deps_dir=project_dir / "deps",
            workspace_dir=project_dir / "tmp",
            output_dir=project_dir / "bin",
            secondary_dir=project_dir / "gauge-java",
        )

    def validate(self) -> None:
        """Raise ConfigError if the configuration cannot drive a build."""
        if not self.executables:
            raise ConfigError("at least one executable must be configured")
        if not self.compiler:
            raise ConfigError("compiler command must not be empty")
        if not self.secondary_command:
            raise ConfigError("secondary_command must not be empty")
        if not self.workspace_env:
            raise ConfigError("workspace_env must not be empty")
        for name in self.packages + self.executables + self.install_binaries:
            if not name or Path(name).is_absolute() or ".." in Path(name).parts:
                raise ConfigError(f"invalid package or binary name: {name!r}")

    @property
    def staged_names(self) -> tuple[str, ...]:
        """Packages followed by executables, in staging order."""
        return self.packages + self.executables


def _split_list(value: str) -> tuple[str, ...]:
    return tuple(item for item in re.split(r"[\s,]+", value.strip()) if item)


def _read_ini(ini_path: Path) -> dict[str, str]:
    """Read the [stagebuild] section of an INI file.

    Raises:
        ConfigError: If the file cannot be parsed or has unknown keys
    """
    # "%" in commands and paths is literal.
    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read(ini_path, encoding="utf-8")
        if not parser.has_section(CONFIG_SECTION):
            return {}
        values = dict(parser.items(CONFIG_SECTION))
    except configparser.Error as e:
        raise ConfigError(f"failed to parse {ini_path}: {e}") from e

    known = set(_PATH_KEYS + _LIST_KEYS + _STRING_KEYS + _COMMAND_KEYS)
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"unknown keys in [{CONFIG_SECTION}] of {ini_path}: {', '.join(unknown)}")
    return values


def load_config(
    project_dir: Path,
    mode: BuildMode = BuildMode.BUILD,
    prefix: Optional[str] = None,
    verbose: bool = False,
) -> BuildConfig:
    """Build the configuration for one invocation.

    Args:
        project_dir: Project root directory
        mode: Pipeline mode selected on the command line
        prefix: Install prefix from the command line (empty means unset)
        verbose: Enable verbose output

    Returns:
        Validated BuildConfig

    Raises:
        ConfigError: If stagebuild.ini is malformed or the result is invalid
    """
    project_dir = Path(project_dir).resolve()
    config = BuildConfig.defaults(project_dir)

    overrides: dict = {}
    ini_path = project_dir / CONFIG_FILE_NAME
    if ini_path.is_file():
        for key, value in _read_ini(ini_path).items():
            if key in _PATH_KEYS:
                overrides[key] = project_dir / value.strip()
            elif key in _LIST_KEYS:
                overrides[key] = _split_list(value)
            elif key in _COMMAND_KEYS:
                overrides[key] = tuple(shlex.split(value))
            elif key == "default_prefix":
                overrides[key] = Path(value.strip())
            else:
                overrides[key] = value.strip()

    env_prefix = os.environ.get(PREFIX_ENV_VAR)
    if env_prefix:
        overrides["default_prefix"] = Path(env_prefix)

    config = replace(
        config,
        mode=mode,
        prefix=Path(prefix) if prefix else None,
        verbose=verbose,
        **overrides,
    )
    config.validate()
    return config
