"""stagebuild - incremental workspace staging and build orchestration.

Stages source trees into a build workspace, drives an external compiler
toolchain and a secondary build tool, collects the produced binaries and
optionally installs them under a prefix.
"""

__version__ = "0.1.0"

from stagebuild.config import BuildConfig, BuildMode, load_config
from stagebuild.errors import (
    ConfigError,
    MirrorError,
    NonRegularFileError,
    ShortCopyError,
    StageBuildError,
    ToolchainError,
    ToolchainLaunchError,
)
from stagebuild.mirror import MirrorStats, mirror_file, mirror_tree
from stagebuild.pipeline import PipelineDriver, PipelineResult

__all__ = [
    "__version__",
    "BuildConfig",
    "BuildMode",
    "load_config",
    "ConfigError",
    "MirrorError",
    "NonRegularFileError",
    "ShortCopyError",
    "StageBuildError",
    "ToolchainError",
    "ToolchainLaunchError",
    "MirrorStats",
    "mirror_file",
    "mirror_tree",
    "PipelineDriver",
    "PipelineResult",
]
