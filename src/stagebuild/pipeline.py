"""Pipeline driver sequencing workspace assembly, compilation and collection.

Three mutually exclusive modes, chosen once from the configuration:

- build:   create workspace -> populate workspace -> compile
           -> package secondary project -> collect artifacts
- test:    run the compiler's test verb on the test package
- install: install the collected binaries under <prefix>/bin

Stages run strictly in order. The first stage that raises is marked failed,
every later stage stays pending, and the exception propagates to the caller.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .artifacts import collect_artifacts, install_binaries, resolve_prefix
from .config import BuildConfig, BuildMode
from .mirror import MirrorStats
from .output import TimedLogger, log
from .toolchain import ExternalToolchain, Toolchain
from .workspace import Workspace, create_workspace, populate_workspace

logger = logging.getLogger(__name__)


class StageStatus(Enum):
    """Lifecycle state of a pipeline stage."""

    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


@dataclass
class StageRecord:
    """Outcome of one pipeline stage.

    Attributes:
        name: Human-readable stage name
        status: Current lifecycle state
        elapsed: Wall-clock seconds spent in the stage
        stats: Mirror counters, for stages that mirror files
        error_message: Error detail if status is FAILED
    """

    name: str
    status: StageStatus = StageStatus.PENDING
    elapsed: float = 0.0
    stats: Optional[MirrorStats] = None
    error_message: str = ""


@dataclass
class PipelineResult:
    """Aggregated result of one driver run.

    Attributes:
        mode: Mode that was run
        stages: Stage records in execution order
        total_elapsed: Total wall-clock time in seconds
        output_dir: Absolute output directory (build mode only)
        installed: Installed binary paths (install mode only)
    """

    mode: BuildMode
    stages: list[StageRecord]
    total_elapsed: float = 0.0
    output_dir: Optional[Path] = None
    installed: list[Path] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(stage.status == StageStatus.DONE for stage in self.stages)

    @property
    def failed_stage(self) -> Optional[StageRecord]:
        for stage in self.stages:
            if stage.status == StageStatus.FAILED:
                return stage
        return None

    @property
    def files_copied(self) -> int:
        return sum(stage.stats.copied for stage in self.stages if stage.stats is not None)


StageFn = Callable[[], Optional[MirrorStats]]


class PipelineDriver:
    """Runs exactly one mode's stage sequence per call to run().

    Args:
        config: Immutable build configuration
        toolchain: Build tool capability; defaults to the external commands
    """

    def __init__(self, config: BuildConfig, toolchain: Optional[Toolchain] = None):
        self.config = config
        self.toolchain: Toolchain = toolchain if toolchain is not None else ExternalToolchain(config)
        self.result: Optional[PipelineResult] = None
        self._workspace = Workspace.from_root(config.workspace_dir)

    def run(self) -> PipelineResult:
        """Execute the configured mode.

        Returns:
            PipelineResult with every stage DONE

        Raises:
            StageBuildError: From the first failing stage. ``self.result``
                still holds the partial result.
        """
        mode = self.config.mode
        if mode == BuildMode.TEST:
            plan = self._test_plan()
        elif mode == BuildMode.INSTALL:
            plan = self._install_plan()
        else:
            plan = self._build_plan()

        self.result = PipelineResult(mode=mode, stages=[StageRecord(name) for name, _ in plan])
        start_time = time.monotonic()
        try:
            for index, (_, stage_fn) in enumerate(plan):
                self._run_stage(index, len(plan), self.result.stages[index], stage_fn)
        finally:
            self.result.total_elapsed = time.monotonic() - start_time

        logger.debug(f"{mode.value} finished in {self.result.total_elapsed:.2f}s")
        return self.result

    def _run_stage(self, index: int, total: int, record: StageRecord, stage_fn: StageFn) -> None:
        record.status = StageStatus.RUNNING
        started = time.monotonic()
        try:
            with TimedLogger(record.name, phase=(index + 1, total)):
                record.stats = stage_fn()
        except Exception as e:
            record.status = StageStatus.FAILED
            record.error_message = str(e)
            raise
        finally:
            record.elapsed = time.monotonic() - started
        record.status = StageStatus.DONE

    def _build_plan(self) -> list[tuple[str, StageFn]]:
        return [
            ("Creating workspace", self._create_workspace),
            ("Populating workspace", self._populate_workspace),
            ("Compiling executables", self._compile),
            ("Packaging secondary project", self._package),
            ("Collecting binaries", self._collect),
        ]

    def _test_plan(self) -> list[tuple[str, StageFn]]:
        return [(f"Testing {self.config.test_package}", self._test)]

    def _install_plan(self) -> list[tuple[str, StageFn]]:
        return [("Installing binaries", self._install)]

    def _create_workspace(self) -> None:
        self._workspace = create_workspace(self.config)

    def _populate_workspace(self) -> MirrorStats:
        return populate_workspace(self.config, self._workspace)

    def _compile(self) -> None:
        self.toolchain.install(self._workspace.root, self.config.executables)

    def _package(self) -> None:
        self.toolchain.package(self.config.secondary_dir)

    def _collect(self) -> MirrorStats:
        output_dir, stats = collect_artifacts(self.config, self._workspace)
        self.result.output_dir = output_dir
        return stats

    def _test(self) -> None:
        self.toolchain.test(self._workspace.root, self.config.test_package)

    def _install(self) -> None:
        prefix = resolve_prefix(self.config)
        log(f"Installing to {prefix}")
        self.result.installed = install_binaries(self.config, prefix)
