"""Tests for the rich stage summary."""

import io
from pathlib import Path

from rich.console import Console

from stagebuild.config import BuildMode
from stagebuild.mirror import MirrorStats
from stagebuild.pipeline import PipelineResult, StageRecord, StageStatus
from stagebuild.summary import print_summary, render_summary


def _render(renderable_fn, result) -> str:
    buffer = io.StringIO()
    console = Console(file=buffer, width=120, color_system=None)
    renderable_fn(result, console)
    return buffer.getvalue()


def _result() -> PipelineResult:
    return PipelineResult(
        mode=BuildMode.BUILD,
        stages=[
            StageRecord("Creating workspace", StageStatus.DONE, 0.01),
            StageRecord("Populating workspace", StageStatus.DONE, 0.5, MirrorStats(copied=3, skipped=212)),
            StageRecord("Compiling executables", StageStatus.FAILED, 2.0, error_message="exit 1"),
            StageRecord("Packaging secondary project"),
        ],
        total_elapsed=2.51,
        output_dir=Path("/work/project/bin"),
    )


def test_render_summary_rows():
    table = render_summary(_result())

    assert table.row_count == 4
    assert len(table.columns) == 5


def test_print_summary_content():
    out = _render(print_summary, _result())

    assert "[1/4] Creating workspace" in out
    assert "[2/4] Populating workspace" in out
    assert "212" in out
    assert "failed" in out
    assert "pending" in out
    assert "Binaries: /work/project/bin" in out
    assert "Total time: 2.51s" in out


def test_print_summary_installed_paths():
    result = PipelineResult(
        mode=BuildMode.INSTALL,
        stages=[StageRecord("Installing binaries", StageStatus.DONE, 0.02)],
        installed=[Path("/usr/local/bin/gauge")],
    )

    out = _render(print_summary, result)

    assert "Installed: /usr/local/bin/gauge" in out
    assert "Binaries:" not in out


def test_result_properties():
    result = _result()

    assert not result.success
    assert result.failed_stage.name == "Compiling executables"
    assert result.files_copied == 3
