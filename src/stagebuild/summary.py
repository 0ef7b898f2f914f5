"""Rich rendering of a pipeline run.

Produces a one-line-per-stage table:

    Stage                         Status    Time   Copied  Unchanged
    [1/5] Creating workspace      done     0.00s        -          -
    [2/5] Populating workspace    done     0.41s        3        212
    ...
"""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .pipeline import PipelineResult, StageRecord, StageStatus

_STATUS_STYLES = {
    StageStatus.PENDING: "dim",
    StageStatus.RUNNING: "yellow",
    StageStatus.DONE: "green",
    StageStatus.FAILED: "bold red",
}


def _status_text(stage: StageRecord) -> Text:
    return Text(stage.status.value, style=_STATUS_STYLES[stage.status])


def render_summary(result: PipelineResult) -> Table:
    """Build a table summarizing every stage of a pipeline result."""
    table = Table(title=f"stagebuild {result.mode.value}", title_justify="left", show_edge=False)
    table.add_column("Stage")
    table.add_column("Status")
    table.add_column("Time", justify="right")
    table.add_column("Copied", justify="right")
    table.add_column("Unchanged", justify="right")

    total = len(result.stages)
    for index, stage in enumerate(result.stages, start=1):
        copied = str(stage.stats.copied) if stage.stats is not None else "-"
        skipped = str(stage.stats.skipped) if stage.stats is not None else "-"
        table.add_row(
            f"[{index}/{total}] {stage.name}",
            _status_text(stage),
            f"{stage.elapsed:.2f}s",
            copied,
            skipped,
        )
    return table


def print_summary(result: PipelineResult, console: Console) -> None:
    console.print(render_summary(result))
    if result.output_dir is not None:
        console.print(f"Binaries: {result.output_dir}")
    for path in result.installed:
        console.print(f"Installed: {path}")
    if result.files_copied:
        console.print(f"Files copied: {result.files_copied}")
    console.print(f"Total time: {result.total_elapsed:.2f}s")
