"""Console rendering for the deploy command: header, progress and summary."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

from magento_static_deploy.deployer.monitor import sort_results
from magento_static_deploy.deployer.state import DeployResult, DeployStats, DeployStatus

_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(size: int) -> str:
    """Human readable size with 1024-based units, e.g. ``1.5 MB``."""
    value = float(size)
    for unit in _UNITS:
        if value < 1024 or unit == _UNITS[-1]:
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def print_header(console: Console, themes: int, locales: int, jobs: int, workers: int) -> None:
    console.print(
        f"Deploying {themes} theme(s) x {locales} locale(s) = {jobs} job(s) "
        f"with {workers} worker(s)",
        highlight=False,
        soft_wrap=True,
    )


def create_progress(console: Console) -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def result_line(result: DeployResult) -> Text:
    """One summary line: ``  area/Vendor/Name/locale: <outcome>``."""
    line = Text(f"  {result.job.label()}: ")
    if result.status is DeployStatus.SUCCESS:
        line.append(f"{result.file_count} files")
    elif result.status is DeployStatus.DELEGATED:
        line.append("delegated to bin/magento", style="cyan")
    elif result.status is DeployStatus.CANCELLED:
        line.append("cancelled", style="yellow")
    else:
        line.append(f"FAILED: {result.error}", style="red")
    return line


def print_summary(
    console: Console,
    results: Sequence[DeployResult],
    stats: DeployStats,
    elapsed: float,
) -> None:
    """Print aggregate throughput followed by one line per job."""
    rate = stats.files_copied / elapsed if elapsed > 0 else 0.0
    console.print(
        f"Deployed {stats.files_copied} files ({format_bytes(stats.bytes_copied)}) "
        f"in {elapsed:.2f}s ({rate:.0f} files/sec)",
        highlight=False,
        soft_wrap=True,
    )
    for result in sort_results(results):
        console.print(result_line(result), soft_wrap=True)
