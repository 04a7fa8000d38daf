"""The ``magento-static-deploy`` command.

Resolves configuration, discovers themes, runs the (theme x locale) job
matrix on a shared worker pool and reports the outcome through the exit
code.
"""

from __future__ import annotations

import contextlib
import logging
import signal
import threading
import time
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from magento_static_deploy.cli.ui import create_progress, print_header, print_summary
from magento_static_deploy.core.config import ConfigLayer, DeployConfig, resolve_config, split_values
from magento_static_deploy.core.workers import WorkerPool
from magento_static_deploy.deployer.executor import read_deployed_version
from magento_static_deploy.deployer.monitor import DeployExitCode, collect_results, exit_code_for
from magento_static_deploy.deployer.scheduler import deploy_all, job_matrix
from magento_static_deploy.deployer.state import DeployResult, DeployStats
from magento_static_deploy.errors import DeployError, ThemeNotFoundError
from magento_static_deploy.scanner.discovery import discover_all_themes
from magento_static_deploy.theme.models import Theme

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

PACKAGE_LOGGER = "magento_static_deploy"


def configure_logging(verbose: bool) -> None:
    """Route package logs through rich on stderr."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)
    handler = RichHandler(console=err_console, show_path=False, show_time=verbose)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@contextlib.contextmanager
def cancel_on_sigint(cancel: threading.Event) -> Iterator[None]:
    """Set ``cancel`` on Ctrl+C for the duration of the block."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    original_sigint = signal.getsignal(signal.SIGINT)

    def handler(sig, frame):
        if not cancel.is_set():
            err_console.print("\n[yellow]Cancellation requested, finishing in-flight files...[/yellow]")
        cancel.set()

    signal.signal(signal.SIGINT, handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, original_sigint)


def select_themes(themes: Sequence[Theme], names: Sequence[str] | None) -> list[Theme]:
    """Apply the ``Vendor/Name`` filter.

    Raises:
        ThemeNotFoundError: Nothing was discovered, or nothing matched.
    """
    if not themes:
        raise ThemeNotFoundError()
    if not names:
        return list(themes)

    wanted = set(names)
    selected = [theme for theme in themes if theme.full_name() in wanted]
    if not selected:
        raise ThemeNotFoundError(list(names))

    found = {theme.full_name() for theme in selected}
    for name in names:
        if name not in found:
            logger.warning("Theme %s was not found and is skipped", name)
    return selected


def _fail(error: DeployError) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False, soft_wrap=True)
    raise typer.Exit(int(DeployExitCode.TOTAL_FAILURE))


def run_deployment(config: DeployConfig, cancel: threading.Event) -> tuple[list[DeployResult], DeployStats, float]:
    """Discover, deploy and return (results, stats, elapsed seconds)."""
    stats = DeployStats()
    started = time.monotonic()

    with WorkerPool(config.jobs) as pool:
        all_themes = discover_all_themes(config.root, config.areas, pool)
        themes = select_themes(all_themes, config.themes)
        jobs = job_matrix(themes, config.locales)

        if config.verbose:
            print_header(console, len(themes), len(config.locales), len(jobs), pool.max_workers)
            if version := read_deployed_version(config.root):
                console.print(f"Current deployed version: {version}", highlight=False)

        kwargs = dict(verbose=config.verbose, include_dev=config.include_dev)
        if config.verbose:
            with create_progress(err_console) as progress:
                task = progress.add_task("Deploying", total=len(jobs))
                results = deploy_all(
                    jobs, all_themes, config.root, cancel, stats, pool,
                    on_result=lambda _result: progress.advance(task),
                    **kwargs,
                )
        else:
            results = deploy_all(jobs, all_themes, config.root, cancel, stats, pool, **kwargs)

    return results, stats, time.monotonic() - started


def deploy(
    root: Path = typer.Argument(
        Path("."),
        help="Magento root directory",
        show_default=True,
    ),
    area: Optional[List[str]] = typer.Option(
        None,
        "--area",
        "-a",
        help="Areas to deploy (comma-separated or repeated) [default: frontend,adminhtml]",
    ),
    theme: Optional[List[str]] = typer.Option(
        None,
        "--theme",
        "-t",
        help="Themes to deploy as Vendor/Name (default: all discovered)",
    ),
    locale: Optional[List[str]] = typer.Option(
        None,
        "--locale",
        "-l",
        help="Locales to deploy [default: en_US]",
    ),
    jobs: Optional[int] = typer.Option(
        None,
        "--jobs",
        "-j",
        min=1,
        help="Number of parallel workers (default: CPU count)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show progress and debug logging",
    ),
    include_dev: Optional[bool] = typer.Option(
        None,
        "--include-dev/--no-include-dev",
        "-d",
        help="Copy development files (.ts, .less, node_modules, ...) [default: from config, else off]",
        show_default=False,
    ),
) -> None:
    """Deploy Magento 2 static content for Hyva themes, delegating Luma themes to bin/magento."""
    configure_logging(verbose)

    cli_layer = ConfigLayer(
        areas=split_values(area),
        themes=split_values(theme),
        locales=split_values(locale),
        jobs=jobs,
        include_dev=include_dev,
    )

    try:
        config = resolve_config(root, cli_layer, verbose=verbose)
    except DeployError as e:
        _fail(e)

    cancel = threading.Event()
    with cancel_on_sigint(cancel):
        try:
            results, stats, elapsed = run_deployment(config, cancel)
        except DeployError as e:
            _fail(e)

    results, has_success, has_failure = collect_results(results)
    print_summary(console, results, stats, elapsed)

    code = exit_code_for(has_success, has_failure, cancelled=cancel.is_set())
    if code is not DeployExitCode.SUCCESS:
        raise typer.Exit(int(code))
