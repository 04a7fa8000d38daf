"""Per-job execution: layered copy for Hyva themes, delegation for Luma.

Every ``DeployError`` raised while a job runs is caught here and turned
into a FAILED result, so one job never aborts its siblings.
"""

from __future__ import annotations

import logging
import subprocess
import threading
import time
from collections.abc import Sequence
from pathlib import Path

from magento_static_deploy.copier.transfer import CopyMode, copy_tree
from magento_static_deploy.core.workers import WorkerPool
from magento_static_deploy.deployer.state import (
    DeployJob,
    DeployResult,
    DeployStats,
    DeployStatus,
)
from magento_static_deploy.errors import (
    DelegationFailedError,
    DeployCancelled,
    DeployError,
    DeployIOError,
)
from magento_static_deploy.scanner.sources import collect_file_sources
from magento_static_deploy.theme.models import LocaleCode, Theme, ThemeType
from magento_static_deploy.theme.resolver import resolve_parent_chain

logger = logging.getLogger(__name__)

MAGENTO_BIN = Path("bin") / "magento"
DEPLOYED_VERSION_FILE = Path("pub") / "static" / "deployed_version.txt"


def output_path(root: Path, theme: Theme, locale: LocaleCode) -> Path:
    """Return ``root/pub/static/{area}/{vendor}/{name}/{locale}``."""
    return root / "pub" / "static" / theme.area.value / theme.vendor / theme.name / str(locale)


def read_deployed_version(root: Path) -> str | None:
    path = root / DEPLOYED_VERSION_FILE
    try:
        return path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.debug(f"Cannot read {path}: {e}")
        return None


def delegate_to_magento(
    root: Path,
    theme: Theme,
    locale: LocaleCode,
    verbose: bool = False,
) -> None:
    """Run ``bin/magento setup:static-content:deploy`` for one theme and locale.

    Blocks until the process exits; there is no timeout. With ``verbose``
    the captured stdout and stderr are logged at DEBUG once it has exited.

    Raises:
        DelegationFailedError: The process exited with a non-zero status.
        DeployIOError: The process could not be started.
    """
    command = [
        str(root / MAGENTO_BIN),
        "setup:static-content:deploy",
        "--area",
        theme.area.value,
        "--theme",
        theme.full_name(),
        str(locale),
    ]
    logger.debug("Delegating: %s", " ".join(command))

    try:
        completed = subprocess.run(
            command,
            cwd=root,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise DeployIOError(e, root / MAGENTO_BIN) from e

    if verbose:
        label = f"{theme.full_name()}/{locale}"
        for stream, output in (("stdout", completed.stdout), ("stderr", completed.stderr)):
            if output and output.strip():
                logger.debug("bin/magento %s for %s:\n%s", stream, label, output.rstrip())

    if completed.returncode != 0:
        raise DelegationFailedError(completed.returncode, completed.stderr or "")


def _copy_layers(
    job: DeployJob,
    all_themes: Sequence[Theme],
    root: Path,
    cancel: threading.Event,
    stats: DeployStats,
    include_dev: bool,
    pool: WorkerPool | None,
) -> int:
    theme = job.theme
    chain = resolve_parent_chain(theme, all_themes)
    sources = collect_file_sources(theme, chain, root, pool)
    out_dir = output_path(root, theme, job.locale)

    total_files = 0
    for source in sources:
        if cancel.is_set():
            raise DeployCancelled()
        files, _bytes = copy_tree(
            source.path,
            source.destination(out_dir),
            cancel,
            include_dev=include_dev,
            mode=CopyMode.SKIP_EXISTING,
            pool=pool,
            stats=stats,
        )
        total_files += files
    return total_files


def deploy_theme(
    job: DeployJob,
    all_themes: Sequence[Theme],
    root: Path,
    cancel: threading.Event,
    stats: DeployStats,
    verbose: bool = False,
    include_dev: bool = False,
    pool: WorkerPool | None = None,
) -> DeployResult:
    """Deploy one (theme, locale) job and report its outcome.

    Luma themes are handed to bin/magento and come back DELEGATED with a
    file count of zero. Hyva themes have their layers copied, highest
    priority first, in skip-existing mode into the job's output path.

    Args:
        job: Theme and locale to deploy
        all_themes: Every discovered theme, for parent chain lookups
        root: Magento root
        cancel: Run-wide cancellation flag, polled between layers and files
        stats: Shared counters; copies are recorded as they happen
        verbose: Log a line per finished job at INFO and bin/magento output at DEBUG
        include_dev: Copy development files too
        pool: Worker pool for per-file copies (None = sequential)

    Returns:
        The job's DeployResult. Never raises DeployError.
    """
    started = time.monotonic()

    if cancel.is_set():
        return DeployResult(job, DeployStatus.CANCELLED, duration=0.0)

    try:
        if job.theme.theme_type is ThemeType.LUMA:
            delegate_to_magento(root, job.theme, job.locale, verbose)
            status, file_count = DeployStatus.DELEGATED, 0
        else:
            file_count = _copy_layers(job, all_themes, root, cancel, stats, include_dev, pool)
            status = DeployStatus.SUCCESS
    except DeployCancelled:
        logger.debug("Cancelled %s", job.label())
        return DeployResult(
            job, DeployStatus.CANCELLED, duration=time.monotonic() - started
        )
    except DeployError as e:
        stats.record_error()
        logger.error(f"Deployment of {job.label()} failed: {e}")
        return DeployResult(
            job, DeployStatus.FAILED, duration=time.monotonic() - started, error=e
        )

    duration = time.monotonic() - started
    if verbose:
        logger.info("Deployed %s (%s, %d files) in %.2fs", job.label(), status.value, file_count, duration)
    return DeployResult(job, status, file_count=file_count, duration=duration)
