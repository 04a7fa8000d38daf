"""Job matrix construction and parallel dispatch."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from pathlib import Path

from magento_static_deploy.core.workers import WorkerPool, run_parallel
from magento_static_deploy.deployer.executor import deploy_theme
from magento_static_deploy.deployer.state import DeployJob, DeployResult, DeployStats
from magento_static_deploy.theme.models import LocaleCode, Theme

logger = logging.getLogger(__name__)


def job_matrix(themes: Sequence[Theme], locales: Sequence[LocaleCode]) -> list[DeployJob]:
    """One job per (theme, locale) pair; jobs of a theme share its object."""
    return [DeployJob(theme=theme, locale=locale) for theme in themes for locale in locales]


def deploy_all(
    jobs: Sequence[DeployJob],
    all_themes: Sequence[Theme],
    root: Path,
    cancel: threading.Event,
    stats: DeployStats,
    pool: WorkerPool | None = None,
    *,
    verbose: bool = False,
    include_dev: bool = False,
    on_result: Callable[[DeployResult], None] | None = None,
) -> list[DeployResult]:
    """Run every job on ``pool`` and return results in job order.

    ``on_result`` is called from the worker thread as each job finishes.
    """
    logger.debug("Dispatching %d job(s)", len(jobs))

    def run(job: DeployJob) -> DeployResult:
        result = deploy_theme(
            job,
            all_themes,
            root,
            cancel,
            stats,
            verbose=verbose,
            include_dev=include_dev,
            pool=pool,
        )
        if on_result is not None:
            on_result(result)
        return result

    return run_parallel(pool, run, jobs)
