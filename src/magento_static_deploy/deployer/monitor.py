"""Result aggregation and exit code classification."""

from __future__ import annotations

from collections.abc import Iterable
from enum import IntEnum

from magento_static_deploy.deployer.state import DeployResult, DeployStatus


class DeployExitCode(IntEnum):
    SUCCESS = 0
    PARTIAL_FAILURE = 1
    TOTAL_FAILURE = 2
    INTERRUPTED = 130


def collect_results(results: Iterable[DeployResult]) -> tuple[list[DeployResult], bool, bool]:
    """Return ``(results, has_success, has_failure)``.

    SUCCESS and DELEGATED count as success, FAILED as failure. CANCELLED
    counts as neither.
    """
    collected = list(results)
    has_success = any(r.succeeded for r in collected)
    has_failure = any(r.status is DeployStatus.FAILED for r in collected)
    return collected, has_success, has_failure


def exit_code_for(has_success: bool, has_failure: bool, cancelled: bool = False) -> DeployExitCode:
    if cancelled:
        return DeployExitCode.INTERRUPTED
    if has_failure and not has_success:
        return DeployExitCode.TOTAL_FAILURE
    if has_failure:
        return DeployExitCode.PARTIAL_FAILURE
    return DeployExitCode.SUCCESS


def sort_results(results: Iterable[DeployResult]) -> list[DeployResult]:
    """Order results by (area, theme, locale) for stable reporting."""
    return sorted(
        results,
        key=lambda r: (r.job.theme.area.value, r.job.theme.full_name(), str(r.job.locale)),
    )
