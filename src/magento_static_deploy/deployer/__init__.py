"""Job-matrix deployment: scheduling, per-job execution and result reporting."""

from magento_static_deploy.deployer.executor import (
    delegate_to_magento,
    deploy_theme,
    output_path,
    read_deployed_version,
)
from magento_static_deploy.deployer.monitor import (
    DeployExitCode,
    collect_results,
    exit_code_for,
    sort_results,
)
from magento_static_deploy.deployer.scheduler import deploy_all, job_matrix
from magento_static_deploy.deployer.state import (
    DeployJob,
    DeployResult,
    DeployStats,
    DeployStatus,
)

__all__ = [
    # State
    "DeployJob",
    "DeployResult",
    "DeployStats",
    "DeployStatus",
    # Execution
    "delegate_to_magento",
    "deploy_theme",
    "output_path",
    "read_deployed_version",
    # Scheduling
    "deploy_all",
    "job_matrix",
    # Reporting
    "DeployExitCode",
    "collect_results",
    "exit_code_for",
    "sort_results",
]
