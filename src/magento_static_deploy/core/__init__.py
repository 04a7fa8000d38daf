"""Core runtime support: configuration and the shared worker pool."""

from magento_static_deploy.core.config import (
    ConfigLayer,
    DeployConfig,
    ensure_magento_root,
    load_config_file,
    resolve_config,
    split_values,
)
from magento_static_deploy.core.workers import WorkerPool, run_parallel

__all__ = [
    "ConfigLayer",
    "DeployConfig",
    "WorkerPool",
    "ensure_magento_root",
    "load_config_file",
    "resolve_config",
    "run_parallel",
    "split_values",
]
