"""Override-aware parallel directory copier with development-file filtering."""

from magento_static_deploy.copier.filters import (
    DEV_DIRECTORIES,
    DEV_EXTENSIONS,
    DEV_FILES,
    should_exclude,
)
from magento_static_deploy.copier.transfer import (
    COPY_BUFFER_SIZE,
    CopyMode,
    copy_file,
    copy_tree,
    iter_source_files,
)

__all__ = [
    "COPY_BUFFER_SIZE",
    "CopyMode",
    "DEV_DIRECTORIES",
    "DEV_EXTENSIONS",
    "DEV_FILES",
    "copy_file",
    "copy_tree",
    "iter_source_files",
    "should_exclude",
]
