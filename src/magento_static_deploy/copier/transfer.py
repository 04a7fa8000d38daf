"""File and directory copying with layered (first-writer-wins) semantics.

``copy_tree`` in ``SKIP_EXISTING`` mode is how layers stack: the
highest-priority source is copied first, and every later layer creates
destination files with an exclusive open, so a path that already exists
keeps the bytes of whichever layer got there first. The exclusive create
is the check; there is no separate exists() test to race against.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import threading
from collections.abc import Iterator
from enum import StrEnum
from pathlib import Path
from typing import BinaryIO, Protocol

from magento_static_deploy.copier.filters import DEV_DIRECTORIES, should_exclude
from magento_static_deploy.core.workers import WorkerPool, run_parallel
from magento_static_deploy.errors import (
    CopyFailedError,
    CreateDirFailedError,
    DeployCancelled,
    DeployError,
    DiskFullError,
    is_disk_full,
)

logger = logging.getLogger(__name__)

# Larger than Python's 64 KiB default; fewer syscalls on fast local disks.
COPY_BUFFER_SIZE = 1024 * 1024


class CopyMode(StrEnum):
    OVERWRITE = "overwrite"
    SKIP_EXISTING = "skip_existing"


class CopyStats(Protocol):
    def record_copy(self, file_bytes: int) -> None: ...


def _ensure_parent(dst: Path) -> None:
    parent = dst.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        if is_disk_full(e):
            raise DiskFullError(parent) from e
        raise CreateDirFailedError(parent, e) from e


def _copy_error(src: Path, dst: Path, exc: OSError) -> DeployError:
    if is_disk_full(exc):
        return DiskFullError(dst)
    return CopyFailedError(src, dst, exc)


def _discard(dst: Path) -> None:
    with contextlib.suppress(OSError):
        dst.unlink()


def _open_source(src: Path, dst: Path) -> BinaryIO:
    try:
        return open(src, "rb")
    except OSError as e:
        raise CopyFailedError(src, dst, e) from e


def copy_file(src: Path, dst: Path, mode: CopyMode = CopyMode.OVERWRITE) -> int | None:
    """Copy ``src`` to ``dst``, creating parent directories as needed.

    In SKIP_EXISTING mode the destination is claimed with an exclusive
    create before the source is opened, so a file shadowed by a higher
    layer is never read.

    Returns:
        Bytes copied, or None when ``mode`` is SKIP_EXISTING and ``dst``
        already existed (nothing was written).

    Raises:
        CreateDirFailedError: Parent directory could not be created.
        DiskFullError: The device ran out of space.
        CopyFailedError: Any other read or write failure.
    """
    _ensure_parent(dst)

    if mode is CopyMode.SKIP_EXISTING:
        try:
            target = open(dst, "xb")
        except FileExistsError:
            return None
        except OSError as e:
            raise _copy_error(src, dst, e) from e
        try:
            source = _open_source(src, dst)
        except CopyFailedError:
            target.close()
            _discard(dst)
            raise
    else:
        source = _open_source(src, dst)
        try:
            target = open(dst, "wb")
        except OSError as e:
            source.close()
            raise _copy_error(src, dst, e) from e

    try:
        with source, target:
            shutil.copyfileobj(source, target, COPY_BUFFER_SIZE)
            total = target.tell()
    except OSError as e:
        # A truncated file must not win a later skip-existing layer.
        _discard(dst)
        raise _copy_error(src, dst, e) from e

    return total


def iter_source_files(
    src_dir: Path,
    cancel: threading.Event,
    include_dev: bool = False,
) -> Iterator[Path]:
    """Yield regular files under ``src_dir``, following symbolic links.

    Directories reached twice through links are not descended again.
    Development directories are pruned unless ``include_dev`` is set.
    """
    visited: set[tuple[int, int]] = set()
    for dirpath, dirnames, filenames in os.walk(src_dir, followlinks=True):
        if cancel.is_set():
            raise DeployCancelled()

        try:
            st = os.stat(dirpath)
        except OSError:
            dirnames[:] = []
            continue
        key = (st.st_dev, st.st_ino)
        if key in visited:
            logger.debug("Skipping already visited directory %s", dirpath)
            dirnames[:] = []
            continue
        visited.add(key)

        if include_dev:
            dirnames.sort()
        else:
            dirnames[:] = sorted(d for d in dirnames if d not in DEV_DIRECTORIES)

        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.is_file():
                yield path


def copy_tree(
    src_dir: Path,
    dst_dir: Path,
    cancel: threading.Event,
    *,
    include_dev: bool = False,
    mode: CopyMode = CopyMode.OVERWRITE,
    pool: WorkerPool | None = None,
    stats: CopyStats | None = None,
) -> tuple[int, int]:
    """Copy every deployable file under ``src_dir`` into ``dst_dir``.

    Files keep their path relative to ``src_dir``. Copies run on ``pool``
    when given. ``stats`` is told about every file actually written.

    Returns:
        (files_copied, bytes_copied); skipped existing files are not counted.

    Raises:
        DeployCancelled: ``cancel`` was set before or during the walk, or
            before a pending file copy started. Files already copied stay.
        DeployError: The first copy failure.
    """
    if cancel.is_set():
        raise DeployCancelled()

    plan: list[tuple[Path, Path]] = []
    for path in iter_source_files(src_dir, cancel, include_dev):
        relative = path.relative_to(src_dir)
        if should_exclude(relative, include_dev):
            continue
        plan.append((path, dst_dir / relative))

    def copy_one(pair: tuple[Path, Path]) -> int | None:
        if cancel.is_set():
            raise DeployCancelled()
        copied = copy_file(pair[0], pair[1], mode)
        if copied is not None and stats is not None:
            stats.record_copy(copied)
        return copied

    results = run_parallel(pool, copy_one, plan)
    written = [size for size in results if size is not None]
    return len(written), sum(written)
