"""Layered file sources for a theme deployment.

Layers are returned highest priority first and copied in that order with
skip-existing semantics, so earlier layers win:

1. Theme module overrides -- app/design/{area}/{Vendor}/{theme}/{Module_Name}/web/
2. Theme web              -- app/design/{area}/{Vendor}/{theme}/web/
3. Each ancestor, nearest first: its module overrides, then its web
4. Vendor modules         -- vendor/{vendor}/{package}/view/{area}/web/,
                             src/view/{area}/web/, view/base/web/,
                             src/view/base/web/
5. Library                -- lib/web/

A layer whose directory does not exist is left out.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from magento_static_deploy.core.workers import WorkerPool, run_parallel
from magento_static_deploy.errors import InvalidDescriptorError
from magento_static_deploy.theme.descriptor import (
    MODULE_DESCRIPTOR,
    load_descriptor,
    module_name_from_element,
)
from magento_static_deploy.theme.models import Area, Theme

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Source variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FileSource:
    """One directory that may contribute static files."""

    path: Path

    @property
    def dest_subpath(self) -> str | None:
        """Sub-directory of the output the layer lands in (None = output root)."""
        return None

    def destination(self, output_dir: Path) -> Path:
        subpath = self.dest_subpath
        return output_dir / subpath if subpath else output_dir


@dataclass(frozen=True)
class ThemeWeb(FileSource):
    theme: str


@dataclass(frozen=True)
class Library(FileSource):
    pass


@dataclass(frozen=True)
class VendorModule(FileSource):
    module: str

    @property
    def dest_subpath(self) -> str | None:
        return self.module


@dataclass(frozen=True)
class ThemeModuleOverride(FileSource):
    theme: str
    module: str

    @property
    def dest_subpath(self) -> str | None:
        return self.module


# ---------------------------------------------------------------------------
# Module descriptors
# ---------------------------------------------------------------------------

def get_module_name(package_path: Path) -> str | None:
    """Read a vendor package's module name from its module.xml.

    ``etc/module.xml`` wins over ``src/etc/module.xml``. A package with
    neither, or with an unreadable one, has no module name.
    """
    for candidate in (
        package_path / "etc" / MODULE_DESCRIPTOR,
        package_path / "src" / "etc" / MODULE_DESCRIPTOR,
    ):
        if not candidate.is_file():
            continue
        try:
            _text, root = load_descriptor(candidate)
        except InvalidDescriptorError as e:
            logger.debug(f"Skipping package: {e}")
            return None
        return module_name_from_element(root)
    return None


# ---------------------------------------------------------------------------
# Per-layer scans
# ---------------------------------------------------------------------------

def _subdirectories(path: Path) -> list[Path]:
    try:
        return sorted(child for child in path.iterdir() if child.is_dir())
    except OSError:
        return []


def scan_theme_module_overrides(theme: Theme) -> list[FileSource]:
    """Module override layers of one theme (``Vendor_Module/web`` dirs)."""
    sources: list[FileSource] = []
    for child in _subdirectories(theme.path):
        if "_" not in child.name:
            continue
        web = child / "web"
        if web.is_dir():
            sources.append(
                ThemeModuleOverride(path=web, theme=theme.full_name(), module=child.name)
            )
    return sources


def scan_theme_web_sources(theme: Theme) -> list[FileSource]:
    web = theme.path / "web"
    if web.is_dir():
        return [ThemeWeb(path=web, theme=theme.full_name())]
    return []


def scan_library_sources(root: Path) -> list[FileSource]:
    lib = root / "lib" / "web"
    if lib.is_dir():
        return [Library(path=lib)]
    return []


def _package_web_dirs(package_path: Path, area: Area) -> list[Path]:
    return [
        package_path / "view" / area.value / "web",
        package_path / "src" / "view" / area.value / "web",
        package_path / "view" / "base" / "web",
        package_path / "src" / "view" / "base" / "web",
    ]


def _scan_vendor_package(package_path: Path, area: Area) -> list[FileSource]:
    module = get_module_name(package_path)
    if module is None:
        logger.debug("No module name for %s; skipping package", package_path)
        return []
    return [
        VendorModule(path=web, module=module)
        for web in _package_web_dirs(package_path, area)
        if web.is_dir()
    ]


def scan_vendor_module_sources(
    root: Path,
    area: Area,
    pool: WorkerPool | None = None,
) -> list[FileSource]:
    """Module asset layers from ``vendor/{vendor}/{package}``, sorted by path."""
    vendor_root = root / "vendor"
    if not vendor_root.is_dir():
        return []

    packages = [
        package
        for vendor_dir in _subdirectories(vendor_root)
        for package in _subdirectories(vendor_dir)
    ]
    per_package = run_parallel(pool, lambda package: _scan_vendor_package(package, area), packages)
    return [source for group in per_package for source in group]


def collect_file_sources(
    theme: Theme,
    parent_chain: Sequence[Theme],
    root: Path,
    pool: WorkerPool | None = None,
) -> list[FileSource]:
    """Every layer for ``theme``, highest priority first."""
    sources: list[FileSource] = []

    sources.extend(scan_theme_module_overrides(theme))
    sources.extend(scan_theme_web_sources(theme))

    for ancestor in parent_chain:
        sources.extend(scan_theme_module_overrides(ancestor))
        sources.extend(scan_theme_web_sources(ancestor))

    sources.extend(scan_vendor_module_sources(root, theme.area, pool))
    sources.extend(scan_library_sources(root))

    logger.debug("Collected %d source layer(s) for %s", len(sources), theme.full_name())
    return sources
