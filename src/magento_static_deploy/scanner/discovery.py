"""Theme discovery in ``app/design/{area}/{Vendor}/{theme}/theme.xml``.

Vendor directories are scanned in parallel, so callers must not rely on
the order of the returned themes.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from magento_static_deploy.core.workers import WorkerPool, run_parallel
from magento_static_deploy.errors import DeployIOError
from magento_static_deploy.theme.descriptor import (
    THEME_DESCRIPTOR,
    classify_theme,
    parse_theme_descriptor,
)
from magento_static_deploy.theme.models import Area, Theme, ThemeType
from magento_static_deploy.theme.resolver import resolve_parent_chain

logger = logging.getLogger(__name__)


def design_path(root: Path, area: Area) -> Path:
    return root / "app" / "design" / area.value


def load_theme(theme_dir: Path, vendor: str, area: Area) -> Theme | None:
    """Build a Theme from a directory holding theme.xml, or None."""
    descriptor = theme_dir / THEME_DESCRIPTOR
    if not descriptor.is_file():
        return None

    try:
        text = descriptor.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Skipping theme with unreadable {descriptor}: {e}")
        return None

    parent = parse_theme_descriptor(text)
    theme = Theme(
        vendor=vendor,
        name=theme_dir.name,
        area=area,
        path=theme_dir,
        parent=parent,
        theme_type=classify_theme(text, [parent] if parent else []),
    )
    logger.debug(
        "Discovered %s/%s (%s, parent=%s)",
        area.value,
        theme.full_name(),
        theme.theme_type.value,
        parent,
    )
    return theme


def _scan_vendor(vendor_dir: Path, area: Area) -> list[Theme]:
    try:
        theme_dirs = sorted(child for child in vendor_dir.iterdir() if child.is_dir())
    except OSError as e:
        logger.warning(f"Cannot list {vendor_dir}: {e}")
        return []

    themes = []
    for theme_dir in theme_dirs:
        theme = load_theme(theme_dir, vendor_dir.name, area)
        if theme is not None:
            themes.append(theme)
    return themes


def discover_themes(root: Path, area: Area, pool: WorkerPool | None = None) -> list[Theme]:
    """Discover every theme of ``area`` under ``root``.

    An absent area directory yields an empty list.

    Raises:
        DeployIOError: If the area directory exists but cannot be listed.
    """
    area_dir = design_path(root, area)
    if not area_dir.is_dir():
        return []

    try:
        vendor_dirs = [child for child in area_dir.iterdir() if child.is_dir()]
    except OSError as e:
        raise DeployIOError(e, area_dir) from e

    per_vendor = run_parallel(pool, lambda vendor_dir: _scan_vendor(vendor_dir, area), vendor_dirs)
    return [theme for group in per_vendor for theme in group]


def refine_theme_types(themes: Sequence[Theme]) -> list[Theme]:
    """Re-classify Luma themes using their fully resolved ancestry.

    Discovery only sees a theme's direct parent. A theme two levels below
    a Hyva theme is Hyva as well, even if its own parent's descriptor does
    not mention the marker module.
    """
    refined: list[Theme] = []
    for theme in themes:
        if theme.theme_type is ThemeType.LUMA:
            chain = resolve_parent_chain(theme, themes)
            hyva_ancestor = any(ancestor.theme_type is ThemeType.HYVA for ancestor in chain)
            if hyva_ancestor or classify_theme("", [a.code() for a in chain]) is ThemeType.HYVA:
                logger.debug("Reclassifying %s as Hyva from its ancestry", theme.full_name())
                theme = dataclasses.replace(theme, theme_type=ThemeType.HYVA)
        refined.append(theme)
    return refined


def discover_all_themes(
    root: Path,
    areas: Iterable[Area],
    pool: WorkerPool | None = None,
) -> list[Theme]:
    """Discover themes for every area and refine their deployment type."""
    themes: list[Theme] = []
    for area in areas:
        themes.extend(discover_themes(root, area, pool))
    return refine_theme_types(themes)
