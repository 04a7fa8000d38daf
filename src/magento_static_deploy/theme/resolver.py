"""Parent chain resolution for theme inheritance.

A theme's ``parent`` names another theme by code. Resolution walks those
links within the theme's own area, nearest ancestor first:

    Custom/child -> Hyva/default -> Hyva/reset

A link that names a theme which was not discovered (or lives in another
area) ends the chain there; that is tolerated, not an error. Cycles and
runaway depth are cut off with a warning.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from magento_static_deploy.theme.models import Theme, ThemeCode

logger = logging.getLogger(__name__)

MAX_PARENT_DEPTH = 32


def resolve_parent_chain(theme: Theme, all_themes: Sequence[Theme]) -> list[Theme]:
    """Return the ancestors of ``theme``, nearest first.

    Args:
        theme: Theme whose ancestry is resolved.
        all_themes: Every discovered theme (any area).

    Returns:
        Ancestor themes from ``all_themes``; empty for a root theme.
    """
    index: dict[ThemeCode, Theme] = {}
    for candidate in all_themes:
        if candidate.area == theme.area:
            index.setdefault(candidate.code(), candidate)

    chain: list[Theme] = []
    seen: set[ThemeCode] = {theme.code()}
    current = theme.parent

    while current is not None:
        if current in seen:
            logger.warning(
                "Theme inheritance cycle at %s while resolving %s; stopping",
                current,
                theme.full_name(),
            )
            break
        if len(chain) >= MAX_PARENT_DEPTH:
            logger.warning(
                "Parent chain of %s exceeds %d themes; stopping",
                theme.full_name(),
                MAX_PARENT_DEPTH,
            )
            break

        parent = index.get(current)
        if parent is None:
            logger.debug(
                "Parent %s of %s not found in %s area",
                current,
                theme.full_name(),
                theme.area,
            )
            break

        chain.append(parent)
        seen.add(current)
        current = parent.parent

    return chain
