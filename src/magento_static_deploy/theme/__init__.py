"""Theme model: codes, locales, areas, descriptors and inheritance.

Usage:
    from magento_static_deploy.theme import Area, LocaleCode, resolve_parent_chain

    locale = LocaleCode.validated("en_US")
    chain = resolve_parent_chain(theme, all_themes)
"""

from magento_static_deploy.theme.descriptor import (
    HYVA_MARKER_MODULE,
    HYVA_VENDOR,
    THEME_DESCRIPTOR,
    classify_theme,
    load_descriptor,
    parse_module_descriptor,
    parse_theme_descriptor,
)
from magento_static_deploy.theme.models import (
    Area,
    LocaleCode,
    Theme,
    ThemeCode,
    ThemeType,
)
from magento_static_deploy.theme.resolver import MAX_PARENT_DEPTH, resolve_parent_chain

__all__ = [
    # Value types
    "Area",
    "LocaleCode",
    "Theme",
    "ThemeCode",
    "ThemeType",
    # Descriptors
    "HYVA_MARKER_MODULE",
    "HYVA_VENDOR",
    "THEME_DESCRIPTOR",
    "classify_theme",
    "load_descriptor",
    "parse_module_descriptor",
    "parse_theme_descriptor",
    # Inheritance
    "MAX_PARENT_DEPTH",
    "resolve_parent_chain",
]
