"""Theme discovery and layered source scanning for a Magento root."""

from magento_static_deploy.scanner.discovery import (
    discover_all_themes,
    discover_themes,
    load_theme,
    refine_theme_types,
)
from magento_static_deploy.scanner.sources import (
    FileSource,
    Library,
    ThemeModuleOverride,
    ThemeWeb,
    VendorModule,
    collect_file_sources,
    get_module_name,
    scan_library_sources,
    scan_theme_module_overrides,
    scan_theme_web_sources,
    scan_vendor_module_sources,
)

__all__ = [
    # Discovery
    "discover_all_themes",
    "discover_themes",
    "load_theme",
    "refine_theme_types",
    # Sources
    "FileSource",
    "Library",
    "ThemeModuleOverride",
    "ThemeWeb",
    "VendorModule",
    "collect_file_sources",
    "get_module_name",
    "scan_library_sources",
    "scan_theme_module_overrides",
    "scan_theme_web_sources",
    "scan_vendor_module_sources",
]
