"""Reading and interpreting theme.xml and module.xml descriptors.

The lenient ``parse_*`` helpers never raise: an absent, empty or malformed
value is simply "no value", because a theme without a parent or a package
without a module declaration is normal. ``load_descriptor`` is the strict
reader underneath them and raises ``InvalidDescriptorError``.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterable
from pathlib import Path

from magento_static_deploy.errors import InvalidDescriptorError
from magento_static_deploy.theme.models import ThemeCode, ThemeType

THEME_DESCRIPTOR = "theme.xml"
MODULE_DESCRIPTOR = "module.xml"

# Heuristic markers: a theme is treated as Hyva when its descriptor mentions
# the Hyva theme module or any ancestor lives in the Hyva vendor namespace.
HYVA_MARKER_MODULE = "Hyva_Theme"
HYVA_VENDOR = "Hyva"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _parse_xml(text: str, source: Path | None = None) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as e:
        raise InvalidDescriptorError(source or Path("<string>"), str(e)) from e


def load_descriptor(path: Path) -> tuple[str, ET.Element]:
    """Read and parse an XML descriptor.

    Returns:
        The raw text (needed for classification) and the parsed root element.

    Raises:
        InvalidDescriptorError: If the file cannot be read or is not XML.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidDescriptorError(path, str(e)) from e
    return text, _parse_xml(text, path)


def parent_from_element(root: ET.Element) -> ThemeCode | None:
    for element in root.iter():
        if _local_name(element.tag) == "parent":
            return ThemeCode.parse((element.text or "").strip())
    return None


def parse_theme_descriptor(text: str) -> ThemeCode | None:
    """Extract the ``<parent>Vendor/Name</parent>`` code from theme.xml text."""
    try:
        root = _parse_xml(text)
    except InvalidDescriptorError:
        return None
    return parent_from_element(root)


def module_name_from_element(root: ET.Element) -> str | None:
    for element in root.iter():
        if _local_name(element.tag) == "module":
            return element.get("name") or None
    return None


def parse_module_descriptor(text: str) -> str | None:
    """Return the ``name`` attribute of the first ``<module>`` element."""
    try:
        root = _parse_xml(text)
    except InvalidDescriptorError:
        return None
    return module_name_from_element(root)


def classify_theme(descriptor_text: str, parent_chain_codes: Iterable[ThemeCode | str]) -> ThemeType:
    """Decide how a theme is deployed.

    This is a heuristic, not a schema check: Hyva themes do not declare
    themselves formally, so the marker module name and the ancestry's
    vendor are the signals used.
    """
    if HYVA_MARKER_MODULE in descriptor_text:
        return ThemeType.HYVA
    for code in parent_chain_codes:
        if str(code).startswith(f"{HYVA_VENDOR}/"):
            return ThemeType.HYVA
    return ThemeType.LUMA

