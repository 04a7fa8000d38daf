from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from magento_static_deploy.core.config import CONFIG_ENV_VAR
from magento_static_deploy.theme.models import Area, Theme, ThemeCode, ThemeType

THEME_XML = """<?xml version="1.0"?>
<theme xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
       xsi:noNamespaceSchemaLocation="urn:magento:framework:Config/etc/theme.xsd">
    <title>{title}</title>{parent}{marker}
</theme>
"""

MODULE_XML = """<?xml version="1.0"?>
<config xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
        xsi:noNamespaceSchemaLocation="urn:magento:framework:Module/etc/module.xsd">
    <module name="{name}"/>
</config>
"""


class MagentoTree:
    """Builds a minimal Magento installation under a temporary directory."""

    def __init__(self, root: Path):
        self.root = root

    def write(self, relative: str | Path, content: str | bytes = "") -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    def add_theme(
        self,
        vendor: str,
        name: str,
        area: str = "frontend",
        parent: str | None = None,
        hyva_marker: bool = False,
    ) -> Path:
        theme_dir = self.root / "app" / "design" / area / vendor / name
        xml = THEME_XML.format(
            title=name,
            parent=f"\n    <parent>{parent}</parent>" if parent else "",
            marker="\n    <!-- requires Hyva_Theme -->" if hyva_marker else "",
        )
        self.write(theme_dir.relative_to(self.root) / "theme.xml", xml)
        return theme_dir

    def add_module(
        self,
        vendor: str,
        package: str,
        module: str,
        etc_dir: str = "etc",
    ) -> Path:
        package_dir = self.root / "vendor" / vendor / package
        self.write(package_dir.relative_to(self.root) / etc_dir / "module.xml", MODULE_XML.format(name=module))
        return package_dir

    def output(self, vendor: str, name: str, locale: str = "en_US", area: str = "frontend") -> Path:
        return self.root / "pub" / "static" / area / vendor / name / locale


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path_factory, monkeypatch):
    """Keep the developer's own config file out of every test."""
    missing = tmp_path_factory.mktemp("user-config") / "config.yaml"
    monkeypatch.setenv(CONFIG_ENV_VAR, str(missing))


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    yield
    package_logger = logging.getLogger("magento_static_deploy")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture()
def magento(tmp_path: Path) -> MagentoTree:
    """A Magento root with app/etc/env.php and nothing else."""
    root = tmp_path / "magento"
    tree = MagentoTree(root)
    tree.write("app/etc/env.php", "<?php return [];\n")
    return tree


@pytest.fixture()
def make_theme(tmp_path: Path):
    """Factory for in-memory Theme values (no files are written)."""

    def _make(
        code: str,
        parent: str | None = None,
        area: Area = Area.FRONTEND,
        theme_type: ThemeType = ThemeType.HYVA,
    ) -> Theme:
        vendor, name = code.split("/")
        return Theme(
            vendor=vendor,
            name=name,
            area=area,
            path=tmp_path / "app" / "design" / area.value / vendor / name,
            parent=ThemeCode.parse(parent) if parent else None,
            theme_type=theme_type,
        )

    return _make
