"""Theme, locale and area types for Magento 2 static deployment.

``ThemeCode`` and ``LocaleCode`` are immutable value objects over interned
strings, so the many copies that flow through a run compare and hash
cheaply. ``Theme`` is frozen once discovery builds it and is shared by
reference across all locale jobs for that theme.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from magento_static_deploy.errors import InvalidLocaleError

LOCALE_PATTERN = re.compile(r"[a-z]{2}_[A-Z]{2}", re.ASCII)


@dataclass(frozen=True)
class ThemeCode:
    """Theme identifier in ``Vendor/Name`` form (e.g. ``Hyva/default``)."""

    value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", sys.intern(self.value))

    @classmethod
    def of(cls, vendor: str, name: str) -> ThemeCode:
        return cls(f"{vendor}/{name}")

    @classmethod
    def parse(cls, text: str) -> ThemeCode | None:
        """Parse ``Vendor/Name``; returns None unless there is exactly one
        slash with a non-empty part on each side."""
        parts = text.split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            return None
        return cls(text)

    @property
    def vendor(self) -> str:
        return self.value.split("/", 1)[0]

    @property
    def name(self) -> str:
        return self.value.split("/", 1)[1] if "/" in self.value else ""

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LocaleCode:
    """Locale identifier such as ``en_US``.

    The constructor does not validate; it re-wraps values that were
    already checked. User input must go through :meth:`validated`.
    """

    value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", sys.intern(self.value))

    @classmethod
    def validated(cls, text: str) -> LocaleCode:
        """Return a LocaleCode for ``text`` or raise InvalidLocaleError."""
        if not LOCALE_PATTERN.fullmatch(text):
            raise InvalidLocaleError(text)
        return cls(text)

    def is_valid_format(self) -> bool:
        return LOCALE_PATTERN.fullmatch(self.value) is not None

    def __str__(self) -> str:
        return self.value


class Area(StrEnum):
    """Magento deployment area."""

    FRONTEND = "frontend"
    ADMINHTML = "adminhtml"

    @classmethod
    def parse(cls, text: str) -> Area | None:
        try:
            return cls(text)
        except ValueError:
            return None


class ThemeType(StrEnum):
    """Deployment strategy for a theme."""

    HYVA = "hyva"  # direct file copy
    LUMA = "luma"  # delegated to bin/magento for LESS/RequireJS


@dataclass(frozen=True)
class Theme:
    """A Magento theme discovered under ``app/design/{area}/{Vendor}/{Name}``."""

    vendor: str
    name: str
    area: Area
    path: Path
    parent: ThemeCode | None = None
    theme_type: ThemeType = ThemeType.LUMA

    def code(self) -> ThemeCode:
        return ThemeCode.of(self.vendor, self.name)

    def full_name(self) -> str:
        return f"{self.vendor}/{self.name}"
