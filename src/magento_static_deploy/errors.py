"""Exception hierarchy for static content deployment.

Every failure the engine can report is a ``DeployError``. Per-job failures
are caught at the job boundary and carried inside a ``DeployResult``;
pre-flight failures (bad root, bad locale, bad config) propagate to the
command and halt the run before any work starts.
"""

from __future__ import annotations

import errno
from pathlib import Path


class DeployError(Exception):
    """Base exception for deployment errors."""

    pass


class RootNotFoundError(DeployError):
    """The Magento root is missing or is not a Magento installation."""

    def __init__(self, path: Path, reason: str | None = None):
        self.path = path
        self.reason = reason
        if reason:
            super().__init__(f"{reason}: {path}")
        else:
            super().__init__(f"Magento root not found: {path}")


class DiskFullError(DeployError):
    """No space left on the device holding ``path``."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"No space left on device for {path}")


class ThemeNotFoundError(DeployError):
    """No theme was discovered, or none matched the requested names."""

    def __init__(self, themes: list[str] | None = None):
        self.themes = list(themes or [])
        if self.themes:
            super().__init__(f"No matching themes found for: {', '.join(self.themes)}")
        else:
            super().__init__("No themes found")


class InvalidDescriptorError(DeployError):
    """A theme.xml or module.xml could not be read or parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid descriptor {path}: {reason}")


class CopyFailedError(DeployError):
    """Copying a single file failed for a reason other than a full disk."""

    def __init__(self, src: Path, dst: Path, cause: OSError):
        self.src = src
        self.dst = dst
        self.cause = cause
        super().__init__(f"Failed to copy {src} to {dst}: {cause.strerror or cause}")


class CreateDirFailedError(DeployError):
    """Creating a destination directory failed."""

    def __init__(self, path: Path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to create directory {path}: {cause.strerror or cause}")


class DelegationFailedError(DeployError):
    """bin/magento exited with a non-zero status."""

    def __init__(self, code: int, stderr: str):
        self.code = code
        self.stderr = stderr
        super().__init__(
            f"bin/magento setup:static-content:deploy failed with exit code {code}: "
            f"{stderr.strip()}"
        )


class InvalidLocaleError(DeployError, ValueError):
    """A user-supplied locale is not in ``xx_YY`` form."""

    def __init__(self, locale: str):
        self.locale = locale
        super().__init__(f"Invalid locale format '{locale}': expected xx_YY (e.g., en_US)")


class DeployCancelled(DeployError):
    """The run's cancellation flag was observed."""

    def __init__(self) -> None:
        super().__init__("Deployment cancelled")


class DeployIOError(DeployError):
    """Generic I/O failure (for example, bin/magento could not be spawned)."""

    def __init__(self, cause: OSError, path: Path | None = None):
        self.cause = cause
        self.path = path
        target = f" ({path})" if path else ""
        super().__init__(f"IO error{target}: {cause.strerror or cause}")


class ConfigError(DeployError):
    """A configuration file is malformed or holds wrongly typed values."""

    def __init__(self, path: Path | None, message: str):
        self.path = path
        where = f"{path}: " if path else ""
        super().__init__(f"Invalid configuration {where}{message}")


def is_disk_full(exc: OSError) -> bool:
    """Return True when ``exc`` is the platform's out-of-space signal."""
    return exc.errno == errno.ENOSPC
