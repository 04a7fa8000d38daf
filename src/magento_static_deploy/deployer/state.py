"""Run-scoped state: job and result records plus shared counters."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import StrEnum

from magento_static_deploy.errors import DeployError
from magento_static_deploy.theme.models import LocaleCode, Theme


class DeployStatus(StrEnum):
    """Outcome of one (theme, locale) job."""

    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"
    DELEGATED = "delegated"


class _Counter:
    """An integer counter with its own lock.

    Each counter is guarded independently so file, byte and error updates
    from different workers never wait on one another.
    """

    __slots__ = ("_lock", "_value")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def add(self, amount: int = 1) -> None:
        with self._lock:
            self._value += amount

    @property
    def value(self) -> int:
        return self._value


class DeployStats:
    """Counters shared by every worker for the duration of one run."""

    def __init__(self) -> None:
        self._files = _Counter()
        self._bytes = _Counter()
        self._errors = _Counter()

    def record_copy(self, file_bytes: int) -> None:
        self._files.add()
        self._bytes.add(file_bytes)

    def record_error(self) -> None:
        self._errors.add()

    @property
    def files_copied(self) -> int:
        return self._files.value

    @property
    def bytes_copied(self) -> int:
        return self._bytes.value

    @property
    def errors(self) -> int:
        return self._errors.value


@dataclass(frozen=True)
class DeployJob:
    """One unit of parallel work.

    ``theme`` is the same object for every locale job of a theme.
    """

    theme: Theme
    locale: LocaleCode

    def label(self) -> str:
        return f"{self.theme.area.value}/{self.theme.full_name()}/{self.locale}"


@dataclass
class DeployResult:
    job: DeployJob
    status: DeployStatus
    file_count: int = 0
    duration: float = 0.0
    error: DeployError | None = field(default=None)

    @property
    def succeeded(self) -> bool:
        return self.status in (DeployStatus.SUCCESS, DeployStatus.DELEGATED)
