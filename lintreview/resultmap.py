"""Thread-safe maps holding results of concurrently run tools."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from lintreview.model import Diagnostic, FilteredDiagnostic


class UnexpectedFailureError(Exception):
    """A tool failed and produced no findings."""


@dataclass
class Result:
    """Diagnostics of one tool run, with the error of the command if any.

    A non-None ``cmd_error`` does not mean failure: linters commonly exit
    with a non-zero status when they find something.
    """

    name: str = ""
    level: str = ""
    diagnostics: list[Diagnostic] = field(default_factory=list)
    cmd_error: BaseException | None = None

    def check_unexpected_failure(self) -> None:
        """Raise UnexpectedFailureError if the command failed with no findings."""
        if self.cmd_error is not None and not self.diagnostics:
            raise UnexpectedFailureError(
                f"{self.name} failed with zero findings: The command itself "
                f"failed ({self.cmd_error}) or reviewdog cannot parse the results"
            )


@dataclass
class FilteredResult:
    """Filtered diagnostics of one tool run."""

    level: str = ""
    filtered_diagnostics: list[FilteredDiagnostic] = field(default_factory=list)


class _LockedDict:
    """A dict guarded by a lock, checking the type of stored values."""

    def __init__(self, owner: str, value_type: type) -> None:
        self._owner = owner
        self._value_type = value_type
        self._lock = threading.Lock()
        self._data: dict = {}

    def store(self, key: str, value) -> None:
        if not isinstance(value, self._value_type):
            raise TypeError(
                f"stored type in {self._owner} is invalid: {type(value).__name__}"
            )
        with self._lock:
            self._data[key] = value

    def load(self, key: str):
        with self._lock:
            try:
                return self._data[key]
            except KeyError:
                raise KeyError(
                    f'fail to get the value of key "{key}" from results'
                ) from None

    def items(self) -> list:
        with self._lock:
            return list(self._data.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class ResultMap:
    """Thread-safe map from tool name to Result."""

    def __init__(self) -> None:
        self._map = _LockedDict("ResultMap", Result)

    def store(self, key: str, result: Result) -> None:
        """Save a result under key, replacing any previous one."""
        self._map.store(key, result)

    def load(self, key: str) -> Result:
        """Return the result stored under key; raise KeyError if absent."""
        return self._map.load(key)

    def items(self) -> list[tuple[str, Result]]:
        """Return a snapshot of (key, result) pairs."""
        return self._map.items()

    def __len__(self) -> int:
        return len(self._map)


class FilteredResultMap:
    """Thread-safe map from tool name to FilteredResult."""

    def __init__(self) -> None:
        self._map = _LockedDict("FilteredResultMap", FilteredResult)

    def store(self, key: str, result: FilteredResult) -> None:
        """Save a result under key, replacing any previous one."""
        self._map.store(key, result)

    def load(self, key: str) -> FilteredResult:
        """Return the result stored under key; raise KeyError if absent."""
        return self._map.load(key)

    def items(self) -> list[tuple[str, FilteredResult]]:
        """Return a snapshot of (key, result) pairs."""
        return self._map.items()

    def __len__(self) -> int:
        return len(self._map)