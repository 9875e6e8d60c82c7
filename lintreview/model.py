"""Diagnostic data model and the interfaces that reports are sent through."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from enum import IntEnum


class Severity(IntEnum):
    """Severity of a diagnostic."""

    UNKNOWN_SEVERITY = 0
    ERROR = 1
    WARNING = 2
    INFO = 3


@dataclass
class Position:
    """A position in a file; line and column are 1-based, 0 means unset."""

    line: int = 0
    column: int = 0


@dataclass
class Range:
    """A span between two positions; either end may be missing."""

    start: Position | None = None
    end: Position | None = None


@dataclass
class Location:
    """Where a diagnostic points to."""

    path: str = ""
    range: Range | None = None


@dataclass
class Code:
    """Rule code of a diagnostic, with an optional documentation link."""

    value: str = ""
    url: str = ""


@dataclass
class Source:
    """The tool that produced a diagnostic."""

    name: str = ""
    url: str = ""


@dataclass
class Suggestion:
    """A proposed replacement text for a range."""

    range: Range | None = None
    text: str = ""


@dataclass
class Diagnostic:
    """A single finding reported by a linter or compiler."""

    message: str = ""
    location: Location = field(default_factory=Location)
    severity: Severity = Severity.UNKNOWN_SEVERITY
    source: Source | None = None
    code: Code | None = None
    suggestions: list[Suggestion] = field(default_factory=list)
    original_output: str = ""

    def to_bytes(self) -> bytes:
        """Return a deterministic binary encoding of the diagnostic."""
        data = asdict(self)
        data["severity"] = int(self.severity)
        return json.dumps(
            data, sort_keys=True, separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")


@dataclass
class FilteredDiagnostic:
    """A diagnostic together with what is known of its place in the diff."""

    diagnostic: Diagnostic = field(default_factory=Diagnostic)
    should_report: bool = False
    in_diff_file: bool = False
    in_diff_context: bool = False
    first_suggestion_in_diff_context: bool = False
    source_lines: dict[int, str] = field(default_factory=dict)
    old_path: str = ""
    old_line: int = 0


@dataclass
class Comment:
    """A reported result, as a comment to post."""

    result: FilteredDiagnostic = field(default_factory=FilteredDiagnostic)
    tool_name: str = ""


class CommentService(ABC):
    """Something that posts comments."""

    @abstractmethod
    def post(self, comment: Comment) -> None:
        """Post or hold one comment."""


class BulkCommentService(CommentService):
    """A comment service that sends held comments all at once on flush."""

    @abstractmethod
    def flush(self) -> None:
        """Send every comment that has not been sent yet."""


class DiffService(ABC):
    """Something that provides a unified diff."""

    @abstractmethod
    def diff(self) -> bytes:
        """Return the diff text."""

    @abstractmethod
    def strip(self) -> int:
        """Return how many leading path components the diff paths carry."""