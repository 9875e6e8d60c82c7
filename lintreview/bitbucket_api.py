"""Bitbucket Code Insights request types, client interface and helpers."""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from lintreview.model import Comment, Diagnostic, Severity

HTTP_TIMEOUT = 10.0

REPORT_TYPE_BUG = "BUG"

REPORT_RESULT_PASSED = "PASSED"
REPORT_RESULT_FAILED = "FAILED"
REPORT_RESULT_PENDING = "PENDING"

ANNOTATION_TYPE_CODE_SMELL = "CODE_SMELL"

ANNOTATION_SEVERITY_HIGH = "HIGH"
ANNOTATION_SEVERITY_MEDIUM = "MEDIUM"
ANNOTATION_SEVERITY_LOW = "LOW"


@dataclass
class ReportRequest:
    """Parameters to create or update a report."""

    owner: str = ""
    repository: str = ""
    commit: str = ""
    report_id: str = ""
    type: str = ""
    title: str = ""
    reporter: str = ""
    result: str = ""
    details: str = ""
    logo_url: str = ""


@dataclass
class AnnotationsRequest:
    """Parameters to create or update annotations of a report."""

    owner: str = ""
    repository: str = ""
    commit: str = ""
    report_id: str = ""
    comments: list[Comment] = field(default_factory=list)


class APIClient(ABC):
    """Client of the Bitbucket Code Insights API."""

    @abstractmethod
    def create_or_update_report(self, req: ReportRequest) -> None:
        """Create or update the given report."""

    @abstractmethod
    def create_or_update_annotations(self, req: AnnotationsRequest) -> None:
        """Create or update annotations of a report."""


class UnexpectedResponseError(Exception):
    """The Code Insights API answered with an unexpected status code."""

    def __init__(self, code: int, body: bytes = b"") -> None:
        self.code = code
        self.body = body
        message = f"received unexpected {code} code from Bitbucket API"
        if body:
            message += " with message:\n" + body.decode("utf-8", errors="replace")
        super().__init__(message)


def external_id_from_diagnostic(diagnostic: Diagnostic) -> str:
    """Return a stable identifier of a diagnostic's content."""
    try:
        data = diagnostic.to_bytes()
    except (TypeError, ValueError):
        data = diagnostic.original_output.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def report_id(*args: str) -> str:
    """Build a report id from parts: joined by '-', lower case, spaces as '_'."""
    return "-".join(args).lower().replace(" ", "_")


def report_title(tool: str, reporter: str) -> str:
    """Return the title of a tool's report."""
    return f"[{tool}] {reporter} report"


def convert_severity(severity: Severity) -> str:
    """Map a diagnostic severity to an annotation severity, or ''."""
    return {
        Severity.INFO: ANNOTATION_SEVERITY_LOW,
        Severity.WARNING: ANNOTATION_SEVERITY_MEDIUM,
        Severity.ERROR: ANNOTATION_SEVERITY_HIGH,
    }.get(severity, "")