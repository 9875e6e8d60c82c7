"""GitHub helpers: Markdown links to diagnostics and Actions log annotations."""

from __future__ import annotations

import sys
import threading
from typing import TextIO

from lintreview.model import Comment, Diagnostic, Position, Severity, BulkCommentService

MAX_LOGGING_ANNOTATIONS_PER_STEP = 10

_TOO_MANY_ANNOTATIONS_MESSAGE = """reviewdog: Too many results (annotations) in diff.
You may miss some annotations due to GitHub limitation for annotation created by logging command.
Please check GitHub Actions log console to see all results.

Limitation:
- 10 warning annotations and 10 error annotations per step
- 50 annotations per job (sum of annotations from all the steps)
- 50 annotations per run (separate from the job annotations, these annotations aren't created by users)

Source: https://github.community/t5/GitHub-Actions/Maximum-number-of-annotations-that-can-be-created-using-GitHub/m-p/39085"""

_warn_lock = threading.Lock()
_warned = False


class TooManyAnnotationsError(Exception):
    """More annotations were reported than GitHub shows for one step."""


def _start(diagnostic: Diagnostic) -> Position:
    location = diagnostic.location
    if location is None or location.range is None or location.range.start is None:
        return Position()
    return location.range.start


def _path(diagnostic: Diagnostic) -> str:
    return diagnostic.location.path if diagnostic.location is not None else ""


def path_link(owner: str, repo: str, sha: str, path: str, line: int) -> str:
    """Build a link to a file (and line) of a repository at a commit."""
    sha = sha or "master"
    fragment = f"#L{line}" if line > 0 else ""
    return f"http://github.com/{owner}/{repo}/blob/{sha}/{path}{fragment}"


def basic_location_format(diagnostic: Diagnostic) -> str:
    """Format the location of a diagnostic as ``path|line col column|``."""
    start = _start(diagnostic)
    out = _path(diagnostic) + "|"
    if start.line:
        out += str(start.line)
        if start.column:
            out += f" col {start.column}"
    return out + "|"


def linked_markdown_diagnostic(
    owner: str, repo: str, sha: str, diagnostic: Diagnostic
) -> str:
    """Return Markdown linking the diagnostic's location, followed by its message."""
    path = _path(diagnostic)
    if not path:
        return diagnostic.message
    loc = basic_location_format(diagnostic)
    link = path_link(owner, repo, sha, path, _start(diagnostic).line)
    return f"[{loc}]({link}) {diagnostic.message}"


def _escape_data(text: str) -> str:
    return text.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(text: str) -> str:
    return _escape_data(text).replace(":", "%3A").replace(",", "%2C")


def _issue(stream: TextIO, command: str, message: str, props: dict[str, object]) -> None:
    prop_text = ",".join(
        f"{key}={_escape_property(str(value))}" for key, value in props.items()
    )
    head = f"::{command} {prop_text}" if prop_text else f"::{command}"
    stream.write(f"{head}::{_escape_data(message)}\n")


def report_as_github_actions_log(
    tool_name: str,
    default_level: str,
    diagnostic: Diagnostic,
    stream: TextIO | None = None,
) -> None:
    """Write the diagnostic as a GitHub Actions logging command."""
    stream = sys.stdout if stream is None else stream
    message = (
        f"[{tool_name}] reported by reviewdog \U0001f436\n{diagnostic.message}"
        f"\n\nRaw Output:\n{diagnostic.original_output}"
    )
    start = _start(diagnostic)
    props: dict[str, object] = {}
    if _path(diagnostic):
        props["file"] = _path(diagnostic)
    if start.line:
        props["line"] = start.line
    if start.column:
        props["col"] = start.column

    level = default_level
    if diagnostic.severity == Severity.ERROR:
        level = "error"
    elif diagnostic.severity in (Severity.INFO, Severity.WARNING):
        level = "warning"

    if level in ("warning", "info"):
        _issue(stream, "warning", message, props)
    elif level in ("error", ""):
        _issue(stream, "error", message, props)
    else:
        _issue(stream, "error", f"Unknown level: {level}", {})
        _issue(stream, "error", message, props)


def warn_too_many_annotation_once(stream: TextIO | None = None) -> None:
    """Warn about GitHub's annotation limits, once per process."""
    global _warned
    with _warn_lock:
        if _warned:
            return
        _warned = True
    _issue(sys.stdout if stream is None else stream, "error", _TOO_MANY_ANNOTATIONS_MESSAGE, {})


class GitHubActionLogWriter(BulkCommentService):
    """Reports comments as GitHub Actions annotations through logging commands."""

    def __init__(self, level: str, stream: TextIO | None = None) -> None:
        self.level = level
        self.report_num = 0
        self._stream = stream

    def post(self, comment: Comment) -> None:
        self.report_num += 1
        if self.report_num == MAX_LOGGING_ANNOTATIONS_PER_STEP:
            warn_too_many_annotation_once(self._stream)
        report_as_github_actions_log(
            comment.tool_name, self.level, comment.result.diagnostic, self._stream
        )

    def flush(self) -> None:
        """Raise TooManyAnnotationsError if too many annotations were reported."""
        if self.report_num > 9:
            raise TooManyAnnotationsError(
                "GitHubActionLogWriter: reported too many annotation "
                f"(N={self.report_num})"
            )