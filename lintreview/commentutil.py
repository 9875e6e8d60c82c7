"""Comment body rendering and tracking of already posted comments."""

from __future__ import annotations

import logging
from collections import defaultdict

from lintreview.model import Comment, Severity

logger = logging.getLogger(__name__)

BODY_PREFIX = (
    "<sub>reported by [reviewdog](https://github.com/reviewdog/reviewdog) "
    ":dog:</sub><br>"
)

_SEVERITY_MARKS = {
    Severity.ERROR: "\U0001f6ab",
    Severity.WARNING: "\u26a0\ufe0f",
    Severity.INFO: "\U0001f4dd",
}


class PostedComments:
    """Comment bodies already posted, keyed by path and line number."""

    def __init__(self) -> None:
        self._bodies: defaultdict[str, defaultdict[int, list[str]]] = defaultdict(
            lambda: defaultdict(list)
        )

    def is_posted(self, comment: Comment, line_num: int, body: str) -> bool:
        """Whether a comment with the same path, line and body was posted."""
        path = comment.result.diagnostic.location.path
        lines = self._bodies.get(path)
        if lines is None:
            return False
        return body in lines.get(line_num, ())

    def add_posted_comment(self, path: str, line_num: int, body: str) -> None:
        """Record a posted comment."""
        self._bodies[path][line_num].append(body)

    def debug_log(self) -> None:
        """Log every posted location at debug level."""
        for path, lines in self._bodies.items():
            for line in lines:
                logger.debug("[debug] posted: %s:%d", path, line)


def _tool_name(comment: Comment) -> str:
    source = comment.result.diagnostic.source
    if source is not None and source.name:
        return source.name
    return comment.tool_name


def markdown_comment(comment: Comment) -> str:
    """Render the Markdown body of a comment."""
    diagnostic = comment.result.diagnostic
    parts = []
    mark = _SEVERITY_MARKS.get(diagnostic.severity)
    if mark:
        parts.append(f"{mark} ")
    tool = _tool_name(comment)
    if tool:
        parts.append(f"**[{tool}]** ")
    code = diagnostic.code
    if code is not None and code.value:
        if code.url:
            parts.append(f"<[{code.value}]({code.url})> ")
        else:
            parts.append(f"<{code.value}> ")
    parts.append(BODY_PREFIX)
    parts.append(diagnostic.message)
    return "".join(parts)