import logging

import pytest

from lintreview.commentutil import PostedComments, markdown_comment
from lintreview.model import (
    Code,
    Comment,
    Diagnostic,
    FilteredDiagnostic,
    Location,
    Severity,
    Source,
)

PREFIX = "<sub>reported by [reviewdog](https://github.com/reviewdog/reviewdog) :dog:</sub><br>"


def _comment(tool_name="", **diag):
    return Comment(tool_name=tool_name, result=FilteredDiagnostic(diagnostic=Diagnostic(**diag)))


@pytest.mark.parametrize(
    "comment, want",
    [
        (
            _comment("tool-name", message="test message 1"),
            "**[tool-name]** " + PREFIX + "test message 1",
        ),
        (
            _comment(message="test message 2 (no tool)"),
            PREFIX + "test message 2 (no tool)",
        ),
        (
            _comment(
                "global-tool-name",
                message="test message 3",
                source=Source(name="custom-tool-name"),
            ),
            "**[custom-tool-name]** " + PREFIX + "test message 3",
        ),
        (
            _comment(
                message="test message 4",
                source=Source(name="tool-name"),
                severity=Severity.WARNING,
            ),
            "\u26a0\ufe0f **[tool-name]** " + PREFIX + "test message 4",
        ),
        (
            _comment(
                message="test message 5 (code)",
                source=Source(name="tool-name"),
                code=Code(value="CODE14"),
            ),
            "**[tool-name]** <CODE14> " + PREFIX + "test message 5 (code)",
        ),
        (
            _comment(
                message="test message 6 (code with URL)",
                source=Source(name="tool-name"),
                code=Code(value="CODE14", url="https://example.com/#CODE14"),
            ),
            "**[tool-name]** <[CODE14](https://example.com/#CODE14)> "
            + PREFIX
            + "test message 6 (code with URL)",
        ),
    ],
)
def test_markdown_comment(comment, want):
    assert markdown_comment(comment) == want


def test_posted_comments():
    posted = PostedComments()
    posted.add_posted_comment("a.go", 3, "body")
    comment = _comment(message="m", location=Location(path="a.go"))
    assert posted.is_posted(comment, 3, "body")
    assert not posted.is_posted(comment, 3, "other body")
    assert not posted.is_posted(comment, 4, "body")
    other = _comment(message="m", location=Location(path="b.go"))
    assert not posted.is_posted(other, 3, "body")


def test_posted_comments_multiple_bodies_same_line():
    posted = PostedComments()
    posted.add_posted_comment("a.go", 1, "first")
    posted.add_posted_comment("a.go", 1, "second")
    comment = _comment(location=Location(path="a.go"))
    assert posted.is_posted(comment, 1, "first")
    assert posted.is_posted(comment, 1, "second")


def test_is_posted_does_not_create_entries(caplog):
    posted = PostedComments()
    comment = _comment(location=Location(path="a.go"))
    assert not posted.is_posted(comment, 1, "x")
    with caplog.at_level(logging.DEBUG, logger="lintreview.commentutil"):
        posted.debug_log()
    assert caplog.records == []


def test_debug_log(caplog):
    posted = PostedComments()
    posted.add_posted_comment("a.go", 7, "body")
    with caplog.at_level(logging.DEBUG, logger="lintreview.commentutil"):
        posted.debug_log()
    assert "[debug] posted: a.go:7" in caplog.text