"""Markdown code fence helpers.

A fence needs more backticks than any backtick run that starts a line in
the fenced code, and at least three.
"""

from __future__ import annotations

from typing import TextIO


def _count_backticks(code: str) -> int:
    return max(len(line) - len(line.lstrip("`")) for line in code.split("\n"))


def get_code_fence_length(code: str) -> int:
    """Return the number of backticks needed to fence code."""
    return max(_count_backticks(code) + 1, 3)


def code_fence(length: int) -> str:
    """Return a fence of the given length."""
    return "`" * length


def write_code_fence(stream: TextIO, length: int) -> None:
    """Write a fence of the given length to stream."""
    stream.write(code_fence(length))