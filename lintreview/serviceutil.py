"""Locate the git working tree without running git."""

from __future__ import annotations

import os


class GitWorkdirError(Exception):
    """The git repository of a directory cannot be determined."""


def _is_git_dir(path: str) -> bool:
    for marker in ("HEAD", "objects", "refs"):
        try:
            os.stat(os.path.join(path, marker))
        except FileNotFoundError:
            return False
    return True


def _find_dot_git_path(path: str) -> str:
    path = os.path.abspath(path)
    while True:
        dot_git = os.path.join(path, ".git")
        try:
            info = os.stat(dot_git)
        except FileNotFoundError:
            pass
        else:
            if not os.path.isdir(dot_git):
                raise GitWorkdirError(".git exist but is not a directory")
            del info
            return dot_git

        if _is_git_dir(path):
            return path

        parent = os.path.dirname(path)
        if parent == path:
            raise GitWorkdirError(".git not found")
        path = parent


def find_git_root(path: str) -> str:
    """Return the root directory of the repository containing path."""
    return os.path.dirname(_find_dot_git_path(path))


def git_rel_workdir(cwd: str | None = None) -> str:
    """Return cwd relative to its repository root, like ``git rev-parse --show-prefix``.

    The result is empty at the root and ends with a path separator otherwise.
    """
    cwd = os.path.abspath(os.getcwd() if cwd is None else cwd)
    root = find_git_root(cwd)
    if not cwd.startswith(root):
        raise GitWorkdirError(f"cannot get GitRelWorkdir: cwd={cwd!r}, root={root!r}")
    rel = cwd[len(root):].strip(os.sep)
    return rel + os.sep if rel else ""