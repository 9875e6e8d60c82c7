"""Comment and diff services for Gerrit changes."""

from __future__ import annotations

import json
import os
import subprocess
import threading
from typing import Any
from urllib.parse import quote

import requests

from lintreview.model import BulkCommentService, Comment, DiffService
from lintreview.serviceutil import GitWorkdirError, git_rel_workdir

STRIP_DIFF_RESULT = 1
_TIMEOUT = 30.0
# Gerrit prefixes JSON responses with this line to defeat XSSI.
_XSSI_PREFIX = ")]}"


def _decode(resp: requests.Response) -> Any:
    text = resp.text
    if text.startswith(_XSSI_PREFIX):
        _, _, text = text.partition("\n")
    return json.loads(text) if text.strip() else {}


class GerritClient:
    """Minimal client for the Gerrit REST API."""

    def __init__(self, base_url: str, session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()

    @staticmethod
    def _quote(value: str) -> str:
        return quote(value, safe="~")

    def get_change_detail(
        self, change_id: str, fields: list[str] | None = None
    ) -> dict[str, Any]:
        """Return the details of a change, with the requested extra fields."""
        params = {"o": list(fields)} if fields else None
        resp = self.session.get(
            f"{self.base_url}/changes/{self._quote(change_id)}/detail",
            params=params,
            timeout=_TIMEOUT,
        )
        resp.raise_for_status()
        return _decode(resp)

    def set_review(
        self, change_id: str, revision_id: str, review: dict[str, Any]
    ) -> dict[str, Any]:
        """Post a review on a revision of a change."""
        resp = self.session.post(
            f"{self.base_url}/changes/{self._quote(change_id)}"
            f"/revisions/{self._quote(revision_id)}/review",
            json=review,
            timeout=_TIMEOUT,
        )
        resp.raise_for_status()
        return _decode(resp)


def _run_git(args: list[str], cwd: str | None) -> bytes:
    return subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, check=True
    ).stdout


def _join(wd: str, path: str) -> str:
    parts = [p for p in (wd, path) if p]
    if not parts:
        return ""
    return os.path.normpath(os.path.join(*parts))


class ChangeDiff(DiffService):
    """Provides the diff of a Gerrit change by running git locally."""

    def __init__(
        self,
        client: GerritClient | None,
        branch: str,
        change_id: str,
        cwd: str | None = None,
    ) -> None:
        try:
            self.workdir = git_rel_workdir(cwd)
        except (GitWorkdirError, OSError) as err:
            raise GitWorkdirError(f"ChangeDiff needs 'git' command: {err}") from err
        self.client = client
        self.branch = branch
        self.change_id = change_id
        self._cwd = cwd

    def diff(self) -> bytes:
        """Return the diff of the change's current revision against the branch."""
        change = self.client.get_change_detail(self.change_id, ["CURRENT_REVISION"])
        return self._git_diff(change.get("current_revision", ""), self.branch)

    def _git_diff(self, base_sha: str, target_sha: str) -> bytes:
        try:
            out = _run_git(["merge-base", target_sha, base_sha], self._cwd)
        except (subprocess.CalledProcessError, OSError) as err:
            raise RuntimeError(f"failed to get merge-base commit: {err}") from err
        merge_base = out.decode("utf-8").strip("\n")
        try:
            return _run_git(["diff", "--find-renames", merge_base, base_sha], self._cwd)
        except (subprocess.CalledProcessError, OSError) as err:
            raise RuntimeError(f"failed to run git diff: {err}") from err

    def strip(self) -> int:
        """Return 1, the strip of git diff paths."""
        return STRIP_DIFF_RESULT


class ChangeReviewCommenter(BulkCommentService):
    """Holds comments and posts them as one review on a Gerrit change."""

    def __init__(
        self,
        client: GerritClient | None,
        change_id: str,
        revision_id: str,
        cwd: str | None = None,
    ) -> None:
        try:
            self.workdir = git_rel_workdir(cwd)
        except (GitWorkdirError, OSError) as err:
            raise GitWorkdirError(
                f"ChangeReviewCommenter needs 'git' command: {err}"
            ) from err
        self.client = client
        self.change_id = change_id
        self.revision_id = revision_id
        self._lock = threading.Lock()
        self._comments: list[Comment] = []

    def post(self, comment: Comment) -> None:
        """Hold a comment, its path made relative to the repository root."""
        location = comment.result.diagnostic.location
        location.path = _join(self.workdir, location.path)
        with self._lock:
            self._comments.append(comment)

    def flush(self) -> None:
        """Post every held comment that lies in a diff file as one review."""
        with self._lock:
            comments: dict[str, list[dict[str, Any]]] = {}
            for comment in self._comments:
                if not comment.result.in_diff_file:
                    continue
                diagnostic = comment.result.diagnostic
                location = diagnostic.location
                rng = location.range
                line = rng.start.line if rng is not None and rng.start is not None else 0
                entry: dict[str, Any] = {"message": diagnostic.message}
                if line:
                    entry["line"] = line
                comments.setdefault(location.path, []).append(entry)
            self.client.set_review(
                self.change_id, self.revision_id, {"comments": comments}
            )