"""Comment service that reports results as Bitbucket Code Insights reports."""

from __future__ import annotations

import contextlib
import os
import threading

from lintreview.bitbucket_api import (
    REPORT_RESULT_FAILED,
    REPORT_RESULT_PASSED,
    REPORT_RESULT_PENDING,
    REPORT_TYPE_BUG,
    AnnotationsRequest,
    APIClient,
    ReportRequest,
    external_id_from_diagnostic,
    report_id,
    report_title,
)
from lintreview.model import BulkCommentService, Comment

LOGO_URL = "https://avatars1.githubusercontent.com/in/12131"
REPORTER = "reviewdog"
ANNOTATIONS_BATCH_SIZE = 100

_DETAILS = {
    REPORT_RESULT_PASSED: "Great news! Reviewdog couldn't spot any issues!",
    REPORT_RESULT_PENDING: "Please wait for Reviewdog to finish checking your code for issues.",
}
_DEFAULT_DETAILS = "Woof-Woof! This report generated for you by reviewdog."


def _join_slash(wd: str, path: str) -> str:
    joined = os.path.join(wd, path) if wd or path else ""
    if not joined:
        return ""
    return os.path.normpath(joined).replace(os.sep, "/")


class ReportAnnotator(BulkCommentService):
    """Holds comments per tool and sends them as one report per tool on flush."""

    def __init__(
        self,
        client: APIClient,
        owner: str,
        repo: str,
        sha: str,
        runners: list[str] | None = None,
    ) -> None:
        self._client = client
        self._owner = owner
        self._repo = repo
        self._sha = sha
        self._wd = ""
        self._lock = threading.Lock()
        self._comments: dict[str, list[Comment]] = {}
        self._seen: set[str] = set()

        # Every known tool gets a report, a passed one if it finds nothing.
        for runner in runners or ():
            if not runner:
                continue
            self._comments[runner] = []
            with contextlib.suppress(Exception):
                self._create_or_update_report(
                    report_id(runner, REPORTER),
                    report_title(runner, REPORTER),
                    REPORT_RESULT_PENDING,
                )

    def post(self, comment: Comment) -> None:
        """Hold a comment, dropping duplicates of one already held."""
        location = comment.result.diagnostic.location
        location.path = _join_slash(self._wd, location.path)
        with self._lock:
            comment_id = external_id_from_diagnostic(comment.result.diagnostic)
            if comment_id not in self._seen:
                self._comments.setdefault(comment.tool_name, []).append(comment)
                self._seen.add(comment_id)

    def flush(self) -> None:
        """Create each tool's report and send its annotations in batches."""
        with self._lock:
            for tool, comments in self._comments.items():
                rid = report_id(tool, REPORTER)
                title = report_title(tool, REPORTER)
                if not comments:
                    self._create_or_update_report(rid, title, REPORT_RESULT_PASSED)
                    continue

                self._create_or_update_report(rid, title, REPORT_RESULT_FAILED)
                for start in range(0, len(comments), ANNOTATIONS_BATCH_SIZE):
                    req = AnnotationsRequest(
                        owner=self._owner,
                        repository=self._repo,
                        commit=self._sha,
                        report_id=rid,
                        comments=comments[start:start + ANNOTATIONS_BATCH_SIZE],
                    )
                    try:
                        self._client.create_or_update_annotations(req)
                    except Exception as err:
                        raise RuntimeError(f"failed to post annotations: {err}") from err

    def _create_or_update_report(self, rid: str, title: str, status: str) -> None:
        req = ReportRequest(
            report_id=rid,
            owner=self._owner,
            repository=self._repo,
            commit=self._sha,
            type=REPORT_TYPE_BUG,
            title=title,
            reporter=REPORTER,
            result=status,
            details=_DETAILS.get(status, _DEFAULT_DETAILS),
            logo_url=LOGO_URL,
        )
        self._client.create_or_update_report(req)