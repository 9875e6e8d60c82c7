"""Client for the Bitbucket Server Code Insights API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlsplit

import requests

from lintreview.bitbucket_api import (
    ANNOTATION_SEVERITY_LOW,
    ANNOTATION_TYPE_CODE_SMELL,
    HTTP_TIMEOUT,
    REPORT_RESULT_FAILED,
    REPORT_RESULT_PENDING,
    AnnotationsRequest,
    APIClient,
    ReportRequest,
    UnexpectedResponseError,
    convert_severity,
    external_id_from_diagnostic,
)
from lintreview.model import Comment, Diagnostic


def server_variables(url: str) -> dict[str, str]:
    """Split a Bitbucket Server URL into its protocol and domain (with path)."""
    try:
        parsed = urlsplit(url)
    except ValueError as err:
        raise ValueError(f"failed to parse Bitbucket Server URL: {err}") from err
    if not parsed.scheme:
        raise ValueError(f"unable to determine scheme of Bitbucket Server URL: {url!r}")
    host = parsed.netloc.rpartition("@")[2]
    if not host:
        raise ValueError(f"unable to determine host of Bitbucket Server URL: {url!r}")
    return {"protocol": parsed.scheme, "bitbucketDomain": host + parsed.path}


@dataclass
class ServerContext:
    """Where the Bitbucket Server is and how to authenticate to it."""

    protocol: str
    bitbucket_domain: str
    user: str = ""
    password: str = ""
    token: str = ""

    @property
    def base_url(self) -> str:
        """Root URL of the Code Insights REST API."""
        return f"{self.protocol}://{self.bitbucket_domain.rstrip('/')}/rest/insights/1.0"


def build_server_api_context(
    url: str, user: str, password: str, token: str
) -> ServerContext:
    """Build the context to call the Server API with; raise ValueError on a bad URL."""
    variables = server_variables(url)
    context = ServerContext(variables["protocol"], variables["bitbucketDomain"])
    if user and password:
        context.user = user
        context.password = password
    if token:
        context.token = token
    return context


def _start_line(diagnostic: Diagnostic) -> int:
    location = diagnostic.location
    if location is None or location.range is None or location.range.start is None:
        return 0
    return location.range.start.line


class ServerAPIHelper:
    """Builds request bodies for the Server Code Insights API."""

    def build_report(self, req: ReportRequest) -> dict[str, Any]:
        """Return the report object for a report request."""
        return {
            "title": req.title,
            "reporter": req.reporter,
            "logoUrl": req.logo_url,
            "result": self._convert_result(req.result),
            "details": req.details,
        }

    def build_annotations(self, comments: list[Comment]) -> dict[str, Any]:
        """Return the annotations list object for comments."""
        return {"annotations": [self._build_annotation(c) for c in comments]}

    def _build_annotation(self, comment: Comment) -> dict[str, Any]:
        diagnostic = comment.result.diagnostic
        data: dict[str, Any] = {
            "path": diagnostic.location.path if diagnostic.location else "",
            "line": _start_line(diagnostic) - 1,
            "message": f"[{comment.tool_name}] {diagnostic.message}",
            "severity": convert_severity(diagnostic.severity) or ANNOTATION_SEVERITY_LOW,
            "externalId": external_id_from_diagnostic(diagnostic),
            "type": ANNOTATION_TYPE_CODE_SMELL,
        }
        if diagnostic.code is not None and diagnostic.code.url:
            data["link"] = diagnostic.code.url
        return data

    @staticmethod
    def _convert_result(result: str) -> str:
        return "FAIL" if result == REPORT_RESULT_FAILED else "PASS"


class ServerAPIClient(APIClient):
    """Bitbucket Server Code Insights API client."""

    def __init__(
        self, context: ServerContext, session: requests.Session | None = None
    ) -> None:
        self.context = context
        self.session = session if session is not None else requests.Session()
        self._helper = ServerAPIHelper()

    def _report_url(self, owner: str, repo: str, commit: str, rid: str) -> str:
        owner_s, repo_s, commit_s, rid_s = (
            quote(part, safe="") for part in (owner, repo, commit, rid)
        )
        return (
            f"{self.context.base_url}/projects/{owner_s}/repos/{repo_s}"
            f"/commits/{commit_s}/reports/{rid_s}"
        )

    def _send(self, method: str, url: str, body: Any, expected: int) -> None:
        kwargs: dict[str, Any] = {"timeout": HTTP_TIMEOUT}
        if body is not None:
            kwargs["json"] = body
        # An access token takes precedence over basic credentials.
        if self.context.token:
            kwargs["headers"] = {"Authorization": f"Bearer {self.context.token}"}
        elif self.context.user and self.context.password:
            kwargs["auth"] = (self.context.user, self.context.password)
        try:
            resp = self.session.request(method, url, **kwargs)
        except requests.RequestException as err:
            raise RuntimeError(f"bitbucket Server API error: {err}") from err
        if resp.status_code != expected:
            raise UnexpectedResponseError(resp.status_code, resp.content or b"")

    def create_or_update_report(self, req: ReportRequest) -> None:
        """Replace the report, dropping its old annotations.

        Pending reports are not supported by the Server API and are skipped.
        """
        if req.result == REPORT_RESULT_PENDING:
            return
        url = self._report_url(req.owner, req.repository, req.commit, req.report_id)
        try:
            self._send("DELETE", url, None, 204)
        except (RuntimeError, UnexpectedResponseError) as err:
            raise RuntimeError(
                f"failed to delete code insights report: {err}"
            ) from err
        try:
            self._send("PUT", url, self._helper.build_report(req), 200)
        except (RuntimeError, UnexpectedResponseError) as err:
            raise RuntimeError(
                f"failed to create code insights report: {err}"
            ) from err

    def create_or_update_annotations(self, req: AnnotationsRequest) -> None:
        """Add annotations to a report."""
        url = self._report_url(req.owner, req.repository, req.commit, req.report_id)
        try:
            self._send(
                "POST",
                url + "/annotations",
                self._helper.build_annotations(req.comments),
                204,
            )
        except (RuntimeError, UnexpectedResponseError) as err:
            raise RuntimeError(f"failed to create annotations: {err}") from err