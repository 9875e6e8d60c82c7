import json

import pytest
import requests
import responses

from lintreview.bitbucket_api import (
    AnnotationsRequest,
    ReportRequest,
    UnexpectedResponseError,
    external_id_from_diagnostic,
)
from lintreview.bitbucket_server import (
    ServerAPIClient,
    ServerAPIHelper,
    ServerContext,
    build_server_api_context,
    server_variables,
)
from lintreview.model import (
    Code,
    Comment,
    Diagnostic,
    FilteredDiagnostic,
    Location,
    Position,
    Range,
    Severity,
)

REPORT_URL = (
    "https://bb.example.com/rest/insights/1.0/projects/o/repos/r/commits/c/reports/rid"
)


@pytest.mark.parametrize(
    "url, protocol, domain",
    [
        ("http://bitbucket.host.tld", "http", "bitbucket.host.tld"),
        ("https://host.tld", "https", "host.tld"),
        ("http://host.tld/bitbucket", "http", "host.tld/bitbucket"),
        ("https://host.tld/bit/bu/cket", "https", "host.tld/bit/bu/cket"),
        ("http://localhost:7990", "http", "localhost:7990"),
        ("https://localhost:7990/bb", "https", "localhost:7990/bb"),
    ],
)
def test_server_variables(url, protocol, domain):
    variables = server_variables(url)
    assert variables["protocol"] == protocol
    assert variables["bitbucketDomain"] == domain


@pytest.mark.parametrize(
    "url",
    [":::", "http//bitbucket.my-company.com", "http::/bitbucket.my-company.com"],
)
def test_server_variables_invalid(url):
    with pytest.raises(ValueError):
        server_variables(url)


def test_build_context_with_credentials():
    password = "password"
    context = build_server_api_context("https://bb.example.com", "user", password, "token")
    assert context.protocol == "https"
    assert context.bitbucket_domain == "bb.example.com"
    assert context.user == "user"
    assert context.password == password
    assert context.token == "token"
    assert context.base_url == "https://bb.example.com/rest/insights/1.0"


def test_build_context_invalid_url():
    with pytest.raises(ValueError):
        build_server_api_context(":::", "", "", "")


def _comment(severity=Severity.UNKNOWN_SEVERITY, code=None):
    return Comment(
        tool_name="tool",
        result=FilteredDiagnostic(
            diagnostic=Diagnostic(
                message="msg",
                location=Location(path="main.go", range=Range(start=Position(line=5))),
                severity=severity,
                code=code,
            )
        ),
    )


def _report_req(result="FAILED"):
    return ReportRequest(
        owner="o",
        repository="r",
        commit="c",
        report_id="rid",
        type="BUG",
        title="title",
        reporter="reviewdog",
        result=result,
        details="details",
        logo_url="logo",
    )


@pytest.mark.parametrize("result, expected", [("FAILED", "FAIL"), ("PASSED", "PASS")])
def test_build_report_converts_result(result, expected):
    report = ServerAPIHelper().build_report(_report_req(result))
    assert report["result"] == expected
    assert report["title"] == "title"
    assert report["logoUrl"] == "logo"
    assert report["details"] == "details"


def test_build_annotation_defaults_to_low_and_zero_based_line():
    comment = _comment()
    (annotation,) = ServerAPIHelper().build_annotations([comment])["annotations"]
    assert annotation["line"] == 4
    assert annotation["severity"] == "LOW"
    assert annotation["message"] == "[tool] msg"
    assert annotation["type"] == "CODE_SMELL"
    assert annotation["externalId"] == external_id_from_diagnostic(
        comment.result.diagnostic
    )
    assert "link" not in annotation


def test_build_annotation_severity_and_link():
    comment = _comment(Severity.WARNING, Code(value="X", url="link-url"))
    (annotation,) = ServerAPIHelper().build_annotations([comment])["annotations"]
    assert annotation["severity"] == "MEDIUM"
    assert annotation["link"] == "link-url"


def _client(token=""):
    return ServerAPIClient(ServerContext("https", "bb.example.com", token=token))


def test_pending_report_is_skipped():
    with responses.RequestsMock() as rsps:
        returned = _client().create_or_update_report(_report_req("PENDING"))
        call_count = len(rsps.calls)
    assert returned is None
    assert call_count == 0


def test_report_is_deleted_then_put():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.DELETE, REPORT_URL, status=204)
        rsps.add(responses.PUT, REPORT_URL, json={}, status=200)
        _client("token").create_or_update_report(_report_req())
        methods = [call.request.method for call in rsps.calls]
        put_request = rsps.calls[1].request
    assert methods == ["DELETE", "PUT"]
    assert put_request.headers["Authorization"] == "Bearer token"
    assert json.loads(put_request.body) == ServerAPIHelper().build_report(_report_req())


def test_delete_failure_stops_report():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.DELETE, REPORT_URL, body=b"nope", status=500)
        with pytest.raises(RuntimeError, match="failed to delete code insights report") as excinfo:
            _client().create_or_update_report(_report_req())
        assert len(rsps.calls) == 1
    cause = excinfo.value.__cause__
    assert isinstance(cause, UnexpectedResponseError)
    assert cause.code == 500


def test_put_failure():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.DELETE, REPORT_URL, status=204)
        rsps.add(responses.PUT, REPORT_URL, status=400)
        with pytest.raises(RuntimeError, match="failed to create code insights report"):
            _client().create_or_update_report(_report_req())


def test_create_annotations():
    comments = [_comment()]
    req = AnnotationsRequest(
        owner="o", repository="r", commit="c", report_id="rid", comments=comments
    )
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, REPORT_URL + "/annotations", status=204)
        _client().create_or_update_annotations(req)
        body = json.loads(rsps.calls[0].request.body)
    assert body == ServerAPIHelper().build_annotations(comments)


def test_create_annotations_transport_error():
    req = AnnotationsRequest(owner="o", repository="r", commit="c", report_id="rid")
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.POST,
            REPORT_URL + "/annotations",
            body=requests.ConnectionError("down"),
        )
        with pytest.raises(RuntimeError, match="bitbucket Server API error"):
            _client().create_or_update_annotations(req)