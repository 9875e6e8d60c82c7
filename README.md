# lintreview

`lintreview` takes findings of linters and compilers, already turned into
`Diagnostic` objects, and reports them where reviewers look: as a review on a
Gerrit change, as Code Insights reports and annotations on Bitbucket Server,
or as GitHub Actions log annotations.

## Installation

```sh
pip install lintreview
```

For running the test suite:

```sh
pip install "lintreview[test]"
pytest
```

## Modules

| Module | Purpose |
| --- | --- |
| `lintreview.model` | `Diagnostic`, `Position`, `Range`, `Location`, `Code`, `Source`, `Suggestion`, `Severity`, `FilteredDiagnostic`, `Comment`, and the `CommentService`, `BulkCommentService` and `DiffService` interfaces |
| `lintreview.resultmap` | Thread-safe `ResultMap` and `FilteredResultMap` to gather results of concurrent lint jobs; `Result.check_unexpected_failure()` |
| `lintreview.codefence` | `get_code_fence_length`, `code_fence`, `write_code_fence`: Markdown code fences long enough to wrap any code |
| `lintreview.commentutil` | `markdown_comment` to render comment bodies, `PostedComments` to avoid posting duplicates |
| `lintreview.serviceutil` | `git_rel_workdir` and `find_git_root`: the working directory relative to the repository root, found without running git |
| `lintreview.githubutils` | Markdown links to file locations and GitHub Actions logging commands (`GitHubActionLogWriter`) |
| `lintreview.gerrit` | `GerritClient`, `ChangeReviewCommenter` and `ChangeDiff` for Gerrit changes |
| `lintreview.bitbucket_api` | Code Insights request types, the `APIClient` interface, `UnexpectedResponseError` and id/title/severity helpers |
| `lintreview.bitbucket_annotator` | `ReportAnnotator`: one Code Insights report per tool, with batched annotations |
| `lintreview.bitbucket_server` | `ServerAPIClient` for the Bitbucket Server Code Insights API |
| `lintreview.trigger_depup` | The `lintreview-trigger-depup` command |

## How reporting works

Every reporter is a *comment service*: call `post(comment)` for each finding.
Services that talk to a remote API hold the comments and send them when
`flush()` is called. Services that fetch the change under review also provide
`diff()` (the unified diff as bytes) and `strip()` (the number of leading path
components, 1 for git diffs).

```python
from lintreview.model import Comment, Diagnostic, FilteredDiagnostic, Location, Position, Range

diagnostic = Diagnostic(
    message="unused variable",
    location=Location(path="main.py", range=Range(start=Position(line=14))),
)
comment = Comment(
    result=FilteredDiagnostic(diagnostic=diagnostic, in_diff_file=True),
    tool_name="flake8",
)
```

### Gerrit

```python
from lintreview.gerrit import ChangeReviewCommenter, GerritClient

client = GerritClient("https://gerrit.example.com")
commenter = ChangeReviewCommenter(client, "change-id", "revision-id")
commenter.post(comment)
commenter.flush()
```

Both `ChangeReviewCommenter` and `ChangeDiff` must be created inside a git
checkout (or given one as `cwd`); they raise `GitWorkdirError` otherwise.
`post` makes the comment's path relative to the repository root. `flush`
sends the comments whose `in_diff_file` is true as a single review, grouped
by path. `GerritClient` sends no credentials of its own; pass a configured
`requests.Session` if the server needs them.

`ChangeDiff(client, branch, change_id).diff()` asks Gerrit for the change's
current revision and then runs `git merge-base` and
`git diff --find-renames` locally, so `git` must be on `PATH`.

### Bitbucket Server Code Insights

```python
from lintreview.bitbucket_annotator import ReportAnnotator
from lintreview.bitbucket_server import ServerAPIClient, build_server_api_context

user = "user"
password = "password"
context = build_server_api_context("https://bitbucket.example.com", user, password, "")
client = ServerAPIClient(context)
annotator = ReportAnnotator(client, "PROJECT", "repo", "0123abcd", ["flake8", "mypy"])
annotator.post(comment)
annotator.flush()
```

`build_server_api_context` raises `ValueError` if the URL has no scheme or
host. An access token, when given, is sent as a bearer token and takes
precedence over user and password.

`ReportAnnotator` asks for a pending report for every tool named up front
(the Server API has no pending state, so `ServerAPIClient` skips those). On
`flush()`, tools without findings get a passed report; the others get a failed
report and their annotations in batches of 100. Findings with identical
content are posted once. The server client replaces a report by deleting it
first, which also drops its old annotations. Unexpected HTTP status codes
surface as `RuntimeError` wrapping `UnexpectedResponseError`.

Any other Code Insights backend can be used by implementing
`lintreview.bitbucket_api.APIClient`.

### GitHub Actions annotations

```python
from lintreview.githubutils import GitHubActionLogWriter

writer = GitHubActionLogWriter("warning")
writer.post(comment)
writer.flush()
```

Each comment is written to standard output (or the given stream) as a
`::warning` or `::error` logging command with file, line and column. The
diagnostic's severity overrides the default level. At the tenth annotation a
one-time warning about GitHub's annotation limits is written, and `flush()`
raises `TooManyAnnotationsError` when ten or more were reported.

## Helpers

```python
from lintreview.codefence import get_code_fence_length
from lintreview.commentutil import markdown_comment

get_code_fence_length("```\ncode\n```")   # 4
markdown_comment(comment)                # "**[flake8]** <sub>reported by ...</sub><br>unused variable"
```

`lintreview.githubutils.linked_markdown_diagnostic(owner, repo, sha, diagnostic)`
renders a diagnostic as a Markdown link to its file and line on GitHub
followed by its message.

## Dispatching dependency updates

The `lintreview-trigger-depup` command sends a `depup` repository dispatch
event to every repository of a GitHub organisation whose name starts with
`action-` (among the 100 most recently updated). The token is read from the
`DEPUP_GITHUB_API_TOKEN` environment variable.

```sh
DEPUP_GITHUB_API_TOKEN=token lintreview-trigger-depup --org my-org
```

The command exits with status 1 if the token is missing or any dispatch fails.

## What this package does not do

- It has no command that runs a linter, parses its output or filters findings
  against a diff; the caller builds `Comment` objects and decides which to post.
- It has no service that posts review comments on GitHub pull requests, and
  none for GitLab merge requests; GitHub support is limited to Actions log
  annotations and Markdown helpers.
- It has no client for Bitbucket Cloud; only the Bitbucket Server Code Insights
  API is implemented.