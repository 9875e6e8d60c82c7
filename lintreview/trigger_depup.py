"""Dispatch a ``depup`` event to every ``action-`` repository of an org."""

from __future__ import annotations

import argparse
import logging
import os
import sys

import requests

DEFAULT_ORG = "reviewdog"
DEFAULT_API_URL = "https://api.github.com"
TOKEN_ENV = "DEPUP_GITHUB_API_TOKEN"
_TIMEOUT = 30.0

log = logging.getLogger(__name__)


def run(org: str = DEFAULT_ORG, token: str = "", api_url: str = DEFAULT_API_URL) -> None:
    """Dispatch depup to the org's action repositories; raise the last failure."""
    if not token:
        raise ValueError(f"{TOKEN_ENV} is empty")
    base = api_url.rstrip("/")
    session = requests.Session()
    session.headers["Authorization"] = f"Bearer {token}"

    # Only the first 100 repositories are considered.
    resp = session.get(
        f"{base}/orgs/{org}/repos",
        params={"sort": "updated", "direction": "desc", "per_page": 100},
        timeout=_TIMEOUT,
    )
    resp.raise_for_status()

    last_error: Exception | None = None
    for repo in resp.json():
        name = repo.get("name", "")
        if not name.startswith("action-"):
            continue
        log.info("Dispatch depup to %s/%s...", org, name)
        try:
            dispatch = session.post(
                f"{base}/repos/{org}/{name}/dispatches",
                json={"event_type": "depup"},
                timeout=_TIMEOUT,
            )
            dispatch.raise_for_status()
        except requests.RequestException as err:
            log.warning("Dispatch depup to %s/%s failed: %s", org, name, err)
            last_error = err
    if last_error is not None:
        raise last_error


def main(argv: list[str] | None = None) -> int:
    """Command entry point; return the exit status."""
    parser = argparse.ArgumentParser(description="Trigger depup in action repositories.")
    parser.add_argument("-org", "--org", default=DEFAULT_ORG, help="target org name")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    try:
        run(args.org, os.environ.get(TOKEN_ENV, ""))
    except Exception as err:
        print(err, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())