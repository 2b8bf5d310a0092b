from __future__ import annotations

import pytest

from pr_merger.config import MergerConfig
from pr_merger.github_api import GitHubAPIError
from pr_merger.models import CheckRunSnapshot, Mergeable, MergeResult, PullRequestSnapshot
from pr_merger.types import RepoRef


def make_pr(number, labels=("deps",), mergeable=Mergeable.TRUE, state="clean", head_ref=None):
    head_ref = head_ref or f"branch-{number}"
    return PullRequestSnapshot(
        number=number,
        head_ref=head_ref,
        head_label=f"acme:{head_ref}",
        base_ref="main",
        labels=tuple(labels),
        mergeable=mergeable,
        mergeable_state=state,
    )


def make_run(run_id, status="completed", conclusion="success"):
    return CheckRunSnapshot(id=run_id, status=status, conclusion=conclusion, name=f"check-{run_id}")


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient that records every call."""

    def __init__(self, pull_requests=(), check_runs=None, details=None, list_error=None,
                 check_errors=None, merge_errors=None, merge_results=None):
        self.pull_requests = list(pull_requests)
        self.check_runs = check_runs or {}
        self.details = details or {}
        self.list_error = list_error
        self.check_errors = check_errors or {}
        self.merge_errors = merge_errors or {}
        self.merge_results = merge_results or {}
        self.calls = []

    def list_open_pull_requests(self, repo, max_pages=10):
        self.calls.append(("list", repo.full_name))
        if self.list_error:
            raise self.list_error
        return list(self.pull_requests)

    def list_check_runs(self, repo, ref, max_pages=10):
        self.calls.append(("checks", ref))
        if ref in self.check_errors:
            raise self.check_errors[ref]
        return list(self.check_runs.get(ref, []))

    def get_pull_request(self, repo, number):
        self.calls.append(("get", number))
        detail = self.details.get(number)
        if isinstance(detail, Exception):
            raise detail
        if detail is None:
            raise GitHubAPIError(f"GitHub API error 404: pull request {number} not found", 404)
        return detail

    def merge_pull_request(self, repo, number, commit_message, merge_method="merge"):
        self.calls.append(("merge", number, commit_message, merge_method))
        if number in self.merge_errors:
            raise self.merge_errors[number]
        return self.merge_results.get(number, MergeResult(sha=f"sha{number:040d}", merged=True))

    def called(self, kind):
        return [call for call in self.calls if call[0] == kind]


@pytest.fixture
def config():
    return MergerConfig(repository=RepoRef("acme", "widgets"), token="t0ken", label="deps")
