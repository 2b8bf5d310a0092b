"""Tests for API payload parsing."""

from pr_merger.models import (
    CheckRunSnapshot,
    EvaluationResult,
    FailureKind,
    ItemFailure,
    Mergeable,
    MergeResult,
    PullRequestSnapshot,
    RunSummary,
)
from pr_merger.types import RepoRef

PULL_PAYLOAD = {
    "number": 42,
    "title": "Bump requests",
    "html_url": "https://github.com/acme/widgets/pull/42",
    "draft": False,
    "labels": [{"id": 1, "name": "deps"}, {"id": 2, "name": "python"}],
    "head": {"ref": "dependabot/pip/requests", "label": "acme:dependabot/pip/requests"},
    "base": {"ref": "main"},
    "mergeable": True,
    "mergeable_state": "clean",
}


class TestMergeable:
    def test_from_api(self):
        assert Mergeable.from_api(True) is Mergeable.TRUE
        assert Mergeable.from_api(False) is Mergeable.FALSE
        assert Mergeable.from_api(None) is Mergeable.UNKNOWN


class TestPullRequestSnapshot:
    def test_from_api(self):
        pr = PullRequestSnapshot.from_api(PULL_PAYLOAD)
        assert pr.number == 42
        assert pr.labels == ("deps", "python")
        assert pr.head_ref == "dependabot/pip/requests"
        assert pr.head_label == "acme:dependabot/pip/requests"
        assert pr.base_ref == "main"
        assert pr.mergeable is Mergeable.TRUE
        assert pr.mergeable_state == "clean"

    def test_list_payload_without_mergeable(self):
        payload = {k: v for k, v in PULL_PAYLOAD.items() if k not in ("mergeable", "mergeable_state")}
        pr = PullRequestSnapshot.from_api(payload)
        assert pr.mergeable is Mergeable.UNKNOWN
        assert pr.mergeable_state == "unknown"

    def test_missing_labels(self):
        pr = PullRequestSnapshot.from_api({"number": 1, "labels": None, "head": {"ref": "x"}})
        assert pr.labels == ()
        assert pr.head_label == "x"


class TestCheckRunSnapshot:
    def test_from_api(self):
        run = CheckRunSnapshot.from_api({"id": 9, "name": "tests", "status": "completed", "conclusion": "success"})
        assert run.is_completed is True
        assert run.is_successful is True

    def test_pending_has_no_conclusion(self):
        run = CheckRunSnapshot.from_api({"id": 9, "status": "queued", "conclusion": None})
        assert run.is_completed is False
        assert run.is_successful is False


class TestMergeResult:
    def test_from_api(self):
        result = MergeResult.from_api({"sha": "6dcb09b5", "merged": True, "message": "Pull Request successfully merged"})
        assert result.sha == "6dcb09b5"
        assert result.merged is True


class TestRunSummary:
    def test_counts(self):
        failure = ItemFailure(kind=FailureKind.MERGE_FAILED, number=3, message="failed to merge pull request #3")
        summary = RunSummary(repository=RepoRef("acme", "widgets"), label="deps", total_open=5, results=[
            EvaluationResult(number=1, checks_passed=True, merged=True, sha="a"),
            EvaluationResult(number=2),
            EvaluationResult(number=3, checks_passed=True, failure=failure),
        ])
        assert summary.candidates == 3
        assert summary.failures == [failure]
        assert [r.number for r in summary.merged] == [1]
        assert [r.number for r in summary.skipped] == [2]
        assert summary.ok is False

    def test_failure_str_includes_cause(self):
        failure = ItemFailure(kind=FailureKind.MERGE_FAILED, number=3,
                              message="failed to merge pull request #3", cause="409 conflict")
        assert str(failure) == "failed to merge pull request #3: 409 conflict"
