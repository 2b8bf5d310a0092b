"""Check-and-merge pass over the labeled pull requests of one repository."""

from __future__ import annotations

import logging

from .config import MergerConfig, MergerError
from .filters import all_checks_passed, filter_by_label
from .github_api import GitHubAPIError, GitHubClient
from .models import (
    EvaluationResult,
    FailureKind,
    ItemFailure,
    Mergeable,
    PullRequestSnapshot,
    RunSummary,
)
from .types import RepoRef

logger = logging.getLogger(__name__)


class RetrievalError(MergerError):
    pass


class MergeRunner:
    """Runs one pass: list open pull requests, keep the labeled ones, merge the ready ones.

    Only the initial listing is fatal. Problems with a single pull request are
    recorded on its ``EvaluationResult`` and the pass moves on to the next one.
    """

    def __init__(self, client: GitHubClient, config: MergerConfig):
        self.client = client
        self.config = config

    @property
    def repo(self) -> RepoRef:
        return self.config.repository

    def fetch_pull_requests(self) -> list[PullRequestSnapshot]:
        try:
            pull_requests = self.client.list_open_pull_requests(self.repo, max_pages=self.config.max_pages)
        except GitHubAPIError as e:
            raise RetrievalError(f"Failed to retrieve pull requests from {self.repo.full_name}: {e}") from e
        logger.info("Retrieved a total of %d pull requests from %s", len(pull_requests), self.repo.full_name)
        return pull_requests

    def run(self) -> RunSummary:
        pull_requests = self.fetch_pull_requests()
        candidates = filter_by_label(pull_requests, self.config.label)
        logger.info("Found %d pull requests in %s with the label %s",
                    len(candidates), self.repo.full_name, self.config.label)

        summary = RunSummary(repository=self.repo, label=self.config.label, total_open=len(pull_requests))
        for pull_request in candidates:
            result = self.check_and_merge(pull_request)
            if result.failure is not None:
                logger.error("%s", result.failure)
            summary.results.append(result)
        return summary

    def check_and_merge(self, pull_request: PullRequestSnapshot) -> EvaluationResult:
        number = pull_request.number
        try:
            check_runs = self.client.list_check_runs(self.repo, pull_request.head_ref,
                                                     max_pages=self.config.max_pages)
        except GitHubAPIError as e:
            return EvaluationResult(number=number, failure=ItemFailure(
                kind=FailureKind.CHECK_FETCH_FAILED,
                number=number,
                message=f"failed to get check runs for pull request #{number} (branch {pull_request.head_label})",
                branch=pull_request.head_label,
                cause=str(e),
            ))
        logger.info("Found %d check runs for pull request #%d", len(check_runs), number)

        if not all_checks_passed(number, check_runs):
            logger.info("Skipping pull request #%d: checks have not all passed yet.", number)
            return EvaluationResult(number=number)

        logger.info("All checks for pull request #%d passed", number)
        failure = self._check_mergeable(pull_request)
        if failure is not None:
            return EvaluationResult(number=number, checks_passed=True, failure=failure)

        if self.config.dry_run:
            logger.info("[dry run] Would merge pull request #%d (%s) into %s",
                        number, pull_request.head_label, pull_request.base_ref)
            return EvaluationResult(number=number, checks_passed=True, dry_run=True)

        return self._merge(pull_request)

    def _check_mergeable(self, pull_request: PullRequestSnapshot) -> ItemFailure | None:
        number = pull_request.number
        if pull_request.mergeable is Mergeable.UNKNOWN:
            # The list endpoint never computes mergeability; ask for the single pull request.
            logger.debug("Mergeable state of pull request #%d unknown, fetching it", number)
            try:
                pull_request = self.client.get_pull_request(self.repo, number)
            except GitHubAPIError as e:
                return ItemFailure(
                    kind=FailureKind.NOT_MERGEABLE,
                    number=number,
                    message=f"could not determine whether pull request #{number} is mergeable",
                    branch=pull_request.head_label,
                    cause=str(e),
                )

        if pull_request.mergeable is not Mergeable.TRUE:
            return ItemFailure(
                kind=FailureKind.NOT_MERGEABLE,
                number=number,
                message=(f"pull request #{number} is not in a mergeable state "
                         f"(mergeable {pull_request.mergeable.value}, state {pull_request.mergeable_state})"),
                branch=pull_request.head_label,
                mergeable_state=pull_request.mergeable_state,
            )
        return None

    def _merge(self, pull_request: PullRequestSnapshot) -> EvaluationResult:
        number = pull_request.number
        try:
            result = self.client.merge_pull_request(
                self.repo, number, self.config.commit_message, merge_method=self.config.merge_method,
            )
        except GitHubAPIError as e:
            cause = str(e)
        else:
            if result.merged:
                logger.info("Successfully merged pull request #%d as commit %s", number, result.sha)
                return EvaluationResult(number=number, checks_passed=True, merged=True, sha=result.sha)
            cause = result.message or "merge was not performed"

        return EvaluationResult(number=number, checks_passed=True, failure=ItemFailure(
            kind=FailureKind.MERGE_FAILED,
            number=number,
            message=f"failed to merge pull request #{number}",
            branch=pull_request.head_label,
            cause=cause,
        ))
