"""Label filtering and check run aggregation."""

import logging
from typing import Iterable, Sequence

from .models import CheckRunSnapshot, PullRequestSnapshot

logger = logging.getLogger(__name__)


def has_label(pull_request: PullRequestSnapshot, label: str) -> bool:
    """Exact, case-sensitive match against the pull request's label names."""
    return any(name == label for name in pull_request.labels)


def filter_by_label(pull_requests: Iterable[PullRequestSnapshot], label: str) -> list[PullRequestSnapshot]:
    """Keep the pull requests carrying ``label``, in their original order."""
    return [pr for pr in pull_requests if has_label(pr, label)]


def all_checks_passed(number: int, check_runs: Sequence[CheckRunSnapshot]) -> bool:
    """True when every check run completed with conclusion ``success``.

    Every run is inspected and logged, even after the first failure, so the log
    shows the full picture for the pull request. An empty list passes.
    """
    if not check_runs:
        logger.warning("No check runs found for pull request #%d; treating checks as passed.", number)
        return True

    passed = True
    for run in check_runs:
        if run.is_successful:
            logger.info("Check run %d (%s) for pull request #%d successfully completed.",
                        run.id, run.name, number)
        elif run.is_completed:
            logger.info(
                "Check run %d (%s) for pull request #%d was not successful (conclusion %s). Not merging it.",
                run.id, run.name, number, run.conclusion,
            )
            passed = False
        else:
            logger.info(
                "Check run %d (%s) for pull request #%d not yet completed (status %s). Not merging it.",
                run.id, run.name, number, run.status,
            )
            passed = False
    return passed
