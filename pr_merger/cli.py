from __future__ import annotations

import argparse
import logging
import os
from typing import Sequence

from rich.logging import RichHandler
from rich.markup import escape

from .config import (
    DEFAULT_MAX_PAGES,
    DEFAULT_MERGE_METHOD,
    MERGE_METHODS,
    REPOSITORY_ENV_VAR,
    TOKEN_ENV_VAR,
    MergerConfig,
    MergerError,
)
from .display import console, print_summary
from .github_api import GitHubClient
from .merger import MergeRunner

logger = logging.getLogger("pr_merger")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pr-merger",
        description=(
            "Merge open pull requests carrying a label once all their check runs"
            " have passed. Intended to run on a schedule."
        ),
    )
    parser.add_argument(
        "--token",
        default=None,
        help=f"GitHub token used for authentication. Uses {TOKEN_ENV_VAR} if not provided.",
    )
    parser.add_argument(
        "--repository",
        default=None,
        help=(f"GitHub repository to merge pull requests in, as <owner>/<repo>."
              f" Uses {REPOSITORY_ENV_VAR} if not provided."),
    )
    parser.add_argument(
        "--label",
        default=None,
        help="Label to filter pull requests by. Only PRs with this label are checked and merged.",
    )
    parser.add_argument(
        "--merge-method",
        choices=MERGE_METHODS,
        default=DEFAULT_MERGE_METHOD,
        help="Merge method passed to GitHub.",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=DEFAULT_MAX_PAGES,
        help="Maximum pages of 100 to fetch when listing pull requests and check runs.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Evaluate pull requests but do not merge them.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # urllib3 is noisy at DEBUG and logs request URLs
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def main(argv: Sequence[str] | None = None, env=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = MergerConfig.resolve(
            token=args.token,
            repository=args.repository,
            label=args.label,
            env=os.environ if env is None else env,
            dry_run=args.dry_run,
            merge_method=args.merge_method,
            max_pages=args.max_pages,
        )
        client = GitHubClient(config.token)
        summary = MergeRunner(client, config).run()
    except MergerError as error:
        console.print(f"[red]Error: {escape(str(error))}[/red]", soft_wrap=True)
        return 1

    print_summary(summary)

    failures = len(summary.failures)
    if failures:
        logger.error(
            "Failed to check and merge %d/%d pull requests. See the above logs for details.",
            failures, summary.candidates,
        )
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
