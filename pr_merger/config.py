"""Configuration constants and run settings for the merger."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .types import RepoRef

# Environment fallbacks (both are set automatically inside GitHub Actions)
TOKEN_ENV_VAR = "GITHUB_TOKEN"
REPOSITORY_ENV_VAR = "GITHUB_REPOSITORY"

# GitHub REST API
API_BASE_URL = "https://api.github.com"
API_VERSION = "2022-11-28"
REQUEST_TIMEOUT_S = 30
DEFAULT_PER_PAGE = 100
DEFAULT_MAX_PAGES = 10

# Merge request
COMMIT_MESSAGE = "Merged by merger"
MERGE_METHODS = ("merge", "squash", "rebase")
DEFAULT_MERGE_METHOD = "merge"

# Check run states GitHub reports; only this combination counts as passed
CHECK_STATUS_COMPLETED = "completed"
CHECK_CONCLUSION_SUCCESS = "success"


class MergerError(Exception):
    """Fatal error that ends the run before or instead of merging anything."""


class ConfigError(MergerError):
    pass


class MalformedRepositoryError(ConfigError):
    pass


def _resolve(value: Optional[str], env: Mapping[str, str], env_var: Optional[str]) -> str:
    if value is None and env_var:
        value = env.get(env_var, "")
    return value or ""


@dataclass(frozen=True)
class MergerConfig:
    repository: RepoRef
    token: str
    label: str
    dry_run: bool = False
    merge_method: str = DEFAULT_MERGE_METHOD
    max_pages: int = DEFAULT_MAX_PAGES
    commit_message: str = COMMIT_MESSAGE

    @classmethod
    def resolve(
        cls,
        *,
        token: Optional[str] = None,
        repository: Optional[str] = None,
        label: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
        dry_run: bool = False,
        merge_method: str = DEFAULT_MERGE_METHOD,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> "MergerConfig":
        """Build a validated config from explicit values with environment fallback.

        Explicit values win; ``None`` falls back to ``GITHUB_TOKEN`` and
        ``GITHUB_REPOSITORY``. The label has no fallback. Checks run in a fixed
        order and the first failure raises ``ConfigError``.
        """
        env = os.environ if env is None else env
        token = _resolve(token, env, TOKEN_ENV_VAR)
        repository = _resolve(repository, env, REPOSITORY_ENV_VAR)
        label = _resolve(label, env, None)

        if not token.strip():
            raise ConfigError("GitHub token not provided via CLI or environment variable.")
        if not repository.strip():
            raise ConfigError("GitHub repository not provided via CLI or environment variable.")
        if not label.strip():
            raise ConfigError("Label filter not provided.")

        try:
            repo = RepoRef.parse(repository.strip())
        except ValueError:
            raise MalformedRepositoryError(
                f"Expected GitHub repository name to be of the form <owner>/<repo>. '{repository}' is not."
            ) from None

        if merge_method not in MERGE_METHODS:
            raise ConfigError(
                f"Unsupported merge method '{merge_method}'. Use one of: {', '.join(MERGE_METHODS)}."
            )
        if max_pages < 1:
            raise ConfigError(f"max_pages must be at least 1, got {max_pages}.")

        return cls(
            repository=repo,
            token=token.strip(),
            label=label,
            dry_run=dry_run,
            merge_method=merge_method,
            max_pages=max_pages,
        )
