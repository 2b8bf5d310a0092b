"""GitHub REST API client with rate limiting and pagination support."""

import time
import logging
from typing import Callable, Optional, TypeVar
from urllib.parse import quote as urlquote

import requests

from .config import API_BASE_URL, API_VERSION, DEFAULT_MAX_PAGES, DEFAULT_PER_PAGE, REQUEST_TIMEOUT_S
from .models import CheckRunSnapshot, MergeResult, PullRequestSnapshot
from .types import RepoRef

logger = logging.getLogger(__name__)

RATE_LIMIT_WARNING = 10

T = TypeVar("T")


class GitHubAPIError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitExceeded(GitHubAPIError):
    pass


def _error_detail(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(payload, dict) and payload.get("message"):
        return payload["message"]
    return response.text[:500]


def _parse(endpoint: str, factory: Callable[[dict], T], payload) -> T:
    try:
        return factory(payload)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise GitHubAPIError(f"Unexpected payload from {endpoint}: {e!r}") from e


class GitHubClient:
    """Handles all communication with the GitHub REST API.

    Every call is a single attempt. Transport errors, rate limiting, HTTP
    errors and undecodable bodies all surface as ``GitHubAPIError``; retrying
    is left to the next scheduled run.
    """

    def __init__(self, token: str, base_url: str = API_BASE_URL,
                 session: Optional[requests.Session] = None):
        if not token:
            raise GitHubAPIError("A GitHub token is required.")
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        })
        self._requests_remaining = None
        self._reset_time = None

    def _update_rate_limit(self, response: requests.Response):
        remaining = response.headers.get("X-RateLimit-Remaining")
        reset = response.headers.get("X-RateLimit-Reset")
        if remaining is not None:
            self._requests_remaining = int(remaining)
        if reset is not None:
            self._reset_time = int(reset)

    def _check_quota(self):
        """Fail fast instead of sending a request GitHub is known to reject."""
        if self._requests_remaining == 0 and self._reset_time and self._reset_time > time.time():
            raise RateLimitExceeded(f"GitHub API rate limit exhausted until epoch={self._reset_time}.")
        if self._requests_remaining is not None and self._requests_remaining < RATE_LIMIT_WARNING:
            logger.warning("Rate limit low (%d requests remaining).", self._requests_remaining)

    @staticmethod
    def _is_rate_limited(response: requests.Response) -> bool:
        if response.status_code not in (403, 429):
            return False
        return (response.headers.get("X-RateLimit-Remaining") == "0"
                or "rate limit" in response.text.lower())

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        self._check_quota()
        url = f"{self.base_url}{endpoint}" if endpoint.startswith("/") else endpoint

        try:
            response = self.session.request(method, url, timeout=REQUEST_TIMEOUT_S, **kwargs)
        except requests.exceptions.RequestException as e:
            raise GitHubAPIError(f"Request {method} {endpoint} failed: {e}") from e

        self._update_rate_limit(response)

        if self._is_rate_limited(response):
            raise RateLimitExceeded(
                f"GitHub API rate limit exceeded on {method} {endpoint}. Reset at epoch={self._reset_time}.",
                response.status_code,
            )
        if response.status_code >= 400:
            raise GitHubAPIError(
                f"GitHub API error {response.status_code} on {method} {endpoint}: {_error_detail(response)}",
                response.status_code,
            )
        return response

    def _json(self, method: str, endpoint: str, **kwargs):
        response = self._request(method, endpoint, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(
                f"Invalid JSON from {method} {endpoint} (status {response.status_code}): {response.text[:200]}",
                response.status_code,
            ) from e

    def get(self, endpoint: str, params: Optional[dict] = None):
        return self._json("GET", endpoint, params=params)

    def get_paginated(self, endpoint: str, params: Optional[dict] = None,
                      max_pages: int = DEFAULT_MAX_PAGES, items_key: Optional[str] = None) -> list:
        """Fetch pages of a list endpoint until a short page or ``max_pages``.

        ``items_key`` names the array for endpoints that wrap results in an
        object (check runs come back as ``{"total_count": .., "check_runs": [..]}``).
        """
        params = dict(params or {})
        params.setdefault("per_page", DEFAULT_PER_PAGE)
        all_items = []

        for page in range(1, max_pages + 1):
            params["page"] = page
            payload = self.get(endpoint, params=dict(params))
            if items_key:
                if not isinstance(payload, dict):
                    raise GitHubAPIError(f"Expected object for {endpoint}, got {type(payload).__name__}")
                items = payload.get(items_key) or []
            else:
                items = payload
            if not isinstance(items, list):
                raise GitHubAPIError(f"Expected list for paginated endpoint {endpoint}, got {type(items).__name__}")
            all_items.extend(items)
            if len(items) < params["per_page"]:
                break
        else:
            logger.warning("Stopped paging %s after %d pages; results may be incomplete.", endpoint, max_pages)

        return all_items

    def list_open_pull_requests(self, repo: RepoRef, max_pages: int = DEFAULT_MAX_PAGES) -> list[PullRequestSnapshot]:
        endpoint = f"/repos/{repo.owner}/{repo.name}/pulls"
        items = self.get_paginated(endpoint, params={"state": "open"}, max_pages=max_pages)
        return [_parse(endpoint, PullRequestSnapshot.from_api, item) for item in items]

    def get_pull_request(self, repo: RepoRef, number: int) -> PullRequestSnapshot:
        endpoint = f"/repos/{repo.owner}/{repo.name}/pulls/{number}"
        return _parse(endpoint, PullRequestSnapshot.from_api, self.get(endpoint))

    def list_check_runs(self, repo: RepoRef, ref: str, max_pages: int = DEFAULT_MAX_PAGES) -> list[CheckRunSnapshot]:
        endpoint = f"/repos/{repo.owner}/{repo.name}/commits/{urlquote(ref, safe='/')}/check-runs"
        items = self.get_paginated(endpoint, max_pages=max_pages, items_key="check_runs")
        return [_parse(endpoint, CheckRunSnapshot.from_api, item) for item in items]

    def merge_pull_request(self, repo: RepoRef, number: int, commit_message: str,
                           merge_method: str = "merge") -> MergeResult:
        endpoint = f"/repos/{repo.owner}/{repo.name}/pulls/{number}/merge"
        payload = self._json(
            "PUT",
            endpoint,
            json={"commit_message": commit_message, "merge_method": merge_method},
        )
        return _parse(endpoint, MergeResult.from_api, payload)
