from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .config import CHECK_CONCLUSION_SUCCESS, CHECK_STATUS_COMPLETED
from .types import RepoRef


class Mergeable(str, Enum):
    """GitHub's ``mergeable`` flag. ``null`` means the merge check has not run yet."""

    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"

    @classmethod
    def from_api(cls, value: Any) -> "Mergeable":
        if value is True:
            return cls.TRUE
        if value is False:
            return cls.FALSE
        return cls.UNKNOWN


@dataclass(frozen=True)
class PullRequestSnapshot:
    number: int
    head_ref: str
    head_label: str
    base_ref: str
    labels: tuple[str, ...] = ()
    mergeable: Mergeable = Mergeable.UNKNOWN
    mergeable_state: str = "unknown"
    title: str = ""
    html_url: str = ""
    draft: bool = False

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "PullRequestSnapshot":
        head = payload.get("head") or {}
        base = payload.get("base") or {}
        return cls(
            number=int(payload["number"]),
            head_ref=head.get("ref", ""),
            head_label=head.get("label") or head.get("ref", ""),
            base_ref=base.get("ref", ""),
            labels=tuple(lbl.get("name", "") for lbl in payload.get("labels") or []),
            mergeable=Mergeable.from_api(payload.get("mergeable")),
            mergeable_state=payload.get("mergeable_state") or "unknown",
            title=payload.get("title") or "",
            html_url=payload.get("html_url") or "",
            draft=bool(payload.get("draft")),
        )


@dataclass(frozen=True)
class CheckRunSnapshot:
    id: int
    status: str
    conclusion: Optional[str] = None
    name: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "CheckRunSnapshot":
        return cls(
            id=int(payload["id"]),
            status=payload.get("status") or "",
            conclusion=payload.get("conclusion"),
            name=payload.get("name") or "",
        )

    @property
    def is_completed(self) -> bool:
        return self.status == CHECK_STATUS_COMPLETED

    @property
    def is_successful(self) -> bool:
        return self.is_completed and self.conclusion == CHECK_CONCLUSION_SUCCESS


@dataclass(frozen=True)
class MergeResult:
    sha: str
    merged: bool
    message: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "MergeResult":
        return cls(
            sha=payload.get("sha") or "",
            merged=bool(payload.get("merged")),
            message=payload.get("message") or "",
        )


class FailureKind(str, Enum):
    CHECK_FETCH_FAILED = "check-fetch-failed"
    NOT_MERGEABLE = "not-mergeable"
    MERGE_FAILED = "merge-failed"


@dataclass(frozen=True)
class ItemFailure:
    kind: FailureKind
    number: int
    message: str
    branch: str = ""
    mergeable_state: str = ""
    cause: str = ""

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


@dataclass(frozen=True)
class EvaluationResult:
    number: int
    checks_passed: bool = False
    merged: bool = False
    sha: str = ""
    failure: Optional[ItemFailure] = None
    dry_run: bool = False

    @property
    def skipped(self) -> bool:
        return not self.checks_passed and self.failure is None


@dataclass
class RunSummary:
    repository: RepoRef
    label: str
    total_open: int = 0
    results: list[EvaluationResult] = field(default_factory=list)

    @property
    def candidates(self) -> int:
        return len(self.results)

    @property
    def failures(self) -> list[ItemFailure]:
        return [r.failure for r in self.results if r.failure is not None]

    @property
    def merged(self) -> list[EvaluationResult]:
        return [r for r in self.results if r.merged]

    @property
    def skipped(self) -> list[EvaluationResult]:
        return [r for r in self.results if r.skipped]

    @property
    def ok(self) -> bool:
        return not self.failures
