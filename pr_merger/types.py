from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RepoRef:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, raw: str) -> "RepoRef":
        """Parse ``owner/repo``. Raises ValueError unless there are exactly two non-empty parts."""
        parts = raw.split("/")
        if len(parts) != 2 or not all(parts):
            raise ValueError(raw)
        return cls(owner=parts[0], name=parts[1])

    def __str__(self) -> str:
        return self.full_name
