"""Commit lookups used to find where a notification belongs."""

from __future__ import annotations

from dataclasses import dataclass

from .api import GitLabAPI


@dataclass
class CommitsService:
    """Commit operations on one project."""

    api: GitLabAPI

    def list(self, revision: str) -> list[str]:
        """Return the ids of the project's commits; ``revision`` must be given."""
        if not revision:
            raise ValueError("no revision specified")
        return self.api.list_commits()

    def last_one(self, commits: list[str], revision: str) -> str:
        """Return the commit before the newest one in ``commits``."""
        if not revision:
            raise ValueError("no revision specified")
        if not commits:
            raise ValueError("no commits")
        if len(commits) < 2:
            raise ValueError("no previous commit")
        return commits[1]