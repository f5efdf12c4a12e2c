"""Commit lookups used to find where a notification belongs."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .api import GitHubAPI

_MERGE_PREFIX = "Merge pull request #"
_INTEGER = re.compile(r"[+-]?\d+", re.ASCII)


@dataclass
class CommitsService:
    """Commit operations on one repository."""

    api: GitHubAPI

    def list(self, revision: str) -> list[str]:
        """Return the hashes of the commits reachable from ``revision``."""
        if not revision:
            raise ValueError("no revision specified")
        return self.api.repositories_list_commits(revision)

    def last_one(self, commits: list[str], revision: str) -> str:
        """Return the commit before the newest one in ``commits``."""
        if not revision:
            raise ValueError("no revision specified")
        if not commits:
            raise ValueError("no commits")
        if len(commits) < 2:
            raise ValueError("no previous commit")
        return commits[1]

    def merged_pr_number(self, revision: str) -> int:
        """Return the pull request number that merge commit ``revision`` merged."""
        message = self.api.repositories_get_commit_message(revision)
        if not message.startswith(_MERGE_PREFIX):
            raise ValueError("not a merge commit")
        rest = message[len(_MERGE_PREFIX):]
        end = rest.find(" from")
        if end < 0:
            raise ValueError("not a merge commit")
        number = rest[:end]
        if not _INTEGER.fullmatch(number):
            raise ValueError(f'"{number}": invalid pull request number')
        return int(number)