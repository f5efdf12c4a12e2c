"""Posting and tidying comments on GitHub pull requests and commits."""

from __future__ import annotations

import re
from dataclasses import dataclass

import requests

from .api import APIError, GitHubAPI, IssueComment


@dataclass
class CommentService:
    """Comment operations for the pull request ``number``.

    ``message`` is the notification message, used to recognise earlier
    notifications of the same kind.
    """

    api: GitHubAPI
    number: int = 0
    message: str = ""

    def post(self, body: str, number: int = 0, revision: str = "") -> None:
        """Comment on pull request ``number``, or else on commit ``revision``."""
        if number:
            self.api.issues_create_comment(number, body)
            return
        if revision:
            self.api.repositories_create_comment(revision, body)
            return
        raise ValueError("github.comment.post: Number or Revision is required")

    def list(self, number: int) -> list[IssueComment]:
        """Return the comments on pull request ``number``."""
        return self.api.issues_list_comments(number)

    def delete(self, comment_id: int) -> None:
        """Delete a comment by its id."""
        self.api.issues_delete_comment(comment_id)

    def duplicates(self, title: str) -> list[IssueComment]:
        """Return earlier comments with this title and the configured message."""
        pattern = re.compile(
            r"(?m)^(\n+)?" + title + r"( +.*)?\n+" + self.message + r"\n+"
        )
        try:
            comments = self.list(self.number)
        except (APIError, requests.RequestException):
            return []
        return [comment for comment in comments if pattern.search(comment.body)]

    def delete_duplicates(self, title: str) -> None:
        """Delete earlier comments with this title; failures are ignored."""
        for comment in self.duplicates(title):
            try:
                self.delete(comment.id)
            except (APIError, requests.RequestException):
                pass