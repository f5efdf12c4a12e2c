"""Posting and tidying comments on GitLab merge requests and commits."""

from __future__ import annotations

import re
from dataclasses import dataclass

import requests

from .api import APIError, GitLabAPI, Note


@dataclass
class CommentService:
    """Comment operations for the merge request ``number``.

    ``message`` is the notification message, used to recognise earlier
    notifications of the same kind.
    """

    api: GitLabAPI
    number: int = 0
    message: str = ""

    def post(self, body: str, number: int = 0, revision: str = "") -> None:
        """Comment on merge request ``number``, or else on commit ``revision``."""
        if number:
            self.api.create_merge_request_note(number, body)
            return
        if revision:
            self.api.post_commit_comment(revision, body)
            return
        raise ValueError("gitlab.comment.post: Number or Revision is required")

    def list(self, number: int) -> list[Note]:
        """Return the notes on merge request ``number``."""
        return self.api.list_merge_request_notes(number)

    def delete(self, note: int) -> None:
        """Delete a note of this service's merge request."""
        self.api.delete_merge_request_note(self.number, note)

    def duplicates(self, title: str) -> list[Note]:
        """Return earlier notes with this title and the configured message."""
        pattern = re.compile(
            r"(?m)^(\n+)?" + title + r"( +.*)?\n+" + self.message + r"\n+"
        )
        try:
            notes = self.list(self.number)
        except (APIError, requests.RequestException):
            return []
        return [note for note in notes if pattern.search(note.body)]

    def delete_duplicates(self, title: str) -> None:
        """Delete earlier notes with this title; failures are ignored."""
        for note in self.duplicates(title):
            try:
                self.delete(note.id)
            except (APIError, requests.RequestException):
                pass