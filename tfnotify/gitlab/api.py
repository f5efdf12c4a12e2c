"""A small client for the parts of the GitLab REST API that notifications use."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

DEFAULT_BASE_URL = "https://gitlab.com/"
API_VERSION_PATH = "api/v4/"


class APIError(Exception):
    """Raised when a GitLab API request fails.

    ``status_code`` is the HTTP status of the response, or None when no
    response was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class Note:
    """A note (comment) on a merge request."""

    id: int
    body: str = ""


class GitLabAPI:
    """Requests against one project of a GitLab server."""

    def __init__(
        self,
        namespace: str,
        project: str,
        token: str = "",
        base_url: str = "",
        *,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.namespace = namespace
        self.project = project
        self.token = token
        url = base_url or DEFAULT_BASE_URL
        if not url.endswith("/"):
            url += "/"
        if not url.endswith(API_VERSION_PATH):
            url += API_VERSION_PATH
        self.api_url = url
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()

    @property
    def project_id(self) -> str:
        """The project path, ``namespace/project``."""
        return f"{self.namespace}/{self.project}"

    def _url(self, path: str) -> str:
        return f"{self.api_url}projects/{quote(self.project_id, safe='')}/{path}"

    def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        url = self._url(path)
        headers = {"Accept": "application/json"}
        if self.token:
            headers["PRIVATE-TOKEN"] = self.token
        try:
            response = self._session.request(
                method, url, json=json, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise APIError(f"{method} {url}: {exc}") from exc
        if not response.ok:
            raise APIError(
                f"{method} {url}: {response.status_code} {response.text}".rstrip(),
                response.status_code,
            )
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise APIError(f"{method} {url}: invalid JSON in response", response.status_code) from exc

    @staticmethod
    def _note(data: dict[str, Any]) -> Note:
        return Note(id=int(data["id"]), body=data.get("body") or "")

    def create_merge_request_note(self, merge_request: int, body: str) -> Note:
        """Add a note to merge request ``merge_request``."""
        data = self._request(
            "POST", f"merge_requests/{merge_request}/notes", json={"body": body}
        )
        return self._note(data)

    def delete_merge_request_note(self, merge_request: int, note: int) -> None:
        """Delete note ``note`` of merge request ``merge_request``."""
        self._request("DELETE", f"merge_requests/{merge_request}/notes/{note}")

    def list_merge_request_notes(self, merge_request: int) -> list[Note]:
        """Return the notes on merge request ``merge_request``."""
        data = self._request("GET", f"merge_requests/{merge_request}/notes") or []
        return [self._note(item) for item in data]

    def post_commit_comment(self, sha: str, note: str) -> str:
        """Comment on commit ``sha``; return the text of the stored comment."""
        data = self._request(
            "POST", f"repository/commits/{quote(sha, safe='')}/comments", json={"note": note}
        ) or {}
        return data.get("note") or ""

    def list_commits(self) -> list[str]:
        """Return the ids of the project's commits, newest first."""
        data = self._request("GET", "repository/commits") or []
        return [item["id"] for item in data]