"""A small client for the parts of the GitHub REST API that notifications use."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

DEFAULT_BASE_URL = "https://api.github.com/"


class APIError(Exception):
    """Raised when a GitHub API request fails.

    ``status_code`` is the HTTP status of the response, or None when no
    response was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class IssueComment:
    """A comment on an issue or pull request."""

    id: int
    body: str = ""


class GitHubAPI:
    """Requests against one repository of a GitHub (or GitHub Enterprise) server."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str = "",
        base_url: str = "",
        *,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.token = token
        url = base_url or DEFAULT_BASE_URL
        self.base_url = url if url.endswith("/") else url + "/"
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()

    def _url(self, path: str) -> str:
        owner = quote(self.owner, safe="")
        repo = quote(self.repo, safe="")
        return f"{self.base_url}repos/{owner}/{repo}/{path}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        url = self._url(path)
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        try:
            response = self._session.request(
                method, url, json=json, params=params, headers=headers, timeout=self.timeout
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
    def _comment(data: dict[str, Any]) -> IssueComment:
        return IssueComment(id=int(data["id"]), body=data.get("body") or "")

    def issues_create_comment(self, number: int, body: str) -> IssueComment:
        """Comment on issue or pull request ``number``."""
        data = self._request("POST", f"issues/{number}/comments", json={"body": body})
        return self._comment(data)

    def issues_delete_comment(self, comment_id: int) -> None:
        """Delete the issue comment with the given id."""
        self._request("DELETE", f"issues/comments/{comment_id}")

    def issues_list_comments(self, number: int) -> list[IssueComment]:
        """List the comments on issue or pull request ``number``."""
        data = self._request("GET", f"issues/{number}/comments") or []
        return [self._comment(item) for item in data]

    def issues_add_labels(self, number: int, labels: list[str]) -> list[str]:
        """Add labels to issue ``number``; return the names of all its labels."""
        data = self._request("POST", f"issues/{number}/labels", json=list(labels)) or []
        return [item.get("name", "") for item in data]

    def issues_list_labels(self, number: int) -> list[str]:
        """Return the names of the labels on issue ``number``."""
        data = self._request("GET", f"issues/{number}/labels") or []
        return [item.get("name", "") for item in data]

    def issues_remove_label(self, number: int, label: str) -> None:
        """Remove ``label`` from issue ``number``."""
        self._request("DELETE", f"issues/{number}/labels/{quote(label, safe='')}")

    def repositories_create_comment(self, sha: str, body: str) -> IssueComment:
        """Comment on commit ``sha``."""
        data = self._request("POST", f"commits/{quote(sha, safe='')}/comments", json={"body": body})
        return self._comment(data)

    def repositories_list_commits(self, sha: str) -> list[str]:
        """Return the hashes of the commits reachable from ``sha``, newest first."""
        data = self._request("GET", "commits", params={"sha": sha}) or []
        return [item["sha"] for item in data]

    def repositories_get_commit_message(self, sha: str) -> str:
        """Return the message of commit ``sha``."""
        data = self._request("GET", f"commits/{quote(sha, safe='')}") or {}
        return (data.get("commit") or {}).get("message") or ""