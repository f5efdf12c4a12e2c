"""Collect pull request and build information from CI environment variables."""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

_TRAILING_NUMBER = re.compile(r"[1-9]\d*$", re.ASCII)
_MERGE_REQUEST_REF = re.compile(r"refs/merge-requests/\d*/head", re.ASCII)
_INTEGER = re.compile(r"[+-]?\d+", re.ASCII)
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass
class PullRequest:
    """A pull request, identified by its number or by a commit revision."""

    revision: str = ""
    number: int = 0


@dataclass
class CI:
    """Information common to all CI services."""

    pr: PullRequest = field(default_factory=PullRequest)
    url: str = ""


class CIError(ValueError):
    """Raised when the CI environment cannot be interpreted.

    ``ci`` holds whatever was collected before the failure.
    """

    def __init__(self, message: str, ci: CI | None = None) -> None:
        super().__init__(message)
        self.ci = ci if ci is not None else CI()


def _environ(env: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if env is None else env


def _first(env: Mapping[str, str], *keys: str) -> str:
    for key in keys:
        value = env.get(key, "")
        if value:
            return value
    return ""


def _parse_int(text: str, ci: CI, message: str | None = None) -> int:
    if _INTEGER.fullmatch(text):
        value = int(text)
        if _INT64_MIN <= value <= _INT64_MAX:
            return value
        raise CIError(message or f'"{text}": number out of range', ci)
    raise CIError(message or f'"{text}": invalid number', ci)


def _trailing_number(text: str, ci: CI, message: str) -> int:
    match = _TRAILING_NUMBER.search(text)
    return _parse_int(match.group() if match else "", ci, message)


def circleci(env: Mapping[str, str] | None = None) -> CI:
    env = _environ(env)
    ci = CI(PullRequest(revision=env.get("CIRCLE_SHA1", "")), env.get("CIRCLE_BUILD_URL", ""))
    pr = _first(env, "CIRCLE_PULL_REQUEST", "CI_PULL_REQUEST", "CIRCLE_PR_NUMBER")
    if pr:
        ci.pr.number = _trailing_number(pr, ci, f"{pr}: cannot get env")
    return ci


def travisci(env: Mapping[str, str] | None = None) -> CI:
    env = _environ(env)
    ci = CI(url=env.get("TRAVIS_BUILD_WEB_URL", ""))
    pr = env.get("TRAVIS_PULL_REQUEST", "")
    if pr == "false":
        ci.pr.revision = env.get("TRAVIS_COMMIT", "")
        return ci
    ci.pr.revision = env.get("TRAVIS_PULL_REQUEST_SHA", "")
    ci.pr.number = _parse_int(pr, ci)
    return ci


def codebuild(env: Mapping[str, str] | None = None) -> CI:
    env = _environ(env)
    ci = CI(
        PullRequest(revision=env.get("CODEBUILD_RESOLVED_SOURCE_VERSION", "")),
        env.get("CODEBUILD_BUILD_URL", ""),
    )
    source_version = env.get("CODEBUILD_SOURCE_VERSION", "")
    if not source_version.startswith("pr/"):
        return ci
    pr = source_version.replace("pr/", "", 1)
    if pr:
        ci.pr.number = _parse_int(pr, ci)
    return ci


def teamcity(env: Mapping[str, str] | None = None) -> CI:
    env = _environ(env)
    ci = CI(PullRequest(revision=env.get("BUILD_VCS_NUMBER", "")))
    ci.pr.number = _parse_int(env.get("BUILD_NUMBER", ""), ci)
    return ci


def drone(env: Mapping[str, str] | None = None) -> CI:
    env = _environ(env)
    ci = CI(PullRequest(revision=env.get("DRONE_COMMIT_SHA", "")), env.get("DRONE_BUILD_LINK", ""))
    pr = env.get("DRONE_PULL_REQUEST", "")
    if pr:
        ci.pr.number = _parse_int(pr, ci)
    return ci


def jenkins(env: Mapping[str, str] | None = None) -> CI:
    env = _environ(env)
    ci = CI(
        PullRequest(revision=_first(env, "GIT_COMMIT", "gitlabBefore")),
        env.get("BUILD_URL", ""),
    )
    pr = _first(env, "PULL_REQUEST_NUMBER", "gitlabMergeRequestIid", "PULL_REQUEST_URL")
    if pr:
        ci.pr.number = _trailing_number(
            pr, ci, f"{pr}: Invalid PullRequest number or MergeRequest ID"
        )
    return ci


def gitlabci(env: Mapping[str, str] | None = None) -> CI:
    env = _environ(env)
    ci = CI(PullRequest(revision=env.get("CI_COMMIT_SHA", "")), env.get("CI_JOB_URL", ""))
    pr = env.get("CI_MERGE_REQUEST_IID", "")
    if not pr:
        ref_path = env.get("CI_MERGE_REQUEST_REF_PATH", "")
        if _MERGE_REQUEST_REF.search(ref_path):
            pr = ref_path.split("/")[2]
    if pr:
        ci.pr.number = _parse_int(pr, ci)
    return ci


def github_actions(env: Mapping[str, str] | None = None) -> CI:
    env = _environ(env)
    url = "https://github.com/{}/actions/runs/{}".format(
        env.get("GITHUB_REPOSITORY", ""), env.get("GITHUB_RUN_ID", "")
    )
    return CI(PullRequest(revision=env.get("GITHUB_SHA", "")), url)


def cloudbuild(env: Mapping[str, str] | None = None) -> CI:
    env = _environ(env)
    url = "https://console.cloud.google.com/cloud-build/builds/{}?project={}".format(
        env.get("BUILD_ID", ""), env.get("PROJECT_ID", "")
    )
    ci = CI(PullRequest(revision=env.get("COMMIT_SHA", "")), url)
    pr = env.get("_PR_NUMBER", "")
    if pr:
        ci.pr.number = _parse_int(pr, ci)
    return ci


SERVICES: dict[str, Callable[[Mapping[str, str] | None], CI]] = {
    "circleci": circleci,
    "circle-ci": circleci,
    "travis": travisci,
    "travisci": travisci,
    "travis-ci": travisci,
    "codebuild": codebuild,
    "teamcity": teamcity,
    "drone": drone,
    "jenkins": jenkins,
    "gitlabci": gitlabci,
    "gitlab-ci": gitlabci,
    "github-actions": github_actions,
    "cloud-build": cloudbuild,
    "cloudbuild": cloudbuild,
}


def detect(name: str, env: Mapping[str, str] | None = None) -> CI:
    """Read the environment of the named CI service (case-insensitive)."""
    key = name.lower()
    if not key:
        raise CIError("CI service: required (e.g. circleci)")
    try:
        service = SERVICES[key]
    except KeyError:
        raise CIError(f"CI service {name}: not supported yet") from None
    return service(env)