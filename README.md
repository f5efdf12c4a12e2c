# tfnotify

Helpers for reporting the outcome of terraform runs from a CI job: work out
which pull or merge request a build belongs to, load and check a `tfnotify`
configuration file, copy terraform's output through while keeping a clean
copy of it, and post comments to GitHub or GitLab.

## Finding the pull request

Every supported CI service exposes the commit and pull-request number through
its own environment variables. `tfnotify.ci.detect` reads them for you:

```python
import os
from tfnotify.ci import detect, CIError

try:
    ci = detect("circleci", os.environ)
except CIError as exc:
    print(f"cannot tell which pull request this is: {exc}")
else:
    print(ci.pr.number, ci.pr.revision, ci.url)
```

Recognised names (case does not matter): `circleci`, `circle-ci`, `travis`,
`travisci`, `travis-ci`, `codebuild`, `teamcity`, `drone`, `jenkins`,
`gitlabci`, `gitlab-ci`, `github-actions`, `cloudbuild`, `cloud-build`.
Each service also has its own function in `tfnotify.ci` (`circleci`,
`travisci`, `codebuild`, `teamcity`, `drone`, `jenkins`, `gitlabci`,
`github_actions`, `cloudbuild`) taking a mapping of environment variables.

## Configuration

Without an explicit path, `find_config` looks in the working directory for
`tfnotify.yaml`, `tfnotify.yml`, `.tfnotify.yaml` and `.tfnotify.yml`, in that
order.

```yaml
ci: circleci
notifier:
  github:
    repository:
      owner: example-org
      name: infrastructure
terraform:
  plan:
    template: |
      {{ .Title }}
      {{ .Message }}
    when_destroy:
      label: destroy
```

```python
from tfnotify.config import find_config, load_config, ConfigError

try:
    config = load_config(find_config(""))
    config.validate()
except ConfigError as exc:
    print(exc)
else:
    print(config.notifier_type())   # "github"
```

`validate` raises `ConfigError` with messages such as `ci: need to be set`,
`repository owner is missing` or `notifier is missing`. `parse_config` builds
a `Config` straight from YAML text.

## Keeping terraform's output

`tee` copies everything from one stream to another and returns the text with
ANSI colour codes removed, ready to be put into a comment:

```python
import sys
from tfnotify.tee import tee, strip_ansi

body = tee(sys.stdin, sys.stdout)
assert strip_ansi("\033[mPlan: 1 to add\033[m\n") == "Plan: 1 to add\n"
```

## Exit codes

`tfnotify.exit.handle_exit` turns an exception (or `None`) into a process exit
code, writing the message to the given stream. An `ExitError` carries its own
exit code; any other exception maps to 1, and `None` to 0.

## Posting to GitHub and GitLab

`tfnotify.github` and `tfnotify.gitlab` hold thin REST clients
(`GitHubAPI`, `GitLabAPI`) and the services built on them:

- `CommentService.post` comments on a pull/merge request when a number is
  given, otherwise on the commit; with neither it raises an error.
- `CommentService.duplicates` and `CommentService.delete_duplicates` find and
  remove earlier comments that carry the same title and message, so a
  pull request only shows the latest result.
- `CommitsService.list` and `CommitsService.last_one` find the commit before
  the given revision; on GitHub, `CommitsService.merged_pr_number` reads the
  pull-request number out of a "Merge pull request #N from ..." commit.

## Running the tests

Install the `test` extra and run pytest from the project root.