import pytest

from tfnotify.config import (
    Config,
    ConfigError,
    GithubNotifier,
    Notifiers,
    PlanSettings,
    Repository,
    TerraformSettings,
    WhenDestroy,
    find_config,
    load_config,
    parse_config,
)

PLAN_TEMPLATE = (
    "{{ .Title }}\n{{ .Message }}\n{{if .Result}}\n<pre><code>{{ .Result }}\n</pre></code>\n"
    "{{end}}\n<details><summary>Details (Click me)</summary>\n\n<pre><code>{{ .Body }}\n"
    "</pre></code></details>\n"
)

DESTROY_TEMPLATE = (
    "## :warning: WARNING: Resource Deletion will happen :warning:\n\n"
    "This plan contains **resource deletion**. Please check the plan result very carefully!\n"
)

EXAMPLE = """\
ci: circleci
notifier:
  github:
    token: token
    repository:
      owner: "mercari"
      name: "tfnotify"
terraform:
  plan:
    template: |
      {{ .Title }}
      {{ .Message }}
      {{if .Result}}
      <pre><code>{{ .Result }}
      </pre></code>
      {{end}}
      <details><summary>Details (Click me)</summary>

      <pre><code>{{ .Body }}
      </pre></code></details>
"""

EXAMPLE_WITH_LABELS = EXAMPLE + """\
    when_add_or_update_only:
      label: "add-or-update"
    when_destroy:
      label: "destroy"
      template: |
        ## :warning: WARNING: Resource Deletion will happen :warning:

        This plan contains **resource deletion**. Please check the plan result very carefully!
    when_plan_error:
      label: "error"
    when_no_changes:
      label: "no-changes"
"""


def github_notifiers():
    return Notifiers(
        github=GithubNotifier(token="token", repository=Repository(owner="mercari", name="tfnotify"))
    )


def test_load_file(tmp_path):
    path = tmp_path / "example.tfnotify.yaml"
    path.write_text(EXAMPLE)
    expected = Config(
        ci="circleci",
        notifier=github_notifiers(),
        terraform=TerraformSettings(plan=PlanSettings(template=PLAN_TEMPLATE)),
        path=str(path),
    )
    assert load_config(str(path)) == expected


def test_load_file_with_destroy_and_result_labels(tmp_path):
    path = tmp_path / "example-with-destroy-and-result-labels.tfnotify.yaml"
    path.write_text(EXAMPLE_WITH_LABELS)
    expected = Config(
        ci="circleci",
        notifier=github_notifiers(),
        terraform=TerraformSettings(
            plan=PlanSettings(
                template=PLAN_TEMPLATE,
                add_or_update_label="add-or-update",
                when_destroy=WhenDestroy(label="destroy", template=DESTROY_TEMPLATE),
                no_changes_label="no-changes",
                plan_error_label="error",
            )
        ),
        path=str(path),
    )
    assert load_config(str(path)) == expected


def test_load_missing_file(tmp_path):
    missing = str(tmp_path / "no-such-config.yaml")
    with pytest.raises(ConfigError, match="no config file"):
        load_config(missing)


def test_use_raw_output():
    cfg = parse_config("ci: drone\nterraform:\n  use_raw_output: true\n")
    assert cfg.terraform.use_raw_output is True


def test_invalid_yaml_is_config_error():
    with pytest.raises(ConfigError):
        parse_config("ci: [unclosed\n")


def test_wrong_type_is_config_error():
    with pytest.raises(ConfigError, match="ci: expected a string"):
        parse_config("ci:\n  nested: value\n")


@pytest.mark.parametrize(
    "contents, expected",
    [
        ("", "ci: need to be set"),
        ("ci: rare-ci\n", "rare-ci: not supported yet"),
        ("ci: circleci\n", "notifier is missing"),
        ("ci: travisci\n", "notifier is missing"),
        ("ci: codebuild\n", "notifier is missing"),
        ("ci: teamcity\n", "notifier is missing"),
        ("ci: drone\n", "notifier is missing"),
        ("ci: jenkins\n", "notifier is missing"),
        ("ci: gitlabci\n", "notifier is missing"),
        ("ci: cloudbuild\n", "notifier is missing"),
        ("ci: cloud-build\n", "notifier is missing"),
        ("ci: circleci\nnotifier:\n  github:\n", "notifier is missing"),
        ("ci: circleci\nnotifier:\n  github:\n    token: token\n", "repository owner is missing"),
        (
            """
ci: circleci
notifier:
  github:
    token: token
    repository:
      owner: owner
""",
            "repository name is missing",
        ),
        (
            """
ci: circleci
notifier:
  slack:
""",
            "notifier is missing",
        ),
        (
            """
ci: circleci
notifier:
  slack:
    token: token
""",
            "slack channel id is missing",
        ),
        (
            """
ci: circleci
notifier:
  typetalk:
""",
            "notifier is missing",
        ),
        (
            """
ci: gitlabci
notifier:
  gitlab:
    token: token
    repository:
      owner: owner
""",
            "repository name is missing",
        ),
        (
            """
ci: gitlabci
notifier:
  slack:
""",
            "notifier is missing",
        ),
        (
            """
ci: gitlabci
notifier:
  typetalk:
    token: token
""",
            "Typetalk topic id is missing",
        ),
    ],
)
def test_validation_errors(contents, expected):
    cfg = parse_config(contents)
    with pytest.raises(ConfigError) as exc:
        cfg.validate()
    assert str(exc.value) == expected


@pytest.mark.parametrize(
    "contents, notifier",
    [
        (
            """
ci: circleci
notifier:
  github:
    token: token
    repository:
      owner: owner
      name: name
""",
            "github",
        ),
        (
            """
ci: circleci
notifier:
  slack:
    token: token
    channel: channel
""",
            "slack",
        ),
        (
            """
ci: circleci
notifier:
  typetalk:
    token: token
    topic_id: 12345
""",
            "typetalk",
        ),
        (
            """
ci: gitlabci
notifier:
  gitlab:
    token: token
    repository:
      owner: owner
      name: name
""",
            "gitlab",
        ),
    ],
)
def test_validation_passes(contents, notifier):
    cfg = parse_config(contents)
    cfg.validate()
    assert cfg.notifier_type() == notifier


def test_numeric_topic_id_is_read_as_text():
    cfg = parse_config("ci: circleci\nnotifier:\n  typetalk:\n    token: token\n    topic_id: 12345\n")
    assert cfg.notifier.typetalk.topic_id == "12345"


@pytest.mark.parametrize(
    "contents, expected",
    [
        ("repository:\n  owner: a\n  name: b\nci: circleci\nnotifier:\n  github:\n    token: token\n", "github"),
        ("repository:\n  owner: a\n  name: b\nci: circleci\nnotifier:\n  slack:\n    token: token\n", "slack"),
        (
            "repository:\n  owner: a\n  name: b\nci: circleci\nnotifier:\n  typetalk:\n    token: token\n",
            "typetalk",
        ),
        ("repository:\n  owner: a\n  name: b\nci: gitlabci\nnotifier:\n  gitlab:\n    token: token\n", "gitlab"),
        ("ci: circleci\n", ""),
    ],
)
def test_notifier_type(contents, expected):
    assert parse_config(contents).notifier_type() == expected


@pytest.mark.parametrize("name", [".tfnotify.yaml", "tfnotify.yaml", ".tfnotify.yml", "tfnotify.yml"])
def test_find_given_file(tmp_path, monkeypatch, name):
    monkeypatch.chdir(tmp_path)
    (tmp_path / name).touch()
    assert find_config(name) == name


def test_find_without_argument_prefers_first_default(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in (".tfnotify.yaml", "tfnotify.yaml", ".tfnotify.yml", "tfnotify.yml"):
        (tmp_path / name).touch()
    assert find_config("") == "tfnotify.yaml"


def test_find_without_argument_falls_back(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".tfnotify.yml").touch()
    assert find_config() == ".tfnotify.yml"


def test_find_nothing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ConfigError, match="config for tfnotify is not found at all"):
        find_config()