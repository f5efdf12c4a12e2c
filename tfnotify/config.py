"""The tfnotify configuration file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from .ci import SERVICES

DEFAULT_CONFIG_FILES = ("tfnotify.yaml", "tfnotify.yml", ".tfnotify.yaml", ".tfnotify.yml")

_NULL_TAG = "tag:yaml.org,2002:null"
_BOOL_TAG = "tag:yaml.org,2002:bool"
_TRUE_WORDS = {"yes", "true", "on"}


class ConfigError(ValueError):
    """Raised when the configuration cannot be found, read or accepted."""


@dataclass
class Repository:
    owner: str = ""
    name: str = ""


@dataclass
class GithubNotifier:
    token: str = ""
    base_url: str = ""
    repository: Repository = field(default_factory=Repository)


@dataclass
class GitlabNotifier:
    token: str = ""
    base_url: str = ""
    repository: Repository = field(default_factory=Repository)


@dataclass
class SlackNotifier:
    token: str = ""
    channel: str = ""
    bot: str = ""


@dataclass
class TypetalkNotifier:
    token: str = ""
    topic_id: str = ""


@dataclass
class Notifiers:
    github: GithubNotifier = field(default_factory=GithubNotifier)
    gitlab: GitlabNotifier = field(default_factory=GitlabNotifier)
    slack: SlackNotifier = field(default_factory=SlackNotifier)
    typetalk: TypetalkNotifier = field(default_factory=TypetalkNotifier)


@dataclass
class WhenDestroy:
    label: str = ""
    template: str = ""


@dataclass
class PlanSettings:
    template: str = ""
    add_or_update_label: str = ""
    when_destroy: WhenDestroy = field(default_factory=WhenDestroy)
    no_changes_label: str = ""
    plan_error_label: str = ""


@dataclass
class TerraformSettings:
    default_template: str = ""
    fmt_template: str = ""
    plan: PlanSettings = field(default_factory=PlanSettings)
    apply_template: str = ""
    use_raw_output: bool = False


def _is_defined(section: object) -> bool:
    return section != type(section)()


@dataclass
class Config:
    ci: str = ""
    notifier: Notifiers = field(default_factory=Notifiers)
    terraform: TerraformSettings = field(default_factory=TerraformSettings)
    path: str = ""

    def validate(self) -> None:
        """Raise ConfigError when the configuration cannot be used."""
        name = self.ci.lower()
        if not name:
            raise ConfigError("ci: need to be set")
        if name not in SERVICES:
            raise ConfigError(f"{self.ci}: not supported yet")
        for repo_notifier in (self.notifier.github, self.notifier.gitlab):
            if _is_defined(repo_notifier):
                if not repo_notifier.repository.owner:
                    raise ConfigError("repository owner is missing")
                if not repo_notifier.repository.name:
                    raise ConfigError("repository name is missing")
        if _is_defined(self.notifier.slack) and not self.notifier.slack.channel:
            raise ConfigError("slack channel id is missing")
        if _is_defined(self.notifier.typetalk) and not self.notifier.typetalk.topic_id:
            raise ConfigError("Typetalk topic id is missing")
        if not self.notifier_type():
            raise ConfigError("notifier is missing")

    def notifier_type(self) -> str:
        """Name of the first notifier that is configured, or an empty string."""
        for section in fields(self.notifier):
            if _is_defined(getattr(self.notifier, section.name)):
                return section.name
        return ""


def _is_null(node: yaml.Node | None) -> bool:
    return node is None or (isinstance(node, yaml.ScalarNode) and node.tag == _NULL_TAG)


def _mapping(node: yaml.Node | None, where: str) -> dict[str, yaml.Node]:
    if _is_null(node):
        return {}
    if not isinstance(node, yaml.MappingNode):
        raise ConfigError(f"{where}: expected a mapping")
    return {key.value: value for key, value in node.value if isinstance(key, yaml.ScalarNode)}


def _string(node: yaml.Node | None, where: str) -> str:
    if _is_null(node):
        return ""
    if not isinstance(node, yaml.ScalarNode):
        raise ConfigError(f"{where}: expected a string")
    return node.value


def _bool(node: yaml.Node | None, where: str) -> bool:
    if _is_null(node):
        return False
    if not isinstance(node, yaml.ScalarNode) or node.tag != _BOOL_TAG:
        raise ConfigError(f"{where}: expected a boolean")
    return node.value.lower() in _TRUE_WORDS


def _repository(node: yaml.Node | None, where: str) -> Repository:
    values = _mapping(node, where)
    return Repository(
        owner=_string(values.get("owner"), f"{where}.owner"),
        name=_string(values.get("name"), f"{where}.name"),
    )


def _label(node: yaml.Node | None, where: str) -> str:
    return _string(_mapping(node, where).get("label"), f"{where}.label")


def _template(node: yaml.Node | None, where: str) -> str:
    return _string(_mapping(node, where).get("template"), f"{where}.template")


def _notifiers(node: yaml.Node | None) -> Notifiers:
    values = _mapping(node, "notifier")
    github = _mapping(values.get("github"), "notifier.github")
    gitlab = _mapping(values.get("gitlab"), "notifier.gitlab")
    slack = _mapping(values.get("slack"), "notifier.slack")
    typetalk = _mapping(values.get("typetalk"), "notifier.typetalk")
    return Notifiers(
        github=GithubNotifier(
            token=_string(github.get("token"), "notifier.github.token"),
            base_url=_string(github.get("base_url"), "notifier.github.base_url"),
            repository=_repository(github.get("repository"), "notifier.github.repository"),
        ),
        gitlab=GitlabNotifier(
            token=_string(gitlab.get("token"), "notifier.gitlab.token"),
            base_url=_string(gitlab.get("base_url"), "notifier.gitlab.base_url"),
            repository=_repository(gitlab.get("repository"), "notifier.gitlab.repository"),
        ),
        slack=SlackNotifier(
            token=_string(slack.get("token"), "notifier.slack.token"),
            channel=_string(slack.get("channel"), "notifier.slack.channel"),
            bot=_string(slack.get("bot"), "notifier.slack.bot"),
        ),
        typetalk=TypetalkNotifier(
            token=_string(typetalk.get("token"), "notifier.typetalk.token"),
            topic_id=_string(typetalk.get("topic_id"), "notifier.typetalk.topic_id"),
        ),
    )


def _terraform(node: yaml.Node | None) -> TerraformSettings:
    values = _mapping(node, "terraform")
    plan = _mapping(values.get("plan"), "terraform.plan")
    destroy = _mapping(plan.get("when_destroy"), "terraform.plan.when_destroy")
    return TerraformSettings(
        default_template=_template(values.get("default"), "terraform.default"),
        fmt_template=_template(values.get("fmt"), "terraform.fmt"),
        plan=PlanSettings(
            template=_string(plan.get("template"), "terraform.plan.template"),
            add_or_update_label=_label(
                plan.get("when_add_or_update_only"), "terraform.plan.when_add_or_update_only"
            ),
            when_destroy=WhenDestroy(
                label=_string(destroy.get("label"), "terraform.plan.when_destroy.label"),
                template=_string(destroy.get("template"), "terraform.plan.when_destroy.template"),
            ),
            no_changes_label=_label(plan.get("when_no_changes"), "terraform.plan.when_no_changes"),
            plan_error_label=_label(plan.get("when_plan_error"), "terraform.plan.when_plan_error"),
        ),
        apply_template=_template(values.get("apply"), "terraform.apply"),
        use_raw_output=_bool(values.get("use_raw_output"), "terraform.use_raw_output"),
    )


def parse_config(text: str, path: str = "") -> Config:
    """Build a Config from YAML text; unknown keys are ignored."""
    try:
        root = next(yaml.compose_all(text, Loader=yaml.SafeLoader), None)
    except yaml.YAMLError as exc:
        raise ConfigError(str(exc)) from exc
    values = _mapping(root, "config")
    return Config(
        ci=_string(values.get("ci"), "ci"),
        notifier=_notifiers(values.get("notifier")),
        terraform=_terraform(values.get("terraform")),
        path=path,
    )


def load_config(path: str | os.PathLike[str]) -> Config:
    """Read the configuration file at ``path``."""
    path = os.fspath(path)
    if not os.path.exists(path):
        raise ConfigError(f"{path}: no config file")
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError:
        text = ""
    return parse_config(text, path)


def find_config(file: str | None = None) -> str:
    """Return ``file`` if it exists, or else the first default file name that does."""
    candidates = (file,) if file else DEFAULT_CONFIG_FILES
    for candidate in candidates:
        if os.path.exists(candidate):
            return candidate
    raise ConfigError("config for tfnotify is not found at all")