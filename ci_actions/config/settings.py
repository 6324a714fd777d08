"""
Configuration system using Pydantic for type-safe settings management.

Each action builds exactly one settings object at its entry point, either
from GitHub Actions inputs (``from_action_inputs``) or from a YAML file
(``ReleaseSettings.from_yaml``), and passes it explicitly to the components
it drives. Nothing below the entry point reads the environment again.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ci_actions.exceptions import ConfigurationError
from ci_actions.utils.inputs import get_boolean_input, get_input

DEFAULT_GITHUB_API_URL = "https://api.github.com"

EXECUTION_LEVELS = ("asInvoker", "highestAvailable", "requireAdministrator")


class GitHubConfig(BaseModel):
    """Repository host configuration, mostly taken from the runner environment."""

    token: SecretStr = Field(default=SecretStr(""), description="Token used for the GitHub REST API")
    repository: str = Field(default="", description="Current repository as owner/name")
    sha: str = Field(default="", description="Commit being built")
    api_url: str = Field(default=DEFAULT_GITHUB_API_URL, description="GitHub API base URL")

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0] if self.repository else ""

    @property
    def repo(self) -> str:
        return self.repository.split("/", 1)[1] if "/" in self.repository else self.repository

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, token: str = "") -> GitHubConfig:
        """Build from the GITHUB_* variables the runner exports."""
        environ = os.environ if env is None else env
        return cls(
            token=SecretStr(token or environ.get("GITHUB_TOKEN", "")),
            repository=environ.get("GITHUB_REPOSITORY", ""),
            sha=environ.get("GITHUB_SHA", ""),
            api_url=environ.get("GITHUB_API_URL", DEFAULT_GITHUB_API_URL) or DEFAULT_GITHUB_API_URL,
        )


class JiraConfig(BaseModel):
    """Jira REST API configuration."""

    base_url: str = Field(..., description="Jira site URL, e.g. https://acme.atlassian.net")
    username: str = Field(..., description="Account e-mail used for basic auth")
    token: SecretStr = Field(..., description="Jira API token")
    project_id: str | None = Field(default=None, description="Project id or key owning the release versions")
    project_key: str | None = Field(default=None, description="Restrict changelog issue links to this project")
    walk_to_released: bool = Field(
        default=False,
        description="Advance issues all the way to Released instead of one status per run",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class ReleaseSettings(BaseSettings):
    """Release orchestrator settings.

    Combines the lockfile locations, the dry-run switch and the GitHub and
    Jira client configuration.
    """

    model_config = SettingsConfigDict(
        env_prefix="CI_ACTIONS_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    lockfile_path: Path = Field(default=Path("lockfile.json"), description="Path to the release lockfile")
    repositories_path: Path = Field(
        default=Path("repositories.json"), description="Path to the repositories manifest"
    )
    dry_run: bool = Field(default=False, description="Compute and log, but mutate nothing")
    tag_owner: str | None = Field(
        default=None, description="Owner of the sub-repositories (defaults to the current repository owner)"
    )
    max_concurrent_transitions: int = Field(default=8, ge=1, description="Concurrent Jira transitions")
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    jira: JiraConfig | None = Field(default=None, description="Jira configuration; Jira phases skip when absent")

    @property
    def owner(self) -> str:
        """Owner used when tagging sub-repositories."""
        return self.tag_owner or self.github.owner

    @classmethod
    def from_action_inputs(cls, env: Mapping[str, str] | None = None) -> ReleaseSettings:
        """Build settings from GitHub Actions inputs.

        Raises:
            InputError: If an input cannot be parsed
            ConfigurationError: If the resulting settings are invalid
        """
        jira: dict[str, Any] | None = None
        jira_url = get_input("jira-url", env=env)
        if jira_url:
            jira = {
                "base_url": jira_url,
                "username": get_input("jira-username", required=True, env=env),
                "token": get_input("jira-token", required=True, env=env),
                "project_id": get_input("jira-project-id", env=env) or None,
                "project_key": get_input("jira-project-key", env=env) or None,
                "walk_to_released": get_boolean_input("walk-to-released", False, env=env),
            }

        values: dict[str, Any] = {
            "lockfile_path": get_input("lockfile", env=env) or "lockfile.json",
            "repositories_path": get_input("repositories", env=env) or "repositories.json",
            "dry_run": get_boolean_input("dry-run", False, env=env),
            "tag_owner": get_input("tag-owner", env=env) or None,
            "github": GitHubConfig.from_env(env, token=get_input("gh-token", env=env)),
            "jira": jira,
        }
        max_concurrent = get_input("max-concurrent-transitions", env=env)
        if max_concurrent:
            values["max_concurrent_transitions"] = max_concurrent

        try:
            return cls(**values)
        except ValueError as e:
            raise ConfigurationError(f"Invalid release configuration: {e}") from e

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> ReleaseSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} syntax for environment variable substitution.

        Raises:
            ConfigurationError: If config file is invalid or missing required fields
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            yaml_content = config_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = _interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except ValueError as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e


class BrandingConfig(BaseModel):
    """Organisation defaults for resource metadata.

    Applied only when the current repository belongs to ``owner``.
    """

    owner: str = "exivity"
    name: str = "Exivity"
    copyright_year: int = 2017


class ResourceEditSettings(BaseModel):
    """Inputs of the resource editor action.

    Field aliases are the action input names.
    """

    model_config = ConfigDict(populate_by_name=True)

    path: str = Field(..., min_length=1, description="Glob of the executables to edit")
    file_description: str = Field(default="", alias="file-description")
    file_version: str = Field(default="", alias="file-version")
    product_name: str = Field(default="", alias="product-name")
    product_version: str = Field(default="", alias="product-version")
    company_name: str = Field(default="", alias="company-name")
    comments: str = Field(default="", alias="comments")
    internal_filename: str = Field(default="", alias="internal-filename")
    legal_copyright: str = Field(default="", alias="legal-copyright")
    legal_trademarks1: str = Field(default="", alias="legal-trademarks1")
    legal_trademarks2: str = Field(default="", alias="legal-trademarks2")
    original_filename: str = Field(default="", alias="original-filename")
    icon: str = Field(default="", alias="icon")
    requested_execution_level: str = Field(default="", alias="requested-execution-level")
    application_manifest: str = Field(default="", alias="application-manifest")
    rcedit_path: str = Field(default="rcedit", alias="rcedit-path")
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    branding: BrandingConfig = Field(default_factory=BrandingConfig)

    @classmethod
    def input_names(cls) -> list[str]:
        """Names of the fourteen resource property inputs."""
        return [
            info.alias
            for name, info in cls.model_fields.items()
            if info.alias and name not in ("path", "rcedit_path")
        ]

    @classmethod
    def from_action_inputs(cls, env: Mapping[str, str] | None = None) -> ResourceEditSettings:
        """Build settings from GitHub Actions inputs.

        Raises:
            InputError: If the required ``path`` input is missing
        """
        values: dict[str, Any] = {name: get_input(name, env=env) for name in cls.input_names()}
        values["path"] = get_input("path", required=True, env=env)
        values["rcedit-path"] = get_input("rcedit-path", env=env) or "rcedit"
        values["github"] = GitHubConfig.from_env(env)
        return cls(**values)


def _interpolate_env_vars(content: str) -> str:
    """Interpolate ${VAR_NAME} placeholders with environment variables.

    Supports two syntaxes:
    - ${VAR_NAME} - Required environment variable (raises if not set)
    - ${VAR_NAME:-default} - Optional with default value

    YAML comment lines are left unchanged.

    Raises:
        ValueError: If a required environment variable is not set
    """
    pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default_value = match.group(2)
        value = os.getenv(var_name)

        if value is not None:
            return value
        elif default_value is not None:
            return default_value
        else:
            raise ValueError(f"Environment variable {var_name} is not set")

    def process_line(line: str) -> str:
        if line.lstrip().startswith("#"):
            return line
        return pattern.sub(replace_var, line)

    return "\n".join(process_line(line) for line in content.split("\n"))
