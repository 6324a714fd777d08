"""Configuration system for the CI actions.

This package provides type-safe configuration management using Pydantic.

Key Components:
    - ReleaseSettings: Release orchestrator settings with YAML loading support
    - ResourceEditSettings: Inputs of the resource editor action
    - GitHubConfig: Repository host configuration
    - JiraConfig: Jira REST API configuration

Example:
    >>> from ci_actions.config import ReleaseSettings
    >>> settings = ReleaseSettings.from_action_inputs()
    >>> settings.dry_run
    False
"""

from ci_actions.config.settings import (
    EXECUTION_LEVELS,
    BrandingConfig,
    GitHubConfig,
    JiraConfig,
    ReleaseSettings,
    ResourceEditSettings,
)

__all__ = [
    "EXECUTION_LEVELS",
    "BrandingConfig",
    "GitHubConfig",
    "JiraConfig",
    "ReleaseSettings",
    "ResourceEditSettings",
]
