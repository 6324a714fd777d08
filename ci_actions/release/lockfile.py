"""Lockfile and repositories manifest.

The lockfile pins the release version and the exact commit of every
constituent repository::

    {"version": "v2.0.0", "repositories": {"api": "abc123", "web": "def456"}}

The repositories manifest lists the repositories the product is built from.
It is either a list of names or a mapping of name to metadata::

    {"api": {"owner": "acme"}, "web": {}}
"""

import json
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator

from ci_actions.exceptions import ConfigurationError

log = structlog.get_logger(__name__)


class Lockfile(BaseModel):
    """Release version plus the commit of each repository."""

    version: str = Field(..., min_length=1)
    repositories: dict[str, str] = Field(default_factory=dict)

    @field_validator("version")
    @classmethod
    def version_is_tag_shaped(cls, value: str) -> str:
        if any(c.isspace() for c in value):
            raise ValueError(f"version is not a valid tag name: {value!r}")
        return value


class RepositoryEntry(BaseModel):
    """Manifest metadata for one repository."""

    name: str
    owner: str | None = None


def parse_lockfile(content: str, source: str = "lockfile") -> Lockfile:
    """Parse lockfile JSON.

    Raises:
        ConfigurationError: If the content is not valid JSON or has the wrong shape.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {source}: {e}") from e

    try:
        return Lockfile.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid lockfile {source}: {e}") from e


def read_lockfile(path: Path | str) -> Lockfile:
    """Read and parse the lockfile at ``path``."""
    lockfile_path = Path(path)
    try:
        content = lockfile_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(f"Lockfile not found: {lockfile_path}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read lockfile: {lockfile_path}") from e

    return parse_lockfile(content, source=str(lockfile_path))


def read_repositories_manifest(path: Path | str) -> dict[str, RepositoryEntry]:
    """Read the repositories manifest.

    Raises:
        ConfigurationError: If the file is missing, not JSON, or neither a list nor a mapping.
    """
    manifest_path = Path(path)
    try:
        data: Any = json.loads(manifest_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Repositories manifest not found: {manifest_path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {manifest_path}: {e}") from e

    if isinstance(data, list):
        return {str(name): RepositoryEntry(name=str(name)) for name in data}

    if isinstance(data, dict):
        entries: dict[str, RepositoryEntry] = {}
        for name, meta in data.items():
            meta = meta if isinstance(meta, dict) else {}
            try:
                entries[name] = RepositoryEntry(name=name, **meta)
            except (TypeError, ValidationError) as e:
                raise ConfigurationError(f"Invalid entry for {name} in {manifest_path}: {e}") from e
        return entries

    raise ConfigurationError(f"Repositories manifest must be a list or an object: {manifest_path}")


def check_repositories(lockfile: Lockfile, manifest: dict[str, RepositoryEntry]) -> list[str]:
    """Names pinned in the lockfile but missing from the manifest.

    Each one is logged as a warning; the release carries on.
    """
    unknown = [name for name in lockfile.repositories if name not in manifest]
    for name in unknown:
        log.warning("repository_not_in_manifest", repository=name)
    return unknown


def repository_owner(
    name: str, manifest: dict[str, RepositoryEntry] | None, default_owner: str
) -> str:
    """Owner of repository ``name``: the manifest's, else ``default_owner``."""
    entry = (manifest or {}).get(name)
    return entry.owner if entry and entry.owner else default_owner
