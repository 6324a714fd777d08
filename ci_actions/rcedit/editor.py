"""Windows resource editing through the ``rcedit`` binary.

Sets version-info strings, file/product versions, icon, requested execution
level and application manifest on every executable matched by a glob.

Example:
    >>> settings = ResourceEditSettings(path="build/*.exe", **{"file-version": "1.2.3"})
    >>> await edit_resources(settings)
    [PosixPath('/work/build/app.exe')]
"""

import glob
from pathlib import Path
from typing import Any

import structlog

from ci_actions.config.settings import EXECUTION_LEVELS, ResourceEditSettings
from ci_actions.exceptions import ValidationError
from ci_actions.utils.async_subprocess import exec_command

log = structlog.get_logger(__name__)

# settings field -> key inside the VERSIONINFO string table
VERSION_STRINGS = {
    "comments": "Comments",
    "company_name": "CompanyName",
    "file_description": "FileDescription",
    "internal_filename": "InternalFilename",
    "legal_copyright": "LegalCopyright",
    "legal_trademarks1": "LegalTrademarks1",
    "legal_trademarks2": "LegalTrademarks2",
    "original_filename": "OriginalFilename",
    "product_name": "ProductName",
}

# rcedit option -> settings field
TOP_LEVEL_OPTIONS = {
    "file-version": "file_version",
    "product-version": "product_version",
    "icon": "icon",
    "requested-execution-level": "requested_execution_level",
    "application-manifest": "application_manifest",
}

# rcedit option -> command line flag
FLAGS = {
    "file-version": "--set-file-version",
    "product-version": "--set-product-version",
    "icon": "--set-icon",
    "requested-execution-level": "--set-requested-execution-level",
    "application-manifest": "--application-manifest",
}


def remove_empty(values: dict[str, str]) -> dict[str, str]:
    return {key: value for key, value in values.items() if value != ""}


def apply_branding(settings: ResourceEditSettings) -> ResourceEditSettings:
    """Fill empty metadata with organisation defaults.

    Only repositories owned by ``settings.branding.owner`` get defaults;
    explicit inputs always win.
    """
    branding = settings.branding
    github = settings.github
    if not github.owner or github.owner != branding.owner:
        return settings

    defaults = {
        "file_description": f"{branding.name} component: {github.repo}@{github.sha}",
        "product_name": branding.name,
        "company_name": branding.name,
        "legal_copyright": f"© {branding.copyright_year} {branding.name}",
    }
    updates = {name: value for name, value in defaults.items() if not getattr(settings, name)}
    return settings.model_copy(update=updates)


def validate_properties(settings: ResourceEditSettings) -> None:
    """Reject requests that would not change anything or are malformed.

    Raises:
        ValidationError: If every property is empty, or the execution level
            is not one of the supported values.
    """
    fields = list(VERSION_STRINGS) + list(TOP_LEVEL_OPTIONS.values())
    if not any(getattr(settings, name) for name in fields):
        raise ValidationError("No properties set")

    level = settings.requested_execution_level
    if level and level not in EXECUTION_LEVELS:
        raise ValidationError("Invalid value for requested-execution-level")


def build_options(settings: ResourceEditSettings) -> dict[str, Any]:
    """The rcedit property bag, with empty values removed."""
    options: dict[str, Any] = {
        "version-string": remove_empty({key: getattr(settings, name) for name, key in VERSION_STRINGS.items()}),
    }
    options.update(remove_empty({option: getattr(settings, name) for option, name in TOP_LEVEL_OPTIONS.items()}))
    return options


def rcedit_args(path: Path | str, options: dict[str, Any]) -> list[str]:
    """Command line for applying ``options`` to ``path``."""
    args = [str(path)]
    for key, value in options.get("version-string", {}).items():
        args.extend(["--set-version-string", key, value])
    for option, flag in FLAGS.items():
        if option in options:
            args.extend([flag, options[option]])
    return args


def resolve_paths(pattern: str, root: Path | str | None = None) -> list[Path]:
    """Absolute paths of the files matching ``pattern`` (``**`` supported)."""
    base = Path(root) if root else Path.cwd()
    full_pattern = pattern if Path(pattern).is_absolute() else str(base / pattern)
    return sorted(Path(p).resolve() for p in glob.glob(full_pattern, recursive=True) if Path(p).is_file())


async def edit_resources(settings: ResourceEditSettings, root: Path | str | None = None) -> list[Path]:
    """Apply the configured resources to every file matched by ``settings.path``.

    Files are processed one at a time; the first failure aborts the run.

    Returns:
        The files that were edited.

    Raises:
        ValidationError: If the inputs are invalid (checked before any file is touched).
        CommandError: If rcedit fails on a file.
    """
    settings = apply_branding(settings)
    validate_properties(settings)

    paths = resolve_paths(settings.path, root=root)
    log.debug("resolved_paths", pattern=settings.path, paths=[str(p) for p in paths])
    if not paths:
        log.warning("no_files_matched", pattern=settings.path)
        return []

    options = build_options(settings)
    for path in paths:
        await exec_command(settings.rcedit_path, *rcedit_args(path, options))
        log.info("resources_edited", path=str(path))

    return paths
