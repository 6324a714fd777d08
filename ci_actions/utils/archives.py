"""Recursive archive extraction using 7-Zip."""

from pathlib import Path

import structlog

from ci_actions.utils.async_subprocess import exec_command

log = structlog.get_logger(__name__)

SEVEN_ZIP = "7z"


async def unzip_all(path: Path | str, seven_zip: str = SEVEN_ZIP) -> list[Path]:
    """Extract every ``.zip`` file below ``path`` into its own directory.

    Subdirectories are walked depth-first. Archives are extracted next to
    themselves; archives produced by an extraction are not re-scanned.

    Args:
        path: Directory to walk
        seven_zip: 7-Zip executable

    Returns:
        The archives that were extracted, in walk order.

    Raises:
        CommandError: If 7-Zip fails on any archive.
    """
    root = Path(path)
    extracted: list[Path] = []

    for entry in sorted(root.iterdir()):
        if entry.name.endswith(".zip"):
            log.info("extracting_archive", archive=str(entry), destination=str(root))
            await exec_command(seven_zip, "x", str(entry), f"-o{root}")
            extracted.append(entry)
        elif entry.is_dir() and not entry.is_symlink():
            extracted.extend(await unzip_all(entry, seven_zip=seven_zip))

    return extracted
