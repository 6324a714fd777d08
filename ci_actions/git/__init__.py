"""Local git operations.

Example:
    >>> from ci_actions.git import get_latest_version, git_push_tags, git_tag
    >>> previous = await get_latest_version()
    >>> await git_tag("v2.0.0")
    >>> await git_push_tags()
"""

from ci_actions.git.local import get_latest_version, git_push_tags, git_tag, read_file_at_ref

__all__ = [
    "get_latest_version",
    "git_push_tags",
    "git_tag",
    "read_file_at_ref",
]
