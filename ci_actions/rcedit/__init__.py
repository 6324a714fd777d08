"""Windows resource editor action."""

from ci_actions.rcedit.editor import build_options, edit_resources, rcedit_args, validate_properties

__all__ = [
    "build_options",
    "edit_resources",
    "rcedit_args",
    "validate_properties",
]
