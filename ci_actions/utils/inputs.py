"""GitHub Actions input parsing.

Actions receive their ``with:`` inputs as ``INPUT_<NAME>`` environment
variables. This module is the single place that reads them; settings objects
call these helpers once at the entry point and pass the result along.

Example:
    >>> os.environ["INPUT_DRY-RUN"] = "True"
    >>> get_boolean_input("dry-run", False)
    True
"""

import json
import os
from collections.abc import Mapping
from typing import Any, TypeVar

from ci_actions.exceptions import InputError

T = TypeVar("T")

TRUE_VALUES: tuple[Any, ...] = (True, "true", "TRUE", "True")
FALSE_VALUES: tuple[Any, ...] = (False, "false", "FALSE", "False")


def input_env_name(name: str) -> str:
    """Environment variable holding the input ``name``."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


def get_input(name: str, required: bool = False, env: Mapping[str, str] | None = None) -> str:
    """Read a raw action input.

    Args:
        name: Input name as declared in action.yml
        required: Raise when the input is empty
        env: Environment mapping (defaults to os.environ)

    Returns:
        The input value with surrounding whitespace removed, or "".

    Raises:
        InputError: If required and not supplied.
    """
    environ = os.environ if env is None else env
    value = environ.get(input_env_name(name), "").strip()
    if required and not value:
        raise InputError(f"Input required and not supplied: {name}", input_name=name)
    return value


def get_json_input(name: str, default: T | None = None, env: Mapping[str, str] | None = None) -> Any:
    """Read an action input and decode it as JSON.

    Blank inputs return ``default`` without parsing.

    Raises:
        InputError: If the value is not valid JSON. The raw text is included.
    """
    raw = get_input(name, env=env)

    if raw.strip() == "":
        return default

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise InputError(f'Can\'t parse input value "{raw}" as JSON', input_name=name) from e


def parse_boolean(value: Any) -> bool:
    """Map the accepted boolean spellings to a bool.

    Raises:
        InputError: For any other value.
    """
    if isinstance(value, bool):
        return value
    # only strings are compared so that 1/0 never match True/False by equality
    if isinstance(value, str):
        if value in TRUE_VALUES:
            return True
        if value in FALSE_VALUES:
            return False
    raise InputError(f"Can't parse input value ({json.dumps(value)}) as boolean")


def get_boolean_input(name: str, default: bool, env: Mapping[str, str] | None = None) -> bool:
    """Read an action input as a boolean, falling back to ``default`` when empty."""
    value: Any = get_input(name, env=env) or default
    try:
        return parse_boolean(value)
    except InputError as e:
        raise InputError(e.message, input_name=name) from None


def set_output(name: str, value: str, env: Mapping[str, str] | None = None) -> bool:
    """Append an output for later workflow steps.

    Returns:
        False when not running inside GitHub Actions (no GITHUB_OUTPUT file).
    """
    environ = os.environ if env is None else env
    output_file = environ.get("GITHUB_OUTPUT")
    if not output_file:
        return False

    with open(output_file, "a", encoding="utf-8") as f:
        if "\n" in value:
            f.write(f"{name}<<__CI_ACTIONS_EOF__\n{value}\n__CI_ACTIONS_EOF__\n")
        else:
            f.write(f"{name}={value}\n")
    return True
