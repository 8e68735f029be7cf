# clickhouse_hosting/core/validation.py
import re
from typing import Any, Optional

from clickhouse_hosting.core.errors import ResourceValidationError


MAX_RESOURCE_NAME_LENGTH = 64

_RESOURCE_NAME = re.compile(r"[A-Za-z][A-Za-z0-9-]*")


def require_non_empty(value: Optional[str], param_name: str) -> str:
    if value is None:
        raise ResourceValidationError(param_name, "value cannot be None")

    if not isinstance(value, str):
        raise ResourceValidationError(param_name, "value must be a string")

    if value == "":
        raise ResourceValidationError(param_name, "value cannot be empty")

    return value


def require_not_none(value: Any, param_name: str) -> Any:
    if value is None:
        raise ResourceValidationError(param_name, "value cannot be None")
    return value


def validate_resource_name(name: str, param_name: str = "name") -> None:
    """
    Check a name is usable as a resource name in the application model.

    Rules: starts with an ASCII letter, only ASCII letters, digits and
    hyphens, no consecutive hyphens, does not end with a hyphen, at most
    64 characters.
    """
    require_non_empty(name, param_name)

    if len(name) > MAX_RESOURCE_NAME_LENGTH:
        raise ResourceValidationError(
            param_name,
            f"'{name}' is longer than {MAX_RESOURCE_NAME_LENGTH} characters"
        )

    if not _RESOURCE_NAME.fullmatch(name):
        raise ResourceValidationError(
            param_name,
            f"'{name}' must start with an ASCII letter and contain only ASCII letters, digits and hyphens"
        )

    if "--" in name:
        raise ResourceValidationError(param_name, f"'{name}' must not contain consecutive hyphens")

    if name.endswith("-"):
        raise ResourceValidationError(param_name, f"'{name}' must not end with a hyphen")
