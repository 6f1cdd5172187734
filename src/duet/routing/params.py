"""Path parameter converters for route patterns like ``/users/{id:int}``."""

import re
from functools import cache

from duet.errors import ConfigurationError

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}


@cache
def converter_regex(param_type: str) -> re.Pattern[str]:
    """Return the compiled full-match regex for a converter name.

    Raises ``ConfigurationError`` for unknown converter names.
    """
    try:
        pattern, _ = CONVERTERS[param_type]
    except KeyError:
        known = ", ".join(sorted(CONVERTERS))
        msg = f"Unknown path converter {param_type!r} (known: {known})"
        raise ConfigurationError(msg) from None
    return re.compile(f"^{pattern}$")


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert a captured path parameter string to the target type.

    Raises ``ValueError`` if the string cannot be converted.
    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    _, target_type = CONVERTERS[param_type]
    return target_type(value)
