"""Common utility functions."""

from typing import Any


def get_value(obj: Any, key: str, *aliases: str, default: Any = None) -> Any:
    """Get value from dict or object attribute, trying aliases in order.

    Aliases let settings written with camelCase keys (``outputFile``) and
    snake_case keys (``output_file``) be read the same way.
    """
    for name in (key, *aliases):
        if isinstance(obj, dict):
            if name in obj:
                return obj[name]
        elif hasattr(obj, name):
            return getattr(obj, name)
    return default
