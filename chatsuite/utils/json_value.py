"""Lookup of nested values in decoded JSON bodies by ``/a/0/b`` style paths."""

from typing import Any

_MISSING = object()


class JsonPathNotFound(LookupError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"{path} is missing")


def x_get(value: Any, path: str, default: Any = _MISSING) -> Any:
    """
    Return the value at ``path``.

    Segments are object keys or list indexes. A path without a leading slash
    is a single top-level key. Raises JsonPathNotFound unless a default is given.
    """
    segments = path.lstrip("/").split("/") if path.startswith("/") else [path]
    current = value
    for segment in segments:
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            if default is _MISSING:
                raise JsonPathNotFound(path)
            return default
    return current
