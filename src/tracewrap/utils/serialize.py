from typing import Any

UNSET = object()
"""Marker for "not given on the command line"; dropped by `recursive_merge`."""


def recursive_merge(*dictionaries: dict | None) -> dict:
    """Merge dictionaries left to right; later values win.

    Nested dicts are merged key by key. Values that are `UNSET` are skipped,
    so CLI options that were not passed never override a config file.
    """
    if not dictionaries:
        return {}
    result: dict[str, Any] = {}
    for d in dictionaries:
        if d is None:
            continue
        for key, value in d.items():
            if value is UNSET:
                continue
            if isinstance(value, dict):
                value = recursive_merge(value)
                if not value and isinstance(result.get(key), dict):
                    continue
                if isinstance(result.get(key), dict):
                    result[key] = recursive_merge(result[key], value)
                    continue
            result[key] = value
    return result
