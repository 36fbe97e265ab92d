"""
Recursive configuration merge.

Dependencies: none
System role: Theme configuration inheritance
"""

from typing import Any


def merge_recursive(override: Any, original: Any) -> Any:
    """
    Merge two configuration values, with original taking precedence.

    - two scalars: original wins
    - a list and a list or scalar: both are concatenated, override first
    - two mappings: merged key by key
    - a mapping and a non-mapping: original wins

    Args:
        override: Value from the theme being merged in
        original: Value accumulated so far

    Returns:
        Merged value
    """
    if isinstance(override, dict) and isinstance(original, dict):
        merged = dict(original)
        for key, value in override.items():
            merged[key] = merge_recursive(value, original[key]) if key in original else value
        return merged

    if isinstance(original, dict) or isinstance(override, dict):
        return original

    if isinstance(override, list) or isinstance(original, list):
        override_list = override if isinstance(override, list) else [override]
        original_list = original if isinstance(original, list) else [original]
        return [*override_list, *original_list]

    return original
