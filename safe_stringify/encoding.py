"""``stringify``: sanitize a value, then hand it to the json module."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from .config import SanitizerOptions
from .traversal import prepare_for_serialization

Replacer = Callable[[str, Any], Any] | Sequence[str | int]


def _replace_with_function(key: str, value: Any, replacer: Callable[[str, Any], Any]) -> Any:
    value = replacer(key, value)
    if isinstance(value, dict):
        return {name: _replace_with_function(name, item, replacer) for name, item in value.items()}
    if isinstance(value, list):
        return [_replace_with_function(str(index), item, replacer) for index, item in enumerate(value)]
    return value


def _filter_keys(value: Any, allowed: frozenset[str]) -> Any:
    if isinstance(value, dict):
        return {name: _filter_keys(item, allowed) for name, item in value.items() if name in allowed}
    if isinstance(value, list):
        return [_filter_keys(item, allowed) for item in value]
    return value


def apply_replacer(tree: Any, replacer: Replacer | None) -> Any:
    """Apply a ``JSON.stringify``-style replacer to a plain tree.

    A callable is invoked as ``replacer(key, value)`` top-down, starting with
    key ``""`` for the root; list positions are passed as strings. A sequence
    is an allow-list of keys kept in mappings at every level. Kept keys stay
    in the mapping's own order, not in the order of the allow-list.
    """
    if replacer is None:
        return tree
    if callable(replacer):
        return _replace_with_function("", tree, replacer)
    return _filter_keys(tree, frozenset(str(name) for name in replacer))


def _indent(space: int | str | None) -> int | str | None:
    """Normalize ``space`` the way ``JSON.stringify`` does.

    Numbers are clamped to 10 and strings cut to 10 characters; anything
    below one space (``0``, negative numbers, ``""``) means compact output.
    """
    if space is None or isinstance(space, bool):
        return None
    if isinstance(space, int):
        space = min(10, space)
        return space if space >= 1 else None
    if isinstance(space, str):
        return space[:10] or None
    return None


def encode_json(tree: Any, replacer: Replacer | None = None, space: int | str | None = None) -> str:
    """Encode a plain tree; compact unless ``space`` asks for indentation."""
    tree = apply_replacer(tree, replacer)
    indent = _indent(space)
    if indent is None:
        return json.dumps(tree, ensure_ascii=False, separators=(",", ":"))
    return json.dumps(tree, ensure_ascii=False, indent=indent)


def stringify(
    value: Any,
    replacer: Replacer | None = None,
    space: int | str | None = None,
    options: SanitizerOptions | Mapping[str, Any] | None = None,
) -> str:
    """Serialize any value to JSON text without raising on cycles or faults.

    ``replacer`` and ``space`` are forwarded to :func:`encode_json`;
    ``options`` carries the traversal limits and the redaction rules
    (``redacted_keys``/``redactedKeys`` and ``redacted_paths``/``redactedPaths``).
    """
    return encode_json(prepare_for_serialization(value, options), replacer, space)
