"""Sanitizing traversal that turns arbitrary object graphs into plain JSON trees.

The walker is depth-first and keeps all of its state on a per-call
``_Traversal`` instance:

- cycles are detected against the objects on the active root-to-node path,
  so a shared object seen at two sibling positions is rendered twice,
- depth and a global edge budget bound the work on hostile graphs,
- every fault raised by the input (attribute access, item access,
  enumeration, ``__json__`` hooks) is converted into an in-tree marker.
"""

from __future__ import annotations

import inspect
import logging
import math
from collections.abc import Mapping, Sequence, Set
from typing import Any

from .config import SanitizerOptions
from .hooks import NO_JSON_FORM, json_form
from .redaction import ARRAY_SEGMENT, REDACTED, RedactionPolicy, join_path

LOG = logging.getLogger(__name__)

CIRCULAR = "[Circular]"
REPLACEMENT_NODE = "..."

_SCALAR_TYPES = (str, int, float, bool)
_NOT_ARRAY_LIKE = (str, bytes, bytearray)


def throws_message(err: BaseException | None) -> str:
    """Render a caught fault as ``[Throws: <message>]``."""
    if err is None:
        return "[Throws: ?]"
    try:
        message = str(err)
    except Exception:
        message = ""
    return f"[Throws: {message or '?'}]"


def _key_name(key: Any) -> str:
    """Coerce a mapping key to the string the json module would emit."""
    if isinstance(key, str):
        return key
    if key is True:
        return "true"
    if key is False:
        return "false"
    if key is None:
        return "null"
    try:
        return str(key)
    except Exception as err:
        return throws_message(err)


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _own_attribute_names(value: Any) -> tuple[list[str], set[str]] | None:
    """Return instance attribute names and the subset that are slots.

    ``None`` means the object carries no per-instance state at all.
    """
    instance_dict = getattr(value, "__dict__", None)
    slot_names: list[str] = []
    for cls in type(value).__mro__:
        slots = cls.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        slot_names.extend(name for name in slots if not _is_dunder(name))

    if not isinstance(instance_dict, Mapping) and not slot_names:
        return None

    names: list[str] = []
    if isinstance(instance_dict, Mapping):
        names.extend(name for name in instance_dict if isinstance(name, str) and not _is_dunder(name))
    seen = set(names)
    slots_only = {name for name in slot_names if name not in seen}
    names.extend(name for name in slot_names if name in slots_only)
    return names, slots_only


class _Traversal:
    """State for exactly one top-level sanitizing call."""

    def __init__(self, options: SanitizerOptions) -> None:
        self._max_depth = options.max_depth
        self._max_edges = options.max_edges
        self._min_preserved_depth = options.min_preserved_depth
        self._redaction = RedactionPolicy.build(options.key_matchers, options.redacted_paths)
        self._ancestors: set[int] = set()
        self._edges = 0

    def _edges_exceeded(self, depth: int) -> bool:
        return depth > self._min_preserved_depth and self._edges > self._max_edges

    def _should_redact(self, parent_path: str | None, key: str) -> bool:
        return parent_path is not None and self._redaction.should_redact(parent_path, key)

    def visit(self, value: Any, depth: int, path: tuple[str, ...]) -> Any:
        if depth > self._max_depth:
            return REPLACEMENT_NODE
        try:
            return self._visit_node(value, depth, path)
        except MemoryError:
            raise
        except Exception as err:
            LOG.debug("Value at %s failed to sanitize: %s", join_path(path) or "<root>", type(err).__name__)
            return throws_message(err)

    def _visit_node(self, value: Any, depth: int, path: tuple[str, ...]) -> Any:
        if isinstance(value, float) and not math.isfinite(value):
            return None
        if value is None or isinstance(value, _SCALAR_TYPES):
            return value
        if id(value) in self._ancestors:
            return CIRCULAR

        # Every value of a hook chain stays referenced until the node is done,
        # so no id in the chain can be reused while it sits in the ancestors.
        chain: list[Any] = []
        try:
            while True:
                chain.append(value)
                self._ancestors.add(id(value))
                try:
                    replacement = json_form(value)
                except Exception as err:
                    LOG.debug("JSON hook of %s raised %s", type(value).__name__, type(err).__name__)
                    return throws_message(err)
                if replacement is NO_JSON_FORM:
                    break
                # The replacement takes this node's place; it is not a new edge.
                if isinstance(replacement, float) and not math.isfinite(replacement):
                    return None
                if replacement is None or isinstance(replacement, _SCALAR_TYPES):
                    return replacement
                if id(replacement) in self._ancestors:
                    return CIRCULAR
                if len(chain) > self._max_depth:
                    return REPLACEMENT_NODE
                value = replacement

            if inspect.isroutine(value) or inspect.isclass(value) or inspect.ismodule(value):
                return None
            if isinstance(value, Mapping):
                return self._visit_mapping(value, depth, path)
            if isinstance(value, (Sequence, Set)) and not isinstance(value, _NOT_ARRAY_LIKE):
                return self._visit_sequence(value, depth, path)
            return self._visit_object(value, depth, path)
        finally:
            for link in chain:
                self._ancestors.discard(id(link))

    def _visit_sequence(self, value: Sequence[Any] | Set[Any], depth: int, path: tuple[str, ...]) -> list[Any]:
        result: list[Any] = []
        child_path = (*path, ARRAY_SEGMENT)
        try:
            for item in value:
                self._edges += 1
                if self._edges_exceeded(depth + 1):
                    LOG.debug("Edge budget exhausted at %s", join_path(child_path))
                    result.append(REPLACEMENT_NODE)
                    break
                result.append(self.visit(item, depth + 1, child_path))
        except Exception as err:
            LOG.debug("Iterating %s raised %s", type(value).__name__, type(err).__name__)
        return result

    def _visit_mapping(self, value: Mapping[Any, Any], depth: int, path: tuple[str, ...]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        parent_path = join_path(path) if self._redaction.active else None
        try:
            for key in value:
                name = _key_name(key)
                if self._should_redact(parent_path, name):
                    result[name] = REDACTED
                    continue
                self._edges += 1
                if self._edges_exceeded(depth + 1):
                    LOG.debug("Edge budget exhausted at %s", join_path((*path, name)))
                    result[name] = REPLACEMENT_NODE
                    break
                try:
                    item = value[key]
                except Exception as err:
                    item = throws_message(err)
                result[name] = self.visit(item, depth + 1, (*path, name))
        except Exception as err:
            LOG.debug("Enumerating %s raised %s", type(value).__name__, type(err).__name__)
        return result

    def _visit_object(self, value: Any, depth: int, path: tuple[str, ...]) -> Any:
        result: dict[str, Any] = {}
        try:
            attributes = _own_attribute_names(value)
        except Exception as err:
            LOG.debug("Listing attributes of %s raised %s", type(value).__name__, type(err).__name__)
            return result
        if attributes is None:
            return str(value)

        names, slot_names = attributes
        parent_path = join_path(path) if self._redaction.active else None
        try:
            for name in names:
                if self._should_redact(parent_path, name):
                    result[name] = REDACTED
                    continue
                try:
                    item = getattr(value, name)
                except AttributeError as err:
                    if name in slot_names:
                        # Unset slot: not an own property.
                        continue
                    item = throws_message(err)
                except Exception as err:
                    item = throws_message(err)
                self._edges += 1
                if self._edges_exceeded(depth + 1):
                    LOG.debug("Edge budget exhausted at %s", join_path((*path, name)))
                    result[name] = REPLACEMENT_NODE
                    break
                result[name] = self.visit(item, depth + 1, (*path, name))
        except Exception as err:
            LOG.debug("Enumerating attributes of %s raised %s", type(value).__name__, type(err).__name__)
        return result


def prepare_for_serialization(value: Any, options: SanitizerOptions | Mapping[str, Any] | None = None) -> Any:
    """Return a plain, acyclic, bounded copy of ``value`` that ``json`` can encode.

    Markers replace what cannot or should not be included: ``"[Circular]"``
    for back-references to an ancestor, ``"[Throws: <message>]"`` for faults,
    ``"..."`` for depth or edge budget exhaustion and ``"[REDACTED]"`` for
    redacted properties. Never raises because of the shape or behavior of
    ``value``.
    """
    traversal = _Traversal(SanitizerOptions.coerce(options))
    return traversal.visit(value, 0, ())


ensure_properties = prepare_for_serialization
