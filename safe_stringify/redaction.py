"""Key and path matching for redacting sanitized output."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from re import Pattern

REDACTED = "[REDACTED]"
ARRAY_SEGMENT = "[]"


def join_path(path: Sequence[str]) -> str:
    """Render traversal steps as a dot-joined path, e.g. ``events.[].metaData``."""
    return ".".join(path)


@dataclass(frozen=True)
class RedactionPolicy:
    """Redact a property when its key and its parent path both match."""

    keys: tuple[str | Pattern[str], ...] = ()
    paths: tuple[str, ...] = ()

    @classmethod
    def build(cls, keys: Iterable[str | Pattern[str]], paths: Iterable[str]) -> "RedactionPolicy":
        return cls(
            keys=tuple(key.casefold() if isinstance(key, str) else key for key in keys),
            paths=tuple(paths),
        )

    @property
    def active(self) -> bool:
        return bool(self.keys) and bool(self.paths)

    def path_matches(self, path: str) -> bool:
        """Return true when ``path`` equals or descends from a configured prefix.

        The empty prefix is the root path, which every path descends from.
        """
        for prefix in self.paths:
            if not prefix or path == prefix or path.startswith(prefix + "."):
                return True
        return False

    def key_matches(self, key: str) -> bool:
        folded = key.casefold()
        for matcher in self.keys:
            if isinstance(matcher, str):
                if matcher == folded:
                    return True
            elif matcher.search(key):
                return True
        return False

    def should_redact(self, path: str, key: str) -> bool:
        return self.active and self.path_matches(path) and self.key_matches(key)
