"""The shell's environment: an ordered list of NAME or NAME=value entries."""

from __future__ import annotations

import string
from typing import Iterable, Iterator

_NAME_START = frozenset(string.ascii_letters + "_")
_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_")


def is_valid_name(name: str) -> bool:
    """Whether ``name`` is a valid variable name (letter or _, then alnum or _)."""
    if not name or name[0] not in _NAME_START:
        return False
    return all(ch in _NAME_CHARS for ch in name[1:])


def is_valid_export_identifier(text: str) -> bool:
    """Whether the part of ``text`` before any '=' is a valid name."""
    if not text or text[0] not in _NAME_START:
        return False
    return all(ch in _NAME_CHARS for ch in var_name(text))


def var_name(entry: str) -> str:
    """The name part of an entry: everything before the first '='."""
    return entry.partition("=")[0]


class Environment:
    """Ordered collection of environment entries."""

    def __init__(self, entries: Iterable[str] | None = None) -> None:
        self._entries: list[str] = list(entries) if entries is not None else []

    def _index_with_value(self, key: str) -> int | None:
        prefix = key + "="
        for index, entry in enumerate(self._entries):
            if entry.startswith(prefix):
                return index
        return None

    def _index_by_name(self, name: str) -> int | None:
        for index, entry in enumerate(self._entries):
            if var_name(entry) == name:
                return index
        return None

    def get(self, key: str) -> str | None:
        """Value of ``key``, or None when no ``key=`` entry exists."""
        index = self._index_with_value(key)
        if index is None:
            return None
        return self._entries[index][len(key) + 1 :]

    def set(self, key: str, value: str) -> None:
        """Replace the ``key=`` entry in place, or append a new one."""
        entry = f"{key}={value}"
        index = self._index_with_value(key)
        if index is None:
            self._entries.append(entry)
        else:
            self._entries[index] = entry

    def export(self, entry: str) -> None:
        """Store ``entry`` whole, replacing any entry with the same name."""
        index = self._index_by_name(var_name(entry))
        if index is None:
            self._entries.append(entry)
        else:
            self._entries[index] = entry

    def unset(self, name: str) -> None:
        """Remove the first entry named ``name``, if any."""
        index = self._index_by_name(name)
        if index is not None:
            del self._entries[index]

    def entries(self) -> list[str]:
        """A copy of the entries in order."""
        return list(self._entries)

    def export_listing(self) -> list[str]:
        """Lines of ``export`` with no arguments, sorted by entry."""
        lines = []
        for entry in sorted(self._entries):
            name, sep, value = entry.partition("=")
            if sep:
                lines.append(f'declare -x {name}="{value}"')
            else:
                lines.append(f"declare -x {name}")
        return lines

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Environment({self._entries!r})"