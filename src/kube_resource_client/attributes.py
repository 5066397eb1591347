"""Nested attribute documents with dot-path addressing.

Every resource keeps its state in an :class:`AttributeTree`. Paths such as
``spec.template.spec.containers`` address nested mappings; the tree creates
missing intermediate mappings on write and never mutates itself on read.
Reads hand out copies of mappings and lists, so the tree only changes
through its write methods.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping
from typing import Any, Self

PATH_DELIMITER = "."

_MISSING = object()


def split_path(path: str) -> list[str]:
    """Split a dot-path into its segments.

    Raises:
        ValueError: If the path is empty or contains an empty segment.
    """
    if not isinstance(path, str) or not path:
        raise ValueError(f"Invalid attribute path: {path!r}")
    segments = path.split(PATH_DELIMITER)
    if any(not segment for segment in segments):
        raise ValueError(f"Invalid attribute path: {path!r}")
    return segments


class AttributeTree:
    """A string-keyed document of scalars, lists and nested mappings.

    Example:
        >>> tree = AttributeTree()
        >>> tree.set("metadata.labels.app", "web").get("metadata.labels")
        {'app': 'web'}
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(dict(data)) if data else {}

    def get(self, path: str, default: Any = None) -> Any:
        """Return the value at ``path`` or ``default`` if it does not exist.

        Mappings and lists are returned as deep copies; mutate the tree
        through :meth:`set`, :meth:`add_to` and :meth:`remove`.
        """
        node = self._lookup(path)
        if node is _MISSING:
            return default
        if isinstance(node, (dict, list)):
            return copy.deepcopy(node)
        return node

    def has(self, path: str) -> bool:
        """Check whether ``path`` exists in the tree."""
        return self._lookup(path) is not _MISSING

    def _lookup(self, path: str) -> Any:
        node: Any = self._data
        for segment in split_path(path):
            if not isinstance(node, dict) or segment not in node:
                return _MISSING
            node = node[segment]
        return node

    def set(self, path: str, value: Any) -> Self:
        """Store ``value`` at ``path``, creating intermediate mappings."""
        *parents, leaf = split_path(path)
        self._parent_for_write(parents)[leaf] = value
        return self

    def add_to(self, path: str, value: Any) -> Self:
        """Append ``value`` to the list stored at ``path``.

        A missing value becomes ``[value]``. A value that is not a list is
        wrapped into a list first, so appending is always well-defined.
        """
        *parents, leaf = split_path(path)
        parent = self._parent_for_write(parents)
        current = parent.get(leaf, _MISSING)
        if current is _MISSING:
            parent[leaf] = [value]
        elif isinstance(current, list):
            current.append(value)
        else:
            parent[leaf] = [current, value]
        return self

    def remove(self, path: str) -> Any:
        """Delete the deepest key addressed by ``path`` and return its value.

        Returns ``None`` when the path does not exist.
        """
        *parents, leaf = split_path(path)
        node: Any = self._data
        for segment in parents:
            if not isinstance(node, dict) or segment not in node:
                return None
            node = node[segment]
        if not isinstance(node, dict):
            return None
        return node.pop(leaf, None)

    def _parent_for_write(self, segments: list[str]) -> dict[str, Any]:
        node = self._data
        for segment in segments:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        return node

    def replace(self, data: Mapping[str, Any] | None) -> None:
        """Replace the whole document with a deep copy of ``data``."""
        self._data = copy.deepcopy(dict(data)) if data else {}

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the underlying document."""
        return copy.deepcopy(self._data)

    def copy(self) -> AttributeTree:
        return AttributeTree(self._data)

    def keys(self) -> Iterator[str]:
        return iter(self._data)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and bool(path) and self.has(path)

    def __bool__(self) -> bool:
        return bool(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AttributeTree):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"AttributeTree({self._data!r})"
