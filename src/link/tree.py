"""Module path tree.

Module paths are split on ``/`` into segments and arranged in a forest keyed
by segment, so that ``example.org/b`` and ``example.org/b/1`` share the nodes
``example.org`` and ``b``.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from errors import VgopathError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from modules.models import Module

_INVALID_SEGMENTS = frozenset({"", ".", ".."})


class InvalidPathError(VgopathError):
    """Raised for a module path that cannot be placed in the tree."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"invalid module path {path!r}: {reason}")


class DuplicateModuleError(VgopathError):
    """Raised when two modules resolve to the same tree node."""

    def __init__(self, existing: Module, module: Module, segment: str) -> None:
        self.existing = existing
        self.module = module
        super().__init__(
            f"cannot insert module {module.path} into node {segment}: "
            f"module {existing.path} already exists"
        )


@dataclass
class Node:
    """One path segment of the module tree.

    ``module`` is set when a module path ends at this node. A node may carry
    a module and children at the same time.
    """

    segment: str
    module: Module | None = None
    children: list[Node] = field(default_factory=list)

    def child(self, segment: str) -> Node | None:
        for child in self.children:
            if child.segment == segment:
                return child
        return None


def _split_path(path: str) -> list[str]:
    if not path:
        raise InvalidPathError(path, "empty module path")
    segments = path.split("/")
    for segment in segments:
        if segment in _INVALID_SEGMENTS:
            raise InvalidPathError(path, f"invalid segment {segment!r}")
    return segments


def _insert_module(node: Node, module: Module, segments: list[str]) -> None:
    for segment in segments:
        child = node.child(segment)
        if child is None:
            child = Node(segment=segment)
            node.children.append(child)
        node = child

    if node.module is not None:
        raise DuplicateModuleError(node.module, module, node.segment)
    node.module = module


def build_module_nodes(modules: Iterable[Module]) -> list[Node]:
    """Build the module forest, one root per distinct first path segment.

    Modules are inserted in path order. The order of the returned roots is
    not part of the contract; compare forests by content.

    Raises:
        InvalidPathError: If a module path is empty or has an empty, ``.``
            or ``..`` segment.
        DuplicateModuleError: If two modules have the same path.
    """
    node_by_root_segment: dict[str, Node] = {}

    for module in sorted(modules, key=lambda mod: mod.path):
        segments = _split_path(module.path)

        root_segment = segments[0]
        node = node_by_root_segment.get(root_segment)
        if node is None:
            node = Node(segment=root_segment)
            node_by_root_segment[root_segment] = node

        _insert_module(node, module, segments[1:])

    return list(node_by_root_segment.values())


def walk_nodes(nodes: Iterable[Node], prefix: str = "") -> Iterator[tuple[str, Node]]:
    """Yield ``(path, node)`` for every node, depth first, parents first."""
    for node in nodes:
        path = posixpath.join(prefix, node.segment) if prefix else node.segment
        yield path, node
        yield from walk_nodes(node.children, path)


__all__ = [
    "DuplicateModuleError",
    "InvalidPathError",
    "Node",
    "build_module_nodes",
    "walk_nodes",
]
