"""Module tree construction and projection."""

from link.project import LinkNodeError, link_nodes
from link.tree import (
    DuplicateModuleError,
    InvalidPathError,
    Node,
    build_module_nodes,
    walk_nodes,
)

__all__ = [
    "DuplicateModuleError",
    "InvalidPathError",
    "LinkNodeError",
    "Node",
    "build_module_nodes",
    "link_nodes",
    "walk_nodes",
]
