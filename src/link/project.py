"""Projection of a module tree onto the filesystem.

Each node becomes an entry below the destination directory. A module without
sub-modules is a single symlink to its directory. Any other node becomes a
real directory holding its children and, if it carries a module, one symlink
per entry of the module directory.
"""

from __future__ import annotations

import logging
import os
import posixpath
from typing import TYPE_CHECKING

from errors import VgopathError
from utils import remove_all

if TYPE_CHECKING:
    from collections.abc import Iterable

    from link.tree import Node

logger = logging.getLogger(__name__)


class LinkNodeError(VgopathError):
    """A projection failure, qualified with the path of the failing node.

    ``path`` is relative to the directory the projection started in.
    """

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(path, cause)

    def __str__(self) -> str:
        return f"[path {self.path}]: {self.cause}"


def _join_link_node_error(node: Node, exc: BaseException) -> LinkNodeError:
    if isinstance(exc, LinkNodeError):
        return LinkNodeError(posixpath.join(node.segment, exc.path), exc.cause)
    return LinkNodeError(node.segment, exc)


def link_nodes(dir: str | os.PathLike[str], nodes: Iterable[Node]) -> None:
    """Project ``nodes`` into ``dir``, replacing whatever is there.

    Raises:
        LinkNodeError: Naming the path of the node that failed. Filesystem
            errors and paths the OS rejects (such as ones holding a NUL
            byte) are both reported this way.
    """
    for node in nodes:
        try:
            _link_node(dir, node)
        except (OSError, ValueError, LinkNodeError) as exc:
            err = _join_link_node_error(node, exc)
            raise err from err.cause


def _link_node(dir: str | os.PathLike[str], node: Node) -> None:
    dst_dir = os.path.join(dir, node.segment)

    # A module without sub-modules can be linked as a whole.
    if node.module is not None and not node.children:
        remove_all(dst_dir)
        logger.debug("linking %s -> %s", dst_dir, node.module.dir)
        os.symlink(node.module.dir, dst_dir, target_is_directory=True)
        return

    remove_all(dst_dir)
    os.mkdir(dst_dir)

    if node.module is not None:
        _link_module_entries(node.module.dir, dst_dir)

    link_nodes(dst_dir, node.children)


def _link_module_entries(src_dir: str, dst_dir: str) -> None:
    logger.debug("linking entries of %s into %s", src_dir, dst_dir)
    for name in sorted(os.listdir(src_dir)):
        src_path = os.path.join(src_dir, name)
        dst_path = os.path.join(dst_dir, name)
        try:
            os.symlink(src_path, dst_path)
        except OSError as exc:
            msg = f"error symlinking entry {src_path} to {dst_path}: {exc.strerror}"
            raise OSError(exc.errno, msg) from exc


__all__ = ["LinkNodeError", "link_nodes"]
