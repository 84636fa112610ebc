"""Assembly of a virtual GOPATH.

The destination gets three entries: ``src`` mirrors every module of the
current workspace at its import path, while ``bin`` and ``pkg`` are symlinks
to the directories of the real GOPATH.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from errors import VgopathError
from link.project import link_nodes
from link.tree import build_module_nodes, walk_nodes
from modules.decode import read_modules
from modules.filter import filter_modules_without_dir, filter_vendor_modules
from utils import default_gopath, remove_all
from workspace.config import VgopathConfig

if TYPE_CHECKING:
    from collections.abc import Callable

    from modules.models import Module

logger = logging.getLogger(__name__)


class WorkspaceError(VgopathError):
    """Raised when one of the GOPATH entries cannot be set up."""


@dataclass(frozen=True)
class Options:
    skip_go_bin: bool = False
    skip_go_src: bool = False
    skip_go_pkg: bool = False


def _replace_with_symlink(src: Path, dst: Path) -> None:
    remove_all(dst)
    logger.debug("linking %s -> %s", dst, src)
    os.symlink(src, dst, target_is_directory=True)


def link_go_bin(dst_dir: str | os.PathLike[str]) -> None:
    """Link ``<dst_dir>/bin`` to ``$GOBIN``, or ``<GOPATH>/bin`` if unset."""
    src_go_bin_dir = os.environ.get("GOBIN", "")
    src = Path(src_go_bin_dir) if src_go_bin_dir else default_gopath() / "bin"
    _replace_with_symlink(src, Path(dst_dir) / "bin")


def link_go_pkg(dst_dir: str | os.PathLike[str]) -> None:
    """Link ``<dst_dir>/pkg`` to ``<GOPATH>/pkg``."""
    _replace_with_symlink(default_gopath() / "pkg", Path(dst_dir) / "pkg")


def link_go_src(
    dst_dir: str | os.PathLike[str],
    *,
    config: VgopathConfig | None = None,
    module_dir: str | os.PathLike[str] | None = None,
    list_modules: Callable[[], list[Module]] | None = None,
) -> None:
    """Mirror the modules of the workspace in ``module_dir`` as ``<dst_dir>/src``.

    Args:
        dst_dir: Root of the virtual GOPATH
        config: Listing command, close timeout and module selection
        module_dir: Directory the listing command runs in (default: cwd)
        list_modules: Replaces running the listing command
    """
    if config is None:
        config = VgopathConfig()

    if list_modules is None:
        try:
            modules = read_modules(
                dir=module_dir,
                command=config.list_command,
                close_timeout=config.close_timeout,
            )
        except VgopathError as exc:
            msg = f"error reading modules: {exc}"
            raise WorkspaceError(msg) from exc
    else:
        modules = list_modules()

    if config.include_main_module:
        modules = filter_modules_without_dir(modules)
    else:
        modules = filter_vendor_modules(modules)

    try:
        nodes = build_module_nodes(modules)
    except VgopathError as exc:
        msg = f"error building module tree: {exc}"
        raise WorkspaceError(msg) from exc

    dst_go_src_dir = Path(dst_dir) / "src"
    remove_all(dst_go_src_dir)
    dst_go_src_dir.mkdir()

    logger.debug("linking %d modules into %s", len(modules), dst_go_src_dir)
    if logger.isEnabledFor(logging.DEBUG):
        for path, node in walk_nodes(nodes):
            if node.module is not None:
                logger.debug("  %s -> %s", path, node.module.dir)
    link_nodes(dst_go_src_dir, nodes)


def run(
    dst_dir: str | os.PathLike[str],
    opts: Options,
    *,
    config: VgopathConfig | None = None,
    module_dir: str | os.PathLike[str] | None = None,
) -> None:
    """Set up the virtual GOPATH at ``dst_dir``.

    Raises:
        WorkspaceError: Naming the GOPATH entry that failed.
    """
    if not opts.skip_go_src:
        try:
            link_go_src(dst_dir, config=config, module_dir=module_dir)
        except (OSError, VgopathError) as exc:
            msg = f"error linking GOPATH/src: {exc}"
            raise WorkspaceError(msg) from exc

    if not opts.skip_go_bin:
        try:
            link_go_bin(dst_dir)
        except OSError as exc:
            msg = f"error linking GOPATH/bin: {exc}"
            raise WorkspaceError(msg) from exc

    if not opts.skip_go_pkg:
        try:
            link_go_pkg(dst_dir)
        except OSError as exc:
            msg = f"error linking GOPATH/pkg: {exc}"
            raise WorkspaceError(msg) from exc


__all__ = [
    "Options",
    "WorkspaceError",
    "link_go_bin",
    "link_go_pkg",
    "link_go_src",
    "run",
]
