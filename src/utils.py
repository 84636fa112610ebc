"""Shared filesystem utilities for vgopath."""

from __future__ import annotations

import os
import shutil
from pathlib import Path


def remove_all(path: str | Path) -> None:
    """Remove ``path`` and everything below it.

    Symlinks are removed themselves, never followed. A missing path is not an
    error.

    Examples:
        >>> remove_all("/nonexistent/vgopath/path")
    """
    target = Path(path)
    if target.is_symlink() or target.is_file():
        target.unlink(missing_ok=True)
        return
    if target.is_dir():
        shutil.rmtree(target)
        return
    # Dangling entries of other kinds (sockets, fifos).
    if os.path.lexists(target):
        target.unlink()


def default_gopath() -> Path:
    """Return the GOPATH the go tool would use.

    Only the first entry of a list-valued ``$GOPATH`` is used; without
    ``$GOPATH`` the go tool defaults to ``~/go``.
    """
    gopath = os.environ.get("GOPATH", "")
    entries = [entry for entry in gopath.split(os.pathsep) if entry]
    if entries:
        return Path(entries[0])
    return Path.home() / "go"


__all__ = ["default_gopath", "remove_all"]
