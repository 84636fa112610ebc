"""Selection of the modules that can be projected."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from modules.models import Module


def filter_vendor_modules(modules: Iterable[Module]) -> list[Module]:
    """Drop modules without a directory and the unversioned main module.

    Relative order of the remaining modules is preserved.
    """
    return [
        module
        for module in modules
        if not (not module.dir or (not module.version and module.main))
    ]


def filter_modules_without_dir(modules: Iterable[Module]) -> list[Module]:
    """Drop only the modules that have no local directory."""
    return [module for module in modules if module.dir]


__all__ = ["filter_modules_without_dir", "filter_vendor_modules"]
