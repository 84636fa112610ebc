"""Error base class for vgopath."""

from __future__ import annotations


class VgopathError(Exception):
    """Base class for all errors raised by vgopath."""


__all__ = ["VgopathError"]
