"""Module record model.

A module record describes one entry of the module list of a workspace: its
import path, the directory backing it, its version and whether it is the main
module.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Module(BaseModel):
    """A module as reported by ``go list -m -json``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    path: str = Field(default="", alias="Path")
    dir: str = Field(
        default="",
        alias="Dir",
        description="Source directory; empty if the module is not available locally",
    )
    version: str = Field(default="", alias="Version")
    main: bool = Field(default=False, alias="Main")


__all__ = ["Module"]
