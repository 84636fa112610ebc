from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from errors import VgopathError
from modules.reader import CLOSE_TIMEOUT, GO_LIST_COMMAND

CONFIG_FILENAME = "vgopath.toml"


class VgopathConfig(BaseModel):
    """Configuration for building a virtual GOPATH."""

    model_config = ConfigDict(extra="forbid")

    skip_go_src: bool = Field(
        default=False,
        description="Skip mirroring the module list as GOPATH/src",
    )
    skip_go_bin: bool = Field(
        default=False,
        description="Skip linking GOPATH/bin",
    )
    skip_go_pkg: bool = Field(
        default=False,
        description="Skip linking GOPATH/pkg",
    )
    list_command: list[str] = Field(
        default_factory=lambda: list(GO_LIST_COMMAND),
        description="Command printing the module list as a JSON stream",
    )
    close_timeout: float = Field(
        default=CLOSE_TIMEOUT,
        gt=0,
        description="Seconds to wait for the list command to exit",
    )
    include_main_module: bool = Field(
        default=False,
        description=(
            "Mirror the main module at its import path even though it has no version"
        ),
    )

    @field_validator("list_command")
    @classmethod
    def validate_list_command(cls, v: list[str]) -> list[str]:
        if not v or not v[0]:
            msg = "list_command must name a program"
            raise ValueError(msg)
        return v


class ConfigError(VgopathError):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path) -> VgopathConfig:
    """Load configuration from vgopath.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return VgopathConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return VgopathConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
