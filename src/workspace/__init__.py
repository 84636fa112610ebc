"""Virtual GOPATH assembly."""

from workspace.config import ConfigError, VgopathConfig, load_config
from workspace.run import (
    Options,
    WorkspaceError,
    link_go_bin,
    link_go_pkg,
    link_go_src,
    run,
)

__all__ = [
    "ConfigError",
    "Options",
    "VgopathConfig",
    "WorkspaceError",
    "link_go_bin",
    "link_go_pkg",
    "link_go_src",
    "load_config",
    "run",
]
