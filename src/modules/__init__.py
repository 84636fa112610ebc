"""Module listing: records, sources, decoding and filtering."""

from modules.decode import DecodeError, ModuleDecoder, parse_modules, read_modules
from modules.filter import filter_modules_without_dir, filter_vendor_modules
from modules.models import Module
from modules.reader import (
    ModuleReader,
    ModuleSource,
    ProducerExitError,
    ShutdownTimeoutError,
    StartError,
    open_go_list,
)

__all__ = [
    "DecodeError",
    "Module",
    "ModuleDecoder",
    "ModuleReader",
    "ModuleSource",
    "ProducerExitError",
    "ShutdownTimeoutError",
    "StartError",
    "filter_modules_without_dir",
    "filter_vendor_modules",
    "open_go_list",
    "parse_modules",
    "read_modules",
]
