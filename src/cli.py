"""Command-line interface for vgopath."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from errors import VgopathError
from workspace.config import ConfigError, load_config
from workspace.run import Options, run

DESCRIPTION = """\
Create a 'virtual' GOPATH at the specified directory.
Has to be run from a go module.

vgopath will setup a GOPATH folder structure, ensuring that any tool used
to the traditional setup will function as normal.

The current module will be mirrored to where its go.mod path (the line
after 'module') points at.
"""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vgopath",
        usage="%(prog)s <dir> [opts]",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "dir",
        nargs="?",
        default="",
        help="Directory to create the virtual GOPATH in",
    )
    parser.add_argument(
        "--skip-go-src",
        action="store_true",
        help="Whether to skip mirroring modules as src",
    )
    parser.add_argument(
        "--skip-go-bin",
        action="store_true",
        help="Whether to skip mirroring $GOBIN",
    )
    parser.add_argument(
        "--skip-go-pkg",
        action="store_true",
        help="Whether to skip mirroring $GOPATH/pkg",
    )
    parser.add_argument(
        "-C",
        "--module-dir",
        default=".",
        help="Go module to mirror (default: .)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every linked module",
    )
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.dir:
        parser.print_help(sys.stderr)
        return 1

    _configure_logging(args.verbose)

    module_dir = Path(args.module_dir).expanduser().resolve()
    try:
        config = load_config(module_dir)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    opts = Options(
        skip_go_src=args.skip_go_src or config.skip_go_src,
        skip_go_bin=args.skip_go_bin or config.skip_go_bin,
        skip_go_pkg=args.skip_go_pkg or config.skip_go_pkg,
    )

    try:
        run(Path(args.dir), opts, config=config, module_dir=module_dir)
    except VgopathError as exc:
        sys.stderr.write(f"Error running vgopath:\n{exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
