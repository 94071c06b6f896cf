# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for relpub.

Usage:
    relpub publish [--config relpub.yaml] [--dry-run]
    relpub verify [--config relpub.yaml]
    relpub info

Settings come from the optional YAML file and the environment (ACCOUNT_ID,
ACCESS_KEY, ACCESS_SECRET, BUCKET, CHANNEL, APP_ID, VERSION, PLATFORM,
EXECUTABLE_PATH); environment variables win.
"""

import argparse
import sys
from typing import Optional, Sequence

from relpub.cli.commands import handle_info, handle_publish, handle_verify
from relpub.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """Options shared by every subcommand."""
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (overrides the config file).",
    )
    return parent


def build_parser() -> argparse.ArgumentParser:
    parent = _build_global_parser()
    root_parser = argparse.ArgumentParser(
        prog="relpub",
        description="Publish build artifacts and update the release manifest.",
    )
    subparsers = root_parser.add_subparsers(dest="command")

    commands = [
        ("publish", "Upload an artifact and record it in the manifest.", handle_publish),
        ("verify", "Check a published artifact against its manifest entry.", handle_verify),
        ("info", "Display version and environment info.", handle_info),
    ]
    for name, help_text, handler in commands:
        parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        parser.set_defaults(func=handler)

    subparsers.choices["publish"].add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Hash and merge, but upload nothing.",
    )
    return root_parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Parse arguments, run the chosen handler and exit with its code."""
    root_parser = build_parser()
    args = root_parser.parse_args(argv)

    if getattr(args, "func", None) is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
