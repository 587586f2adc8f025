#!/usr/bin/env python3
"""
nvm-upgrade - Upgrade the local Node.js runtime through nvm.

Usage:
    upgrade.py                      # Interactive upgrade
    upgrade.py --dry-run            # Show the plan without changing anything
    upgrade.py --network-share      # Offer installing from a network share
    upgrade.py --os WSL             # Force the WSL install path
"""

import argparse
import dataclasses
import os
import sys
from pathlib import Path

# Add current directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from nvm_upgrade import __version__
from nvm_upgrade.command import CommandRunner
from nvm_upgrade.config import Config, load_config
from nvm_upgrade.environment import get_environment_from_config
from nvm_upgrade.logging_config import setup_logging
from nvm_upgrade.prompter import Prompter
from nvm_upgrade.upgrade import run_upgrade


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nvm-upgrade",
        description="Upgrade the local Node.js runtime through nvm.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Path to a configuration file (YAML or JSON)")
    parser.add_argument("--os", dest="os_override", choices=["auto", "macOS", "Linux", "WSL"],
                        help="Override operating system detection")
    parser.add_argument("--strategy", choices=["auto", "nvm", "manual"],
                        help="Install strategy (default: chosen by operating system)")
    parser.add_argument("--network-share", action="store_true",
                        help="Offer installing from a network share URL")
    parser.add_argument("--project-dir", default=os.getcwd(),
                        help="Project directory for the pin file (default: current directory)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Resolve and print the install plan without changing anything")
    parser.add_argument("--json", action="store_true", help="Print the dry-run plan as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug output")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only show warnings and errors")
    parser.add_argument("--log-file", help="Also write the full log to this file")
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command-line options on top of the loaded configuration."""
    install = config.install
    if args.strategy:
        install = dataclasses.replace(install, strategy=args.strategy)
    if args.network_share:
        install = dataclasses.replace(install, network_share=True)

    os_override = args.os_override or config.os_override
    return dataclasses.replace(config, os_override=os_override, install=install)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    try:
        config = apply_overrides(load_config(args.config, verbose=args.verbose), args)
        env = get_environment_from_config(config.os_override, verbose=args.verbose)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    runner = CommandRunner(verbose=args.verbose)
    try:
        with Prompter() as prompter:
            return run_upgrade(
                config,
                env,
                runner,
                prompter,
                Path(args.project_dir),
                dry_run=args.dry_run,
                output_format="json" if args.json else "table",
            )
    except (KeyboardInterrupt, EOFError):
        print("\nAborted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
