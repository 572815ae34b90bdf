"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from curated_species import __version__
from curated_species.analysis import UnknownTaxonChangeError
from curated_species.config import get_settings
from curated_species.flows.build import build_species_list


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="curated-species",
        description="Curated species list and taxon change ledger from iNaturalist exports",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'build' command - aggregate export pages into the species list
    build_parser = subparsers.add_parser("build", help="Build the species list from exports")
    build_parser.add_argument(
        "--exports",
        type=Path,
        default=None,
        help="Directory of export page files (default: <data_dir>/exports)",
    )
    build_parser.add_argument(
        "--curator",
        dest="curators",
        action="append",
        default=None,
        help="Curator login; repeat for several (default: curators from settings)",
    )

    subparsers.add_parser("info", help="Show application info")

    return parser


def cmd_build(args: argparse.Namespace) -> int:
    """Handle the 'build' command."""
    settings = get_settings()
    if args.debug:
        print(f"Debug mode enabled. Settings: {settings}")

    try:
        result = build_species_list(curators=args.curators, exports_dir=args.exports)
    except UnknownTaxonChangeError as exc:
        print(f"Error: {exc}. Fix the export data and re-run.", file=sys.stderr)
        return 1

    if "error" in result:
        print(f"Error: {result['error']}", file=sys.stderr)
        return 1

    print(
        f"Success: {result['total_species']:,} species from "
        f"{result['total_observations']:,} confirmed observations"
    )
    return 0


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"Data directory: {settings.data_dir}")
    print(f"Curators: {', '.join(settings.curators) or '(none)'}")
    print(f"Taxonomy ranks: {', '.join(settings.taxonomy_ranks)}")
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "build": cmd_build,
        "info": cmd_info,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
