"""
qtkits CLI argument parser.

This module implements the command-line interface for qtkits using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from qtkits import __version__
from qtkits.core.exceptions import QtKitsError

logger = logging.getLogger(__name__)


class CLI:
    """qtkits command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="qtkits",
            description="qtkits - CMake kits for Qt installations",
            epilog='Use "qtkits COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument(
            "--version", action="version", version=f"qtkits {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Global configuration file (default: ~/.qtkits/config.yaml)",
        )
        parser.add_argument(
            "--kits-file",
            type=Path,
            metavar="PATH",
            help="Global kit registry (default: CMake Tools' cmake-tools-kits.json)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_scan_command(subparsers)
        self._add_list_command(subparsers)
        self._add_toolsets_command(subparsers)
        self._add_reset_command(subparsers)

        return parser

    @staticmethod
    def _add_workspace_argument(parser):
        parser.add_argument(
            "--workspace",
            "-w",
            type=Path,
            metavar="DIR",
            help="Workspace folder (default: global scope)",
        )

    def _add_scan_command(self, subparsers):
        """Add 'scan' subcommand."""
        parser = subparsers.add_parser(
            "scan",
            help="Generate kits for Qt installations",
            description="Scan Qt installations and update the kit registry",
        )
        self._add_workspace_argument(parser)
        parser.add_argument(
            "--qt-root",
            type=Path,
            metavar="DIR",
            help="Qt installation root (overrides configuration)",
        )
        parser.add_argument(
            "--qt-path",
            action="append",
            metavar="EXE",
            help="Additional qtpaths/qmake executable (can be used multiple times)",
        )
        parser.add_argument(
            "--generator",
            metavar="NAME",
            help="CMake generator for MSVC kits (default: Ninja)",
        )

    def _add_list_command(self, subparsers):
        """Add 'list' subcommand."""
        parser = subparsers.add_parser(
            "list",
            help="List kits in a registry",
            description="List the kits of a registry, marking generated ones",
        )
        self._add_workspace_argument(parser)

    def _add_toolsets_command(self, subparsers):
        """Add 'toolsets' subcommand."""
        subparsers.add_parser(
            "toolsets",
            help="List host toolset kits",
            description="List compiler kits usable as templates for MSVC Qt kits",
        )

    def _add_reset_command(self, subparsers):
        """Add 'reset' subcommand."""
        parser = subparsers.add_parser(
            "reset",
            help="Remove generated kits",
            description="Remove generated kits and forget generated kit state",
        )
        self._add_workspace_argument(parser)

    def parse_args(self, args: Optional[List[str]] = None):
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130
        except QtKitsError as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "scan": "qtkits.cli.commands.scan",
            "list": "qtkits.cli.commands.list_kits",
            "toolsets": "qtkits.cli.commands.toolsets",
            "reset": "qtkits.cli.commands.reset",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
