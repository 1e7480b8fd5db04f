"""
idekit CLI argument parser.

This module implements the command-line interface for idekit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("idekit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """idekit command-line interface."""

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
            prog="idekit",
            description="idekit - IDE, runtime and plugin dependency resolution",
            epilog='Use "idekit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"idekit {__version__}"
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
            help="Path to configuration file (default: ./idekit.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Project root directory (default: current directory)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_ide_command(subparsers)
        self._add_runtime_command(subparsers)
        self._add_releases_command(subparsers)
        self._add_plugin_command(subparsers)
        self._add_build_range_command(subparsers)
        self._add_compiler_command(subparsers)
        self._add_cache_command(subparsers)

        return parser

    def _add_ide_command(self, subparsers):
        """Add 'ide' subcommand."""
        parser = subparsers.add_parser(
            "ide",
            help="Resolve an IDE distribution",
            description="Resolve, download and extract an IDE, then print its directory",
        )
        parser.add_argument(
            "ide_version",
            nargs="?",
            metavar="VERSION",
            help="IDE version such as IC-2021.3.2 or 213.6777.52 (default: from config)",
        )
        parser.add_argument(
            "--local-path",
            type=Path,
            metavar="PATH",
            help="Use a local IDE installation",
        )
        parser.add_argument(
            "--source",
            choices=["auto", "maven", "download"],
            default="auto",
            help="Where to get the IDE from [default: auto]",
        )

    def _add_runtime_command(self, subparsers):
        """Add 'runtime' subcommand."""
        parser = subparsers.add_parser(
            "runtime",
            help="Resolve a Java runtime",
            description="Resolve a Java runtime and print its java executable",
        )
        parser.add_argument(
            "--runtime-dir", type=Path, metavar="PATH", help="Explicit runtime directory"
        )
        parser.add_argument(
            "--jbr-version", metavar="VERSION", help="Runtime version, e.g. 17.0.2b469.1"
        )
        parser.add_argument(
            "--jbr-variant",
            choices=["sdk", "jcef", "fd", "dcevm", "nomod"],
            help="Runtime variant",
        )
        parser.add_argument("--jbr-arch", metavar="ARCH", help="Runtime architecture")
        parser.add_argument(
            "--ide-dir", type=Path, metavar="PATH", help="IDE installation directory"
        )
        parser.add_argument(
            "--home",
            action="store_true",
            help="Print the runtime home directory instead of the executable",
        )

    def _add_releases_command(self, subparsers):
        """Add 'releases' subcommand."""
        parser = subparsers.add_parser(
            "releases",
            help="List IDE releases",
            description="List published IDE releases, newest build first",
        )
        parser.add_argument("--since", metavar="BUILD", help="Lowest build (inclusive)")
        parser.add_argument(
            "--until", metavar="BUILD", help="Highest build (inclusive), e.g. 213.*"
        )
        parser.add_argument(
            "--channel",
            action="append",
            metavar="CHANNEL",
            help="Channel to include (repeatable; default: release)",
        )
        parser.add_argument(
            "--product",
            action="append",
            metavar="CODE",
            help="Product code to include (repeatable; default: all)",
        )
        parser.add_argument(
            "--limit", type=int, metavar="N", help="Stop after N releases"
        )

    def _add_plugin_command(self, subparsers):
        """Add 'plugin' subcommand."""
        parser = subparsers.add_parser(
            "plugin",
            help="Resolve plugin dependencies",
            description="Resolve plugin notations (id[:version][@channel])",
        )
        parser.add_argument(
            "notations",
            nargs="*",
            metavar="NOTATION",
            help="Plugin notations (default: plugins from config)",
        )
        parser.add_argument(
            "--ide-dir", type=Path, metavar="PATH", help="Target IDE installation"
        )
        parser.add_argument(
            "--build", metavar="BUILD", help="Target build (default: from the IDE)"
        )

    def _add_build_range_command(self, subparsers):
        """Add 'build-range' subcommand."""
        parser = subparsers.add_parser(
            "build-range",
            help="Compute since/until build",
            description="Derive since-build and until-build from a platform build",
        )
        parser.add_argument("build", metavar="BUILD", help="Platform build number")
        parser.add_argument(
            "--same-since-until",
            action="store_true",
            help="Restrict until-build to the since-build branch",
        )

    def _add_compiler_command(self, subparsers):
        """Add 'compiler' subcommand."""
        parser = subparsers.add_parser(
            "compiler",
            help="Resolve the Java compiler artifact",
            description="Resolve java-compiler-ant-tasks for an IDE",
        )
        parser.add_argument(
            "ide_version",
            nargs="?",
            metavar="VERSION",
            help="IDE version (default: from config)",
        )
        parser.add_argument(
            "--build-number", metavar="BUILD", help="Build number of the resolved IDE"
        )
        parser.add_argument(
            "--version-suffix", metavar="SUFFIX", help="versionSuffix of the IDE (e.g. EAP)"
        )
        parser.add_argument(
            "--ide-dir",
            type=Path,
            metavar="PATH",
            help="IDE directory to read product-info.json from",
        )

    def _add_cache_command(self, subparsers):
        """Add 'cache' subcommand."""
        parser = subparsers.add_parser(
            "cache",
            help="Inspect the artifact cache",
            description="List, inspect or forget cached artifacts",
        )
        parser.add_argument(
            "action",
            choices=["list", "stats", "forget"],
            help="Action to perform",
        )
        parser.add_argument("key", nargs="?", metavar="KEY", help="Cache key to forget")

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
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

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
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
            force=True,  # Reconfigure if already configured
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
            "ide": "idekit.cli.commands.ide",
            "runtime": "idekit.cli.commands.runtime",
            "releases": "idekit.cli.commands.releases",
            "plugin": "idekit.cli.commands.plugin",
            "build-range": "idekit.cli.commands.build_range",
            "compiler": "idekit.cli.commands.compiler",
            "cache": "idekit.cli.commands.cache",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            logger.error(f"Failed to load command module: {e}")
            if args.verbose:
                import traceback

                traceback.print_exc()
            return 1

        if not hasattr(module, "run"):
            logger.error(f"Command module {module_name} has no run() function")
            return 1

        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
