"""
pm CLI - plugsmith Package Manager.

Pacman-style interface for installing plugins into a running host.

Usage:
    pm -S <plugin>                         Install plugin from the index
    pm -S --git <url> [--ref <ref>]        Build and install plugin from git
    pm -Ss <query>                         Search the index
    pm --set <key> <value>                 Change a setting
    pm --restart                           Ask the host to reinitialize
"""

import argparse
import logging
import sys
from pathlib import Path

from plugsmith import __version__
from plugsmith.config import ConfigError
from plugsmith.plugin.errors import InstallAborted, PluginError

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ABORTED = 2
EXIT_INTERRUPTED = 130


class PMError(Exception):
    """Base exception for pm errors."""

    pass


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with pacman-style flags."""
    parser = argparse.ArgumentParser(
        prog="pm",
        description="plugsmith Package Manager - Pacman-style plugin installer",
        add_help=False,
    )

    # Operation flags (mutually exclusive)
    ops = parser.add_mutually_exclusive_group()
    ops.add_argument("-S", "--sync", action="store_true", help="Install plugin")
    ops.add_argument(
        "--set", nargs=2, metavar=("KEY", "VALUE"), help="Change a setting"
    )
    ops.add_argument("--restart", action="store_true", help="Reinitialize host")
    ops.add_argument("-V", "--version", action="store_true", help="Show version")
    ops.add_argument("-h", "--help", action="store_true", help="Show help")

    # Sync sub-flags
    parser.add_argument("-s", "--search", action="store_true", help="Search (-Ss)")
    parser.add_argument("--git", metavar="URL", help="Install from git repository")
    parser.add_argument("--ref", help="Branch or tag to build (with --git)")
    parser.add_argument(
        "--checkout-dir", type=Path, help="Directory to check sources out into"
    )

    # Common options
    parser.add_argument("--config", type=Path, help="Settings file")
    parser.add_argument(
        "--noconfirm", action="store_true", help="Skip confirmation prompts"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    # Positional arguments
    parser.add_argument("targets", nargs="*", help="Plugin names or queries")

    return parser


def print_help():
    """Print help message."""
    help_text = """
pm - plugsmith Package Manager

Usage:
    pm -S <plugin>                         Install plugin from the index
    pm -S --git <url> [--ref <ref>]        Build and install plugin from git
          [--checkout-dir <dir>]
    pm -Ss <query>                         Search the index
    pm --set <key> <value>                 Change a setting
    pm --restart                           Ask the host to reinitialize
    pm -V                                  Show version
Options:
    --config <file>              Settings file
    --noconfirm                  Answer yes to every prompt
    -v, --verbose                Verbose output
    -h, --help                   Show this help
"""
    print(help_text.strip())


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for pm CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    try:
        if args.version:
            print(f"pm (plugsmith) {__version__}")
            return EXIT_OK

        if args.help or not (args.sync or args.set or args.restart):
            print_help()
            return EXIT_OK

        if (args.ref or args.checkout_dir) and not (args.sync and args.git):
            raise PMError("--ref and --checkout-dir require -S --git")

        if args.set:
            from pm.commands.settings import set_command

            return set_command(args)

        if args.restart:
            from pm.commands.install import restart_command

            return restart_command(args)

        if args.search:
            # -Ss: Search
            from pm.commands.search import search_command

            return search_command(args)

        # -S: Install
        from pm.commands.install import install_command

        return install_command(args)

    except InstallAborted as e:
        print(str(e), file=sys.stderr)
        return EXIT_ABORTED
    except (PMError, ConfigError, PluginError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
