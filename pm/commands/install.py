"""
pm install command (-S).

Install plugins from the plugin index or a git repository.
"""

import logging
import sys
from typing import Any

from plugsmith.config import ConfigError, load_settings
from plugsmith.core.signals import ReinitializeChannel, ReinitializeEnvironment
from plugsmith.plugin.errors import InstallAborted, PluginError
from plugsmith.plugin.orchestrator import InstallationOrchestrator
from plugsmith.plugin.prompt import ConsolePrompt

logger = logging.getLogger(__name__)


def _announce(event: ReinitializeEnvironment) -> None:
    if event.artifact is not None:
        logger.info("Host reinitialize requested for [%s]", event.artifact)
    else:
        logger.info("Host reinitialize requested")


def create_orchestrator(args: Any) -> InstallationOrchestrator:
    """
    Build an orchestrator from command-line arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        InstallationOrchestrator wired to the settings file and the terminal
    """
    settings = load_settings(args.config)
    channel = ReinitializeChannel()
    channel.subscribe(_announce)
    return InstallationOrchestrator(
        settings,
        ConsolePrompt(assume_yes=args.noconfirm),
        channel,
    )


def install_command(args: Any) -> int:
    """
    Execute install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 success, 1 failure, 2 aborted by user)
    """
    if args.git:
        with create_orchestrator(args) as orchestrator:
            orchestrator.install_from_source_control(args.git, args.ref, args.checkout_dir)
        return 0

    if not args.targets:
        print("Error: No targets specified", file=sys.stderr)
        print("Usage: pm -S <plugin> | pm -S --git <url> [--ref <ref>]", file=sys.stderr)
        return 1

    success_count = 0
    fail_count = 0
    abort_count = 0

    with create_orchestrator(args) as orchestrator:
        for target in args.targets:
            try:
                orchestrator.install_by_name(target)
                success_count += 1
            except InstallAborted as e:
                print(f"Skipped {target}: {e}", file=sys.stderr)
                abort_count += 1
            except (PluginError, ConfigError) as e:
                print(f"Failed to install {target}: {e}", file=sys.stderr)
                fail_count += 1

    # Summary
    if args.verbose:
        print(
            f"\nInstalled: {success_count}, Aborted: {abort_count}, Failed: {fail_count}"
        )

    if fail_count:
        return 1
    return 2 if abort_count else 0


def restart_command(args: Any) -> int:
    """Fire the reinitialize signal (--restart)."""
    with create_orchestrator(args) as orchestrator:
        errors = orchestrator.restart()
    return 1 if errors else 0
