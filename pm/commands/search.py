"""
pm search command (-Ss).

Search the plugin index.
"""

from typing import Any

from pm.commands.install import create_orchestrator


def search_command(args: Any) -> int:
    """
    Execute search command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    query = " ".join(args.targets)
    with create_orchestrator(args) as orchestrator:
        references = orchestrator.search(query)

    for ref in references:
        print(f" - {ref.name} ({ref.repository_url or ref.artifact_coordinate})")
        if args.verbose and ref.description:
            print(f"     {ref.description}")

    return 0
