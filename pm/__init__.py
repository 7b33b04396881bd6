"""
pm - plugsmith plugin management CLI tool.

This is the command-line interface for installing plugins.
Supports installation from the index or git, search and settings commands.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
