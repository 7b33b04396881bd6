"""
plugsmith Core - Host-facing building blocks.

This module contains:
- Signals: the reinitialize channel hosts subscribe their reload to
"""

__all__ = []
