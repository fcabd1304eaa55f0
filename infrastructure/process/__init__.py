"""
Process Module

Runs external executables.
"""

from .runner import ProcessRunner

__all__ = ['ProcessRunner']
