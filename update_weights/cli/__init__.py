"""
update_weights.cli
==================

Command-line interface for the update-weights benchmark.

Provides CLI commands for:
- run: Run a reference vs. accelerated running-average benchmark
- backends: List accelerated backends and their availability
"""

__all__ = ['main']

from .main import main
