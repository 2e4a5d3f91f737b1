"""
CLI module for offline profile analysis.
"""

from seraph.cli.analyze import main as analyze_main

__all__ = ["analyze_main"]
