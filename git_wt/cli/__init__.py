"""Command-line interface for git-wt.

This package provides the CLI entry point (`git_wt.cli.main:main`) and
argument parsing.
"""

from .args import parse_args

__all__ = ["parse_args"]
