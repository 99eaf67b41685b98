"""Display service for worktree listings"""
from typing import Iterable

from rich.console import Console
from rich.table import Table

from git_wt.constants import LEGEND_TEXT
from git_wt.formatters.candidate import format_markers, shorten_path
from git_wt.services.registry import WorktreeRegistry


class DisplayService:
    def __init__(self, console: Console = None):
        self.console = console or Console(stderr=True)

    def display_worktree_table(self, registry: WorktreeRegistry, dirty_paths: Iterable[str] = ()) -> None:
        """Display a table of worktrees."""
        dirty = set(dirty_paths)
        current = registry.current
        table = Table()
        table.add_column("Branch")
        table.add_column("Flags")
        table.add_column("HEAD")
        table.add_column("Path")

        for wt in registry:
            is_current = current is not None and wt.path == current.path
            branch = wt.display_branch
            if wt.is_main:
                branch += " (main)"
            style = None
            if wt.is_prunable:
                style = "red"
            elif wt.is_locked:
                style = "yellow"
            elif is_current:
                style = "bold green"
            table.add_row(
                branch,
                format_markers(wt, dirty=wt.path in dirty, current=is_current),
                wt.short_commit,
                shorten_path(wt.path),
                style=style,
            )

        self.console.print(table)
        self.console.print(f"[dim]{LEGEND_TEXT}[/dim]")
