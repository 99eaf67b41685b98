"""Hands the session outcome to the invoking shell."""

import sys
from typing import Optional, TextIO

from rich.console import Console

from git_wt.constants import EXIT_FAILURE, EXIT_OK
from git_wt.models.session import SessionResult, SessionStatus


class SessionBridge:
    """Prints the directory to change into on stdout and messages on stderr.

    stdout carries at most one line so a shell wrapper can `cd "$(git-wt)"`.
    """

    def __init__(self, stdout: Optional[TextIO] = None, console: Optional[Console] = None):
        self.stdout = stdout or sys.stdout
        self.console = console or Console(stderr=True)

    def emit(self, result: SessionResult) -> int:
        """Report the result and return the process exit code."""
        if result.message:
            if result.status is SessionStatus.FAILED:
                self.console.print(f"[red]Error: {result.message}[/red]", highlight=False)
            elif result.status is SessionStatus.CANCELLED:
                self.console.print(f"[yellow]{result.message}[/yellow]", highlight=False)
            else:
                self.console.print(f"[green]{result.message}[/green]", highlight=False)

        if result.status is SessionStatus.SUCCESS and result.target_path:
            self.stdout.write(f"{result.target_path}\n")
            self.stdout.flush()

        return EXIT_FAILURE if result.status is SessionStatus.FAILED else EXIT_OK
