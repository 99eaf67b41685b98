"""Command-line entry point for git-wt"""

import os
import sys
from typing import Optional, Sequence

from rich.console import Console

from git_wt.cli.args import parse_args
from git_wt.cli.shell import shell_function
from git_wt.constants import EXIT_FAILURE, EXIT_OK
from git_wt.core import WorktreeManager, config_from_args, dispatch
from git_wt.logging_config import setup_logging
from git_wt.services.bridge import SessionBridge

console = Console(stderr=True)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = None
    try:
        parsed_args = parse_args(argv)

        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

        if parsed_args.command == "shell-init":
            sys.stdout.write(shell_function(parsed_args.shell))
            return EXIT_OK

        config = config_from_args(parsed_args)

        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        manager = WorktreeManager(os.getcwd(), config)
        result = dispatch(manager, parsed_args)
        return SessionBridge(console=console).emit(result)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return EXIT_FAILURE
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
