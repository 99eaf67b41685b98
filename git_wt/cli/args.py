"""Command-line argument parsing for git-wt."""

import argparse
from typing import Optional, Sequence

from git_wt.__version__ import __version__

SHELLS = ["bash", "zsh", "fish"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-wt",
        description="Interactive git worktree manager with fuzzy finder",
        epilog="Without a command, pick a worktree to switch to (or create one) in fzf. "
        "The chosen directory is printed on stdout; run 'git-wt shell-init' to get a "
        "shell function that changes into it.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"git-wt {__version__}")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument(
        "--finder", default=None, help="Fuzzy finder executable (default: $GIT_WT_FINDER or fzf)"
    )
    parser.add_argument(
        "--worktree-dir",
        default=None,
        metavar="DIR",
        help="Directory for new worktrees (default: $GIT_WT_DIR or <repo>-worktrees next to the repo)",
    )
    parser.add_argument(
        "--sort-by",
        choices=["recent", "path"],
        default="recent",
        help="Order worktrees by most recent use or by path (default: recent)",
    )
    parser.add_argument(
        "--no-status",
        action="store_true",
        help="Don't check worktrees for uncommitted changes (faster with many worktrees)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    select = subparsers.add_parser("select", help="Switch to or create a worktree (default)")
    select.add_argument("--base", metavar="REF", help="Base ref for a new branch")

    delete = subparsers.add_parser("delete", aliases=["rm"], help="Remove worktrees")
    delete.add_argument("paths", nargs="*", metavar="PATH", help="Worktrees to remove (default: pick in fzf)")
    delete.add_argument(
        "-f", "--force", action="store_true", help="Remove even with uncommitted changes"
    )

    add = subparsers.add_parser("add", help="Create a worktree for a new branch")
    add.add_argument("branch", help="Name of the branch to create")
    add.add_argument("--base", metavar="REF", help="Base ref for the branch")

    subparsers.add_parser("list", aliases=["ls"], help="List worktrees")
    subparsers.add_parser("prune", help="Prune metadata of deleted worktrees")

    shell_init = subparsers.add_parser("shell-init", help="Print shell integration")
    shell_init.add_argument("shell", nargs="?", choices=SHELLS, default="bash")

    return parser


_ALIASES = {"rm": "delete", "ls": "list"}


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    args = build_parser().parse_args(argv)
    args.command = _ALIASES.get(args.command, args.command) or "select"
    # Sub-parser options are only present for their own command
    for name, default in (("base", None), ("force", False), ("paths", []), ("branch", None)):
        if not hasattr(args, name):
            setattr(args, name, default)
    return args
