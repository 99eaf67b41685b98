"""Shared constants for git-wt."""

# Candidate labels are "<visible columns>\t<absolute path>"; the hidden
# field after the delimiter is what the finder hands back to us.
LABEL_DELIMITER = "\t"
# Characters that may never appear in a branch name or path we render
FORBIDDEN_LABEL_CHARS = ("\t", "\n", "\r")

DETACHED_MARKER = "(detached)"
CREATE_LABEL = "+ create new worktree"
CREATE_KEY = "::create::"

# Status markers shown next to each worktree
SYMBOL_CURRENT = "*"
SYMBOL_LOCKED = "L"
SYMBOL_PRUNABLE = "P"
SYMBOL_DIRTY = "M"
SYMBOL_MAIN = "main"

# fzf exit statuses: 1 = no match, 130 = interrupted with CTRL-C or ESC
FINDER_NO_MATCH = 1
FINDER_INTERRUPTED = 130
FINDER_CANCEL_CODES = (FINDER_NO_MATCH, FINDER_INTERRUPTED)

# Exit codes for the CLI
EXIT_OK = 0
EXIT_FAILURE = 1

WORKTREE_DIR_SUFFIX = "-worktrees"

# Legend text for the finder header
LEGEND_TEXT = "* = current   M = modified   L = locked   P = prunable"
