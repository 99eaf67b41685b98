"""Services for git-wt.

- git: gateway to the git command line
- registry: worktree snapshot
- selection: fuzzy-finder driver
- executor: action state machine
- bridge: shell output
"""
