"""Shell integration snippets printed by `git-wt shell-init`."""

POSIX_FUNCTION = """\
# git-wt shell integration: add `eval "$(git-wt shell-init {shell})"` to your shell rc
wt() {{
  local dir
  dir="$(command git-wt "$@")" || return $?
  if [ -n "$dir" ] && [ -d "$dir" ]; then
    cd "$dir" || return
  fi
}}
"""

FISH_FUNCTION = """\
# git-wt shell integration: add `git-wt shell-init fish | source` to config.fish
function wt
    set -l dir (command git-wt $argv)
    or return $status
    if test -n "$dir"; and test -d "$dir"
        cd $dir
    end
end
"""


def shell_function(shell: str) -> str:
    """Wrapper function that changes into the directory git-wt prints."""
    if shell == "fish":
        return FISH_FUNCTION
    if shell in ("bash", "zsh"):
        return POSIX_FUNCTION.format(shell=shell)
    raise ValueError(f"Unsupported shell: {shell}")
