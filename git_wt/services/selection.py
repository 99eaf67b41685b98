"""Fuzzy-finder selection driver."""

import subprocess
from typing import Callable, List, Optional, Sequence

from rich.console import Console
from rich.prompt import Prompt

from git_wt.constants import FINDER_CANCEL_CODES, LABEL_DELIMITER, LEGEND_TEXT
from git_wt.exceptions import FinderUnavailable
from git_wt.formatters.candidate import CandidateFormatter, check_renderable
from git_wt.logging_config import get_logger
from git_wt.models.action import Action
from git_wt.models.candidate import Candidate, CandidateKind

console = Console(stderr=True)
logger = get_logger(__name__)


def ask_branch_name() -> Optional[str]:
    """Prompt on the terminal for the new branch name."""
    return Prompt.ask("[bold]Branch name for the new worktree[/bold]", console=console, default="")


class SelectionDriver:
    """Runs the fuzzy finder over candidate labels and turns the choice into Actions.

    The finder is a line filter: labels go in on stdin, the chosen
    line(s) come back on stdout. It draws its UI on the terminal itself.
    """

    def __init__(
        self,
        finder: str = "fzf",
        finder_args: Optional[Sequence[str]] = None,
        prompt: Callable[[], Optional[str]] = ask_branch_name,
    ):
        """Initialize the driver.

        Args:
            finder: Finder executable
            finder_args: Extra arguments appended to the finder command line
            prompt: Asks for a branch name when "create new" is chosen
        """
        self.finder = finder
        self.finder_args = list(finder_args or [])
        self.prompt = prompt

    def _command(self, multi: bool, header: Optional[str]) -> List[str]:
        cmd = [
            self.finder,
            f"--delimiter={LABEL_DELIMITER}",
            "--with-nth=1",
            "--no-sort",
            "--layout=reverse",
            "--prompt=worktree> ",
        ]
        if header:
            cmd.append(f"--header={header}")
        if multi:
            cmd.append("--multi")
        cmd.extend(self.finder_args)
        return cmd

    def choose(
        self,
        candidates: Sequence[Candidate],
        multi: bool = False,
        header: Optional[str] = LEGEND_TEXT,
    ) -> List[str]:
        """Show candidates in the finder and return the chosen lines.

        Blocks until the user decides; there is no timeout.

        Args:
            candidates: Candidates to show, in display order
            multi: Allow choosing several lines
            header: Header line shown above the list

        Returns:
            Chosen labels, empty if the user cancelled

        Raises:
            FinderUnavailable: If the finder is missing or fails
        """
        cmd = self._command(multi, header)
        payload = CandidateFormatter.to_input(candidates)
        logger.debug(f"Running finder: {' '.join(cmd)} ({len(candidates)} candidates)")

        try:
            with subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                encoding="utf-8",
            ) as proc:
                try:
                    output, _ = proc.communicate(payload)
                except KeyboardInterrupt:
                    # CTRL-C reaches the finder too; treat it like ESC
                    logger.debug("Finder interrupted")
                    proc.kill()
                    return []
                returncode = proc.returncode
        except FileNotFoundError as e:
            raise FinderUnavailable(self.finder, "executable not found") from e
        except OSError as e:
            raise FinderUnavailable(self.finder, str(e)) from e

        if returncode in FINDER_CANCEL_CODES:
            logger.debug(f"Finder exited with {returncode}: no selection")
            return []
        if returncode != 0:
            raise FinderUnavailable(self.finder, f"exited with status {returncode}")

        chosen = [line for line in (output or "").split("\n") if line.strip()]
        if not multi:
            chosen = chosen[:1]
        logger.debug(f"Finder returned {len(chosen)} line(s)")
        return chosen

    def _read_branch_name(self) -> Optional[str]:
        try:
            answer = self.prompt()
        except (KeyboardInterrupt, EOFError):
            return None
        if answer is None:
            return None
        answer = answer.strip()
        return check_renderable(answer) if answer else None

    def select(
        self,
        candidates: Sequence[Candidate],
        formatter: CandidateFormatter,
        on_create: Callable[[str], Action],
    ) -> Action:
        """Run the select-or-create flow.

        Args:
            candidates: Output of formatter.render_select()
            formatter: Formatter that rendered the candidates
            on_create: Builds the CREATE action for a branch name

        Returns:
            SWITCH, CREATE or CANCEL action
        """
        chosen = self.choose(candidates)
        if not chosen:
            return Action.cancel()

        candidate = formatter.parse(chosen[0])
        if candidate.kind is CandidateKind.NEW_WORKTREE_PROMPT:
            branch_name = self._read_branch_name()
            if not branch_name:
                return Action.cancel()
            return on_create(branch_name)
        if candidate.worktree is None:
            return Action.cancel()
        return Action.switch(candidate.worktree)

    def select_for_delete(
        self,
        candidates: Sequence[Candidate],
        formatter: CandidateFormatter,
        force: bool = False,
    ) -> List[Action]:
        """Run the delete flow; several worktrees may be chosen.

        Returns:
            One DELETE action per chosen worktree, or a single CANCEL action
        """
        if not candidates:
            return [Action.cancel()]
        chosen = self.choose(candidates, multi=True, header="TAB to mark, ENTER to delete")
        actions = []
        for line in chosen:
            candidate = formatter.parse(line)
            if candidate.worktree is not None:
                actions.append(Action.delete(candidate.worktree, force=force))
        return actions or [Action.cancel()]
