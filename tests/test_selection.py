"""Tests for SelectionDriver"""
import subprocess

import pytest

from git_wt.constants import LABEL_DELIMITER
from git_wt.exceptions import FinderUnavailable, FormatCollision
from git_wt.formatters import CandidateFormatter
from git_wt.models.action import Action, ActionKind
from git_wt.services.selection import SelectionDriver


def on_create(name):
    return Action.create(f"/repo-worktrees/{name}", name, "main")


class TestFinderProtocol:
    """Test the stdin/stdout protocol with the finder."""

    def test_labels_written_to_stdin(self, fake_finder, sample_registry):
        """Test candidates are fed one per line and the command is well formed."""
        popen = fake_finder(output="", returncode=130)
        formatter = CandidateFormatter()
        candidates = formatter.render_select(sample_registry)

        SelectionDriver(finder="fzf", finder_args=["--height=40%"]).choose(candidates)

        cmd = popen.call_args[0][0]
        assert cmd[0] == "fzf"
        assert f"--delimiter={LABEL_DELIMITER}" in cmd
        assert "--with-nth=1" in cmd
        assert "--multi" not in cmd
        assert cmd[-1] == "--height=40%"
        assert popen.call_args[1]["stdin"] == subprocess.PIPE
        assert popen.call_args[1]["stdout"] == subprocess.PIPE
        popen.proc.communicate.assert_called_once_with(CandidateFormatter.to_input(candidates))

    def test_multi_flag_for_delete(self, fake_finder, sample_registry):
        """Test the delete flow allows several choices."""
        popen = fake_finder(output="", returncode=130)
        formatter = CandidateFormatter()
        SelectionDriver().select_for_delete(formatter.render_delete(sample_registry), formatter)
        assert "--multi" in popen.call_args[0][0]

    @pytest.mark.parametrize("returncode", [1, 130])
    def test_cancel_exit_codes(self, fake_finder, sample_registry, returncode):
        """Test ESC / no match produce a cancel action."""
        fake_finder(output="", returncode=returncode)
        formatter = CandidateFormatter()
        action = SelectionDriver().select(formatter.render_select(sample_registry), formatter, on_create)
        assert action.kind is ActionKind.CANCEL

    def test_empty_output_is_cancel(self, fake_finder, sample_registry):
        """Test exit 0 with nothing chosen is a cancel."""
        fake_finder(output="\n", returncode=0)
        formatter = CandidateFormatter()
        action = SelectionDriver().select(formatter.render_select(sample_registry), formatter, on_create)
        assert action.kind is ActionKind.CANCEL

    def test_keyboard_interrupt_is_cancel(self, fake_finder, sample_registry):
        """Test CTRL-C while the finder runs is a cancel."""
        popen = fake_finder()
        popen.proc.communicate.side_effect = KeyboardInterrupt
        formatter = CandidateFormatter()
        action = SelectionDriver().select(formatter.render_select(sample_registry), formatter, on_create)
        assert action.kind is ActionKind.CANCEL
        popen.proc.kill.assert_called_once()

    def test_finder_missing(self, fake_finder, sample_registry):
        """Test a missing finder binary raises FinderUnavailable."""
        fake_finder(error=FileNotFoundError("fzf"))
        with pytest.raises(FinderUnavailable) as exc_info:
            SelectionDriver(finder="fzf").choose(CandidateFormatter().render_select(sample_registry))
        assert "fzf" in str(exc_info.value)

    def test_finder_error_status(self, fake_finder, sample_registry):
        """Test an unexpected exit status raises FinderUnavailable."""
        fake_finder(output="", returncode=2)
        with pytest.raises(FinderUnavailable):
            SelectionDriver().choose(CandidateFormatter().render_select(sample_registry))

    def test_pipes_closed_via_context_manager(self, fake_finder, sample_registry):
        """Test the subprocess is used as a context manager so it is always reaped."""
        popen = fake_finder(output="", returncode=130)
        SelectionDriver().choose(CandidateFormatter().render_select(sample_registry))
        popen.return_value.__enter__.assert_called_once()
        popen.return_value.__exit__.assert_called_once()


class TestSelect:
    """Test the select-or-create flow."""

    def test_switch(self, fake_finder, sample_registry, sample_worktrees):
        """Test choosing a worktree yields a switch action."""
        formatter = CandidateFormatter()
        candidates = formatter.render_select(sample_registry)
        fake_finder(output=candidates[1].label + "\n", returncode=0)

        action = SelectionDriver().select(candidates, formatter, on_create)

        assert action.kind is ActionKind.SWITCH
        assert action.target_path == sample_worktrees[1].path
        assert action.worktree == sample_worktrees[1]

    def test_create_prompts_for_branch(self, fake_finder, sample_registry):
        """Test choosing "create new" asks for a branch name."""
        formatter = CandidateFormatter()
        candidates = formatter.render_select(sample_registry)
        fake_finder(output=candidates[-1].label + "\n", returncode=0)

        driver = SelectionDriver(prompt=lambda: "  feature-b ")
        action = driver.select(candidates, formatter, on_create)

        assert action.kind is ActionKind.CREATE
        assert action.branch_name == "feature-b"
        assert action.base_ref == "main"
        assert action.target_path == "/repo-worktrees/feature-b"

    @pytest.mark.parametrize("answer", ["", "   ", None])
    def test_create_with_empty_name_is_cancel(self, fake_finder, sample_registry, answer):
        """Test an empty branch name backs out."""
        formatter = CandidateFormatter()
        candidates = formatter.render_select(sample_registry)
        fake_finder(output=candidates[-1].label + "\n", returncode=0)

        action = SelectionDriver(prompt=lambda: answer).select(candidates, formatter, on_create)
        assert action.kind is ActionKind.CANCEL

    def test_create_prompt_interrupted(self, fake_finder, sample_registry):
        """Test CTRL-C at the branch prompt is a cancel."""
        formatter = CandidateFormatter()
        candidates = formatter.render_select(sample_registry)
        fake_finder(output=candidates[-1].label + "\n", returncode=0)

        def interrupted():
            raise KeyboardInterrupt

        action = SelectionDriver(prompt=interrupted).select(candidates, formatter, on_create)
        assert action.kind is ActionKind.CANCEL

    def test_create_name_with_tab(self, fake_finder, sample_registry):
        """Test a branch name containing the delimiter is rejected."""
        formatter = CandidateFormatter()
        candidates = formatter.render_select(sample_registry)
        fake_finder(output=candidates[-1].label + "\n", returncode=0)

        with pytest.raises(FormatCollision):
            SelectionDriver(prompt=lambda: "a\tb").select(candidates, formatter, on_create)

    def test_unknown_output(self, fake_finder, sample_registry):
        """Test finder output that matches no candidate is rejected."""
        formatter = CandidateFormatter()
        candidates = formatter.render_select(sample_registry)
        fake_finder(output="garbage\n", returncode=0)

        with pytest.raises(FormatCollision):
            SelectionDriver().select(candidates, formatter, on_create)


class TestSelectForDelete:
    """Test the delete flow."""

    def test_multiple_choices(self, fake_finder, make_wt):
        """Test each chosen worktree becomes a delete action."""
        from git_wt.services.registry import WorktreeRegistry

        registry = WorktreeRegistry([
            make_wt("/repo", "main", is_main=True),
            make_wt("/wts/a", "a"),
            make_wt("/wts/b", "b"),
        ])
        formatter = CandidateFormatter()
        candidates = formatter.render_delete(registry)
        fake_finder(output=f"{candidates[0].label}\n{candidates[1].label}\n", returncode=0)

        actions = SelectionDriver().select_for_delete(candidates, formatter, force=True)

        assert [a.kind for a in actions] == [ActionKind.DELETE, ActionKind.DELETE]
        assert [a.target_path for a in actions] == ["/wts/a", "/wts/b"]
        assert all(a.force for a in actions)

    def test_cancel(self, fake_finder, sample_registry):
        """Test backing out yields a single cancel action."""
        fake_finder(output="", returncode=130)
        formatter = CandidateFormatter()
        actions = SelectionDriver().select_for_delete(formatter.render_delete(sample_registry), formatter)
        assert [a.kind for a in actions] == [ActionKind.CANCEL]

    def test_no_candidates(self, fake_finder):
        """Test nothing to delete skips the finder entirely."""
        popen = fake_finder()
        actions = SelectionDriver().select_for_delete([], CandidateFormatter())
        assert [a.kind for a in actions] == [ActionKind.CANCEL]
        popen.assert_not_called()
