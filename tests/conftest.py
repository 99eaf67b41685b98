"""Pytest fixtures for git-wt tests"""
import os
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import git
import pytest

from git_wt.models.worktree import Worktree
from git_wt.services.git import GitGateway
from git_wt.services.registry import WorktreeRegistry


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(os.path.realpath(tmpdir))


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository with one commit on main."""
    repo_path = temp_dir / "repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    repo.git.branch("-M", "main")

    yield repo

    repo.close()


@pytest.fixture
def git_repo_with_worktree(git_repo, temp_dir):
    """Repository with a linked worktree for feature-a at <tmp>/repo-wt1."""
    wt_path = temp_dir / "repo-wt1"
    git_repo.git.worktree("add", "-b", "feature-a", str(wt_path))
    yield git_repo, wt_path


@pytest.fixture
def gateway(git_repo):
    """Gateway for the real test repository."""
    return GitGateway(git_repo.working_dir)


def make_worktree(path, branch="main", head="a" * 40, **kwargs) -> Worktree:
    """Build a Worktree with sensible defaults."""
    return Worktree(path=path, branch=branch, head_commit=head, **kwargs)


@pytest.fixture
def sample_worktrees(temp_dir):
    """Main worktree at /repo plus feature-a at /repo-wt1, both existing on disk."""
    main_path = temp_dir / "repo"
    wt1_path = temp_dir / "repo-wt1"
    main_path.mkdir(exist_ok=True)
    wt1_path.mkdir(exist_ok=True)
    return [
        make_worktree(str(main_path), "main", "1" * 40, is_main=True),
        make_worktree(str(wt1_path), "feature-a", "2" * 40),
    ]


@pytest.fixture
def mock_gateway(sample_worktrees):
    """Mock GitGateway reporting sample_worktrees."""
    gateway = Mock(spec=GitGateway)
    gateway.list_worktrees.return_value = list(sample_worktrees)
    gateway.is_clean.return_value = True
    gateway.repo_root.return_value = sample_worktrees[0].path

    def create(path, branch_name, base_ref):
        return make_worktree(path, branch_name, "3" * 40)

    gateway.create_worktree.side_effect = create
    return gateway


@pytest.fixture
def sample_registry(mock_gateway):
    """Registry built from the mock gateway."""
    registry = WorktreeRegistry.build(mock_gateway)
    mock_gateway.reset_mock()
    return registry


@pytest.fixture
def fake_finder():
    """Patch the finder subprocess.

    Call the returned function with the finder's stdout and exit code; it
    returns the Popen mock so tests can inspect the command and input.
    """
    patcher = patch("git_wt.services.selection.subprocess.Popen")
    popen = patcher.start()

    def configure(output="", returncode=0, error=None):
        if error is not None:
            popen.side_effect = error
            return popen
        proc = MagicMock()
        proc.communicate.return_value = (output, None)
        proc.returncode = returncode
        popen.return_value.__enter__.return_value = proc
        popen.return_value.__exit__.return_value = False
        popen.proc = proc
        return popen

    yield configure
    patcher.stop()


@pytest.fixture
def make_wt():
    """Factory for Worktree objects."""
    return make_worktree
