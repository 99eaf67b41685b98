"""Tests for WorktreeRegistry"""
import shutil

from git_wt.services.git import GitGateway
from git_wt.services.registry import WorktreeRegistry, order_worktrees


class TestOrdering:
    """Test deterministic ordering of worktrees."""

    def test_main_first_then_most_recent(self, make_wt):
        """Test main leads, then newest last_used first."""
        worktrees = [
            make_wt("/b", "b", last_used=100.0),
            make_wt("/repo", "main", is_main=True, last_used=1.0),
            make_wt("/a", "a", last_used=300.0),
            make_wt("/c", "c", last_used=200.0),
        ]
        ordered = order_worktrees(worktrees, "recent")
        assert [wt.path for wt in ordered] == ["/repo", "/a", "/c", "/b"]

    def test_missing_timestamps_sort_by_path_after_timed(self, make_wt):
        """Test entries without last_used follow, in path order."""
        worktrees = [
            make_wt("/z", "z"),
            make_wt("/y", "y", last_used=5.0),
            make_wt("/x", "x"),
        ]
        ordered = order_worktrees(worktrees, "recent")
        assert [wt.path for wt in ordered] == ["/y", "/x", "/z"]

    def test_ties_broken_by_path(self, make_wt):
        """Test equal timestamps fall back to path order."""
        worktrees = [make_wt("/b", "b", last_used=1.0), make_wt("/a", "a", last_used=1.0)]
        assert [wt.path for wt in order_worktrees(worktrees)] == ["/a", "/b"]

    def test_path_mode(self, make_wt):
        """Test path ordering ignores timestamps."""
        worktrees = [
            make_wt("/b", "b", last_used=100.0),
            make_wt("/repo", "main", is_main=True),
            make_wt("/a", "a", last_used=1.0),
        ]
        ordered = order_worktrees(worktrees, "path")
        assert [wt.path for wt in ordered] == ["/repo", "/a", "/b"]

    def test_deterministic(self, make_wt):
        """Test identical input gives identical output regardless of input order."""
        worktrees = [
            make_wt("/repo", "main", is_main=True),
            make_wt("/b", "b", last_used=2.0),
            make_wt("/a", "a"),
            make_wt("/c", "c", last_used=2.0),
        ]
        first = order_worktrees(worktrees)
        second = order_worktrees(list(reversed(worktrees)))
        assert first == second


class TestBuild:
    """Test building registries from the gateway."""

    def test_build_from_mock(self, mock_gateway, sample_worktrees):
        """Test the registry holds what the gateway reports."""
        registry = WorktreeRegistry.build(mock_gateway)
        assert registry.paths() == [wt.path for wt in sample_worktrees]
        assert registry.main == sample_worktrees[0]
        assert len(registry) == 2
        mock_gateway.list_worktrees.assert_called_once_with()

    def test_build_is_read_only(self, mock_gateway):
        """Test building never calls a mutating gateway operation."""
        WorktreeRegistry.build(mock_gateway)
        mock_gateway.create_worktree.assert_not_called()
        mock_gateway.remove_worktree.assert_not_called()
        mock_gateway.prune_worktrees.assert_not_called()

    def test_missing_directory_dropped(self, mock_gateway, make_wt, temp_dir, sample_worktrees):
        """Test entries whose directory is gone and not prunable are dropped."""
        ghost = make_wt(str(temp_dir / "ghost"), "ghost", is_locked=True)
        mock_gateway.list_worktrees.return_value = sample_worktrees + [ghost]

        registry = WorktreeRegistry.build(mock_gateway)
        assert ghost.path not in registry

    def test_prunable_kept_and_tagged(self, mock_gateway, make_wt, temp_dir, sample_worktrees):
        """Test prunable entries stay visible so they can be removed."""
        gone = make_wt(str(temp_dir / "gone"), "gone", is_prunable=True)
        mock_gateway.list_worktrees.return_value = sample_worktrees + [gone]

        registry = WorktreeRegistry.build(mock_gateway)
        assert registry.find(gone.path).is_prunable

    def test_lookup(self, sample_registry, sample_worktrees):
        """Test find, find_branch and membership."""
        assert sample_registry.find(sample_worktrees[1].path) == sample_worktrees[1]
        assert sample_registry.find_branch("feature-a") == sample_worktrees[1]
        assert sample_registry.find_branch("nope") is None
        assert sample_worktrees[0].path in sample_registry
        assert "/nowhere" not in sample_registry

    def test_lookup_by_path_ignores_checked_out_state(self, sample_worktrees, make_wt):
        """Test find matches on path while equality still sees the branch change."""
        moved = make_wt(sample_worktrees[1].path, "other-branch")
        registry = WorktreeRegistry([sample_worktrees[0], moved])

        assert registry.find(sample_worktrees[1].path) is moved
        assert moved != sample_worktrees[1]
        assert make_wt(moved.path, "other-branch", last_used=5.0) == moved

    def test_removable_excludes_main(self, sample_registry, sample_worktrees):
        """Test main is never offered for removal."""
        assert sample_registry.removable() == [sample_worktrees[1]]

    def test_current_worktree(self, sample_worktrees):
        """Test the worktree containing current_path is found, nested or not."""
        registry = WorktreeRegistry(sample_worktrees, current_path=sample_worktrees[1].path + "/src")
        assert registry.current == sample_worktrees[1]
        registry = WorktreeRegistry(sample_worktrees, current_path=sample_worktrees[0].path)
        assert registry.current == sample_worktrees[0]
        assert WorktreeRegistry(sample_worktrees).current is None


class TestRegistryMatchesGit:
    """Rebuilt registries reflect exactly what git reports."""

    def _git_paths(self, repo):
        output = repo.git.worktree("list", "--porcelain")
        return {line.split(" ", 1)[1] for line in output.split("\n") if line.startswith("worktree ")}

    def test_rebuild_after_create_and_remove(self, git_repo, temp_dir):
        """Test paths equal git's list after a sequence of changes."""
        gateway = GitGateway(git_repo.working_dir)
        a = str(temp_dir / "wts" / "a")
        b = str(temp_dir / "wts" / "b")

        gateway.create_worktree(a, "a", "main")
        assert set(WorktreeRegistry.build(gateway).paths()) == self._git_paths(git_repo)

        gateway.create_worktree(b, "b", "main")
        gateway.remove_worktree(a)
        registry = WorktreeRegistry.build(gateway)
        assert set(registry.paths()) == self._git_paths(git_repo)
        assert a not in registry

    def test_build_is_idempotent(self, git_repo_with_worktree):
        """Test two builds with no changes in between agree."""
        repo, _ = git_repo_with_worktree
        gateway = GitGateway(repo.working_dir)
        assert WorktreeRegistry.build(gateway).worktrees == WorktreeRegistry.build(gateway).worktrees

    def test_deleted_directory_is_prunable(self, git_repo_with_worktree):
        """Test a worktree removed behind git's back shows up as prunable."""
        repo, wt_path = git_repo_with_worktree
        shutil.rmtree(wt_path)
        registry = WorktreeRegistry.build(GitGateway(repo.working_dir))
        assert registry.find(str(wt_path)).is_prunable
