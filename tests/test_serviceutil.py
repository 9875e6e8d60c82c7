import os

import pytest

from lintreview.serviceutil import GitWorkdirError, find_git_root, git_rel_workdir


@pytest.fixture
def repo(tmp_path):
    (tmp_path / ".git").mkdir()
    (tmp_path / "cmd" / "sub").mkdir(parents=True)
    return tmp_path


def test_git_rel_workdir_root(repo):
    assert git_rel_workdir(str(repo)) == ""


def test_git_rel_workdir_subdir(repo):
    assert git_rel_workdir(str(repo / "cmd")) == "cmd" + os.sep


def test_git_rel_workdir_nested(repo):
    assert git_rel_workdir(str(repo / "cmd" / "sub")) == os.path.join("cmd", "sub") + os.sep


def test_git_rel_workdir_uses_current_directory(repo, monkeypatch):
    monkeypatch.chdir(repo / "cmd")
    assert git_rel_workdir() == "cmd" + os.sep


def test_find_git_root(repo):
    assert find_git_root(str(repo / "cmd" / "sub")) == os.path.abspath(str(repo))


def test_dot_git_file_is_error(tmp_path):
    (tmp_path / ".git").write_text("gitdir: elsewhere\n")
    with pytest.raises(GitWorkdirError, match="not a directory"):
        git_rel_workdir(str(tmp_path))


def test_bare_repository(tmp_path):
    bare = tmp_path / "bare.git"
    (bare / "objects").mkdir(parents=True)
    (bare / "refs").mkdir()
    (bare / "HEAD").write_text("ref: refs/heads/main\n")
    assert find_git_root(str(bare)) == os.path.abspath(str(tmp_path))


def test_nearest_repository_wins(repo):
    inner = repo / "cmd" / "sub"
    (inner / ".git").mkdir()
    assert git_rel_workdir(str(inner)) == ""
    assert find_git_root(str(inner)) == os.path.abspath(str(inner))