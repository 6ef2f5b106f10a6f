"""Tests for GitSvnBridge command construction and per-item isolation."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, call

from config import LayoutConfig
from errors import ExecutionError
from git_svn_bridge import GitSvnBridge, build_clone_args
from refs import RefDescriptor

SOURCE = 'https://svn.example.org/repos/project'


def _bridge(tmp_path: Path) -> GitSvnBridge:
    return GitSvnBridge(str(tmp_path / 'bridge'), MagicMock())


def test_clone_args_default_to_stdlayout() -> None:
    """Without any layout flags the standard layout is requested."""
    args = build_clone_args(SOURCE, '/work/tmp/project', LayoutConfig())
    assert args == [
        'git', 'svn', 'clone', SOURCE, '--prefix=svn/', '--stdlayout',
        '--quiet', '/work/tmp/project',
    ]


def test_clone_args_with_explicit_layout_and_options() -> None:
    """Explicit paths, authors file and placeholder policy are passed through."""
    args = build_clone_args(
        SOURCE,
        '/work/tmp/project',
        LayoutConfig(trunk='main', branches='feature', tags='release'),
        authors_file='authors.txt',
        preserve_empty_dirs=True,
        placeholder_filename='.keep',
    )
    assert '--stdlayout' not in args
    assert args[5:] == [
        '--trunk=main',
        '--branches=feature',
        '--tags=release',
        '-A',
        'authors.txt',
        '--preserve-empty-dirs',
        '--placeholder-filename=.keep',
        '--quiet',
        '/work/tmp/project',
    ]


def test_is_repository_requires_git_directory(tmp_path: Path) -> None:
    """Only a directory holding .git counts as a bridge repository."""
    bridge = _bridge(tmp_path)
    assert bridge.is_repository() is False

    (tmp_path / 'bridge').mkdir()
    assert bridge.is_repository() is False

    (tmp_path / 'bridge' / '.git').mkdir()
    assert bridge.is_repository() is True


def test_clone_streams_git_svn_clone(tmp_path: Path) -> None:
    """clone creates the destination and runs git svn clone interactively."""
    bridge = _bridge(tmp_path)
    bridge.clone(SOURCE, LayoutConfig(stdlayout=True))

    assert (tmp_path / 'bridge').is_dir()
    args = bridge.runner.run_interactive.call_args.args[0]
    assert args[:4] == ['git', 'svn', 'clone', SOURCE]
    assert args[-1] == bridge.path


def test_create_branch_checks_out_svn_ref(tmp_path: Path) -> None:
    """Branches are created from the matching svn/ remote-tracking ref."""
    bridge = _bridge(tmp_path)
    result = bridge.create_branch(RefDescriptor('develop', 'msg', 'abc123'))

    assert result.ok is True
    bridge.runner.run.assert_called_once_with(
        ['git', 'checkout', '-b', 'develop', 'svn/develop'], cwd=bridge.path
    )


def test_create_tag_uses_message_as_single_argument(tmp_path: Path) -> None:
    """The annotation is one argument, so quotes in it are harmless."""
    bridge = _bridge(tmp_path)
    bridge.create_tag(RefDescriptor('v1.0', "it's 'quoted'; rm -rf /", 'dead'))

    bridge.runner.run.assert_called_once_with(
        ['git', 'tag', '-a', '-m', "it's 'quoted'; rm -rf /", 'v1.0',
         'remotes/svn/tags/v1.0'],
        cwd=bridge.path,
    )


def test_create_tag_falls_back_to_name_for_empty_message(tmp_path: Path) -> None:
    """An empty svn message falls back to the tag name."""
    bridge = _bridge(tmp_path)
    bridge.create_tag(RefDescriptor('v2.0', '', 'beef'))
    args = bridge.runner.run.call_args.args[0]
    assert args[4] == 'v2.0'


def test_item_failure_is_returned_not_raised(tmp_path: Path) -> None:
    """A failing git command yields a failed BatchItemResult."""
    bridge = _bridge(tmp_path)
    bridge.runner.run.side_effect = ExecutionError(
        'git checkout -b develop svn/develop', 128, ['fatal: already exists']
    )

    result = bridge.create_branch(RefDescriptor('develop'))

    assert result.ok is False
    assert 'already exists' in result.message


def test_invalid_ref_name_is_rejected_without_running(tmp_path: Path) -> None:
    """Names git would misread as options never reach the command line."""
    bridge = _bridge(tmp_path)
    result = bridge.create_branch(RefDescriptor('--upload-pack=evil'))

    assert result.ok is False
    bridge.runner.run.assert_not_called()


def test_has_remote_checks_named_remote(tmp_path: Path) -> None:
    """has_remote reads `git remote` output."""
    bridge = _bridge(tmp_path)
    bridge.runner.run.return_value = ['origin', 'upstream']

    assert bridge.has_remote() is True
    assert bridge.has_remote('origin') is True
    assert bridge.has_remote('backup') is False

    bridge.runner.run.return_value = []
    assert bridge.has_remote() is False


def test_push_sends_branches_then_tags(tmp_path: Path) -> None:
    """push runs --all before --tags against the remote."""
    bridge = _bridge(tmp_path)
    bridge.push('origin')

    assert bridge.runner.run_interactive.call_args_list == [
        call(['git', 'push', 'origin', '--all'], cwd=bridge.path),
        call(['git', 'push', 'origin', '--tags'], cwd=bridge.path),
    ]


def test_update_branch_switches_then_rebases(tmp_path: Path) -> None:
    """update_branch checks the branch out and rebases from svn."""
    bridge = _bridge(tmp_path)
    result = bridge.update_branch('develop')

    assert result.ok is True
    bridge.runner.run.assert_called_once_with(
        ['git', 'checkout', 'develop'], cwd=bridge.path
    )
    bridge.runner.run_interactive.assert_called_once_with(
        ['git', 'svn', 'rebase'], cwd=bridge.path
    )


def test_update_branch_failure_is_returned_not_raised(tmp_path: Path) -> None:
    """A failing rebase yields a failed result for that branch only."""
    bridge = _bridge(tmp_path)
    bridge.runner.run_interactive.side_effect = ExecutionError(
        'git svn rebase', 1, ['conflict']
    )

    result = bridge.update_branch('develop')

    assert result.ok is False
    assert result.name == 'develop'


def test_update_branch_rejects_invalid_name(tmp_path: Path) -> None:
    """An invalid branch name is reported without running git."""
    bridge = _bridge(tmp_path)

    result = bridge.update_branch('-f')

    assert result.ok is False
    assert 'invalid branch name' in result.message
    bridge.runner.run.assert_not_called()
    bridge.runner.run_interactive.assert_not_called()
