#!/usr/bin/env python3
"""Handle on a local git-svn bridge repository."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

from config import (DEFAULT_PLACEHOLDER_FILENAME, DEFAULT_REMOTE_NAME,
                    LayoutConfig)
from errors import ExecutionError
from logging_utils import Logger
from process_runner import ProcessRunner
from refs import RefDescriptor, RefLister
from security import SecurityValidator

SVN_REMOTE_PREFIX = "svn/"
SVN_TAGS_REF_PREFIX = "remotes/svn/tags/"


@dataclass(frozen=True)
class BatchItemResult:
    """Outcome of one item in a batch (a branch, a tag, a remote)."""
    name: str
    ok: bool
    message: str = ""


def build_clone_args(
    source: str,
    destination: str,
    layout: LayoutConfig,
    authors_file: Optional[str] = None,
    preserve_empty_dirs: bool = False,
    placeholder_filename: str = DEFAULT_PLACEHOLDER_FILENAME,
) -> List[str]:
    """Build the git svn clone argument list.

    Without --stdlayout or explicit paths the standard layout is assumed.
    """
    args = ["git", "svn", "clone", source, f"--prefix={SVN_REMOTE_PREFIX}"]

    if layout.stdlayout or not layout.has_explicit_paths:
        args.append("--stdlayout")
    if layout.trunk:
        args.append(f"--trunk={layout.trunk}")
    if layout.branches:
        args.append(f"--branches={layout.branches}")
    if layout.tags:
        args.append(f"--tags={layout.tags}")

    if authors_file:
        args.extend(["-A", authors_file])

    if preserve_empty_dirs:
        args.append("--preserve-empty-dirs")
        args.append(f"--placeholder-filename={placeholder_filename}")

    args.append("--quiet")
    # destination always goes last
    args.append(destination)
    return args


class GitSvnBridge:
    """Runs git and git svn commands against one bridge repository root."""

    def __init__(self, path: str, runner: ProcessRunner) -> None:
        self.path = os.path.abspath(path)
        self.runner = runner
        self.refs = RefLister(runner)

    def is_repository(self) -> bool:
        """True if the path is a directory holding a .git directory."""
        return os.path.isdir(self.path) and os.path.isdir(
            os.path.join(self.path, ".git")
        )

    def clone(
        self,
        source: str,
        layout: LayoutConfig,
        authors_file: Optional[str] = None,
        preserve_empty_dirs: bool = False,
        placeholder_filename: str = DEFAULT_PLACEHOLDER_FILENAME,
    ) -> None:
        Logger.info("cloning subversion repository...")
        os.makedirs(self.path, mode=0o755, exist_ok=True)
        args = build_clone_args(
            source,
            self.path,
            layout,
            authors_file=authors_file,
            preserve_empty_dirs=preserve_empty_dirs,
            placeholder_filename=placeholder_filename,
        )
        self.runner.run_interactive(args)

    def fetch(self) -> None:
        self.runner.run_interactive(["git", "svn", "fetch"], cwd=self.path)

    def rebase(self) -> None:
        self.runner.run_interactive(["git", "svn", "rebase"], cwd=self.path)

    def list_branches(self) -> List[RefDescriptor]:
        return self.refs.list_branches(self.path)

    def list_tags(self) -> List[RefDescriptor]:
        return self.refs.list_tags(self.path)

    def create_branch(self, ref: RefDescriptor) -> BatchItemResult:
        """Create a local branch tracking svn/<name>."""
        Logger.info(f"creating branch {ref.name}")
        try:
            name = SecurityValidator.validate_ref_name(ref.name)
        except ValueError as e:
            return self._failed(ref.name, f"invalid branch name: {e}")
        return self._run_item(
            name, ["git", "checkout", "-b", name, f"{SVN_REMOTE_PREFIX}{name}"]
        )

    def create_tag(self, ref: RefDescriptor) -> BatchItemResult:
        """Create an annotated tag from remotes/svn/tags/<name>.

        The svn commit message becomes the annotation; the tag name is used
        when the message is empty.
        """
        Logger.info(f"creating tag {ref.name}")
        try:
            name = SecurityValidator.validate_ref_name(ref.name)
        except ValueError as e:
            return self._failed(ref.name, f"invalid tag name: {e}")
        message = ref.message or name
        return self._run_item(
            name,
            ["git", "tag", "-a", "-m", message, name, f"{SVN_TAGS_REF_PREFIX}{name}"],
        )

    def switch_branch(self, name: str) -> None:
        self.runner.run(["git", "checkout", name], cwd=self.path)

    def update_branch(self, name: str) -> BatchItemResult:
        """Check out a branch and rebase it onto the latest svn revision."""
        Logger.info(f"updating branch {name}")
        try:
            SecurityValidator.validate_ref_name(name)
            self.switch_branch(name)
            self.rebase()
        except ValueError as e:
            return self._failed(name, f"invalid branch name: {e}")
        except ExecutionError as e:
            return self._failed(name, str(e))
        return BatchItemResult(name, True)

    def remotes(self) -> List[str]:
        return [line.strip() for line in self.runner.run(["git", "remote"], cwd=self.path)
                if line.strip()]

    def has_remote(self, name: Optional[str] = None) -> bool:
        """True if any remote (or the named remote) is configured."""
        remotes = self.remotes()
        if name is not None:
            return name in remotes
        return bool(remotes)

    def add_remote(self, url: str, name: str = DEFAULT_REMOTE_NAME) -> BatchItemResult:
        Logger.info("creating git remote")
        return self._run_item(name, ["git", "remote", "add", name, url])

    def push(self, remote: str = DEFAULT_REMOTE_NAME) -> None:
        """Push all branches, then all tags. Failures propagate."""
        Logger.info("pushing to remote git repository")
        self.runner.run_interactive(["git", "push", remote, "--all"], cwd=self.path)
        self.runner.run_interactive(["git", "push", remote, "--tags"], cwd=self.path)

    def _run_item(self, name: str, args: List[str]) -> BatchItemResult:
        try:
            self.runner.run(args, cwd=self.path)
        except ExecutionError as e:
            return self._failed(name, str(e))
        return BatchItemResult(name, True)

    @staticmethod
    def _failed(name: str, message: str) -> BatchItemResult:
        Logger.warn(f"{name}: {message}")
        return BatchItemResult(name, False, message)
