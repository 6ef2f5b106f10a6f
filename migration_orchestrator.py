#!/usr/bin/env python3
"""Orchestrators for migrating and updating a Subversion repository via git svn."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from config import DEFAULT_REMOTE_NAME, AuthorsConfig, MigrateConfig, UpdateConfig
from errors import ExecutionError, InvalidArgumentError
from git_svn_bridge import BatchItemResult, GitSvnBridge
from logging_utils import Logger
from process_runner import ProcessRunner
from svn_source import SvnSource, format_authors
from utils import confirm

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1
EXIT_INVALID_ARGUMENT = 2
EXIT_INTERRUPTED = 130

SEPARATOR = "=" * 58

ConfirmFunc = Callable[[str, bool], bool]


class MigrationState(Enum):
    """Linear states of a migration run; optional steps may be skipped."""
    NOT_CLONED = "not-cloned"
    CLONED = "cloned"
    BRANCHES_LISTED = "branches-listed"
    BRANCHES_CREATED = "branches-created"
    TAGS_LISTED = "tags-listed"
    TAGS_CREATED = "tags-created"
    REMOTE_CONFIGURED = "remote-configured"
    PUSHED = "pushed"
    FINALIZED = "finalized"


@dataclass
class MigrationSummary:
    """Per-item outcomes collected during a run."""
    branches: List[BatchItemResult] = field(default_factory=list)
    tags: List[BatchItemResult] = field(default_factory=list)
    remote: Optional[BatchItemResult] = None
    warnings: List[str] = field(default_factory=list)
    pushed: bool = False

    @property
    def failures(self) -> List[BatchItemResult]:
        items = self.branches + self.tags
        if self.remote is not None:
            items.append(self.remote)
        return [item for item in items if not item.ok]

    def report(self) -> None:
        Logger.info(SEPARATOR)
        Logger.info(f"branches: {_count_ok(self.branches)}/{len(self.branches)} created")
        Logger.info(f"tags: {_count_ok(self.tags)}/{len(self.tags)} created")
        if self.remote is not None:
            status = "ok" if self.remote.ok else "failed"
            Logger.info(f"remote {self.remote.name}: {status}")
        if self.pushed:
            Logger.info("pushed all branches and tags")
        for warning in self.warnings:
            Logger.warn(f"warning: {warning}")
        for failure in self.failures:
            Logger.warn(f"failed: {failure.name}")


def _count_ok(items: List[BatchItemResult]) -> int:
    return sum(1 for item in items if item.ok)


def report_execution_error(error: ExecutionError) -> None:
    """Show a failed command together with everything it printed."""
    if error.timed_out:
        Logger.error(f"command timed out: {error.command}")
    else:
        Logger.error(f"command failed ({error.exit_code}): {error.command}")
    for line in error.output:
        Logger.error(line)


class MigrationOrchestrator:
    """Clones (or catches up) a bridge, materializes branches/tags and pushes."""

    def __init__(
        self,
        cfg: MigrateConfig,
        runner: Optional[ProcessRunner] = None,
        confirm_func: ConfirmFunc = confirm,
    ) -> None:
        self.cfg = cfg
        self.runner = runner or ProcessRunner()
        self.bridge = GitSvnBridge(cfg.destination, self.runner)
        self.confirm = confirm_func
        self.state = MigrationState.NOT_CLONED
        self.summary = MigrationSummary()

    def run(self) -> int:
        self._log_settings()
        try:
            self._clone_or_update()

            if self._should_run(self.cfg.gating.branches, "Migrate branches?"):
                self._migrate_branches()

            if self._should_run(self.cfg.gating.tags, "Migrate tags?"):
                self._migrate_tags()

            if self.cfg.remote:
                self._configure_remote()
                if self._should_run(self.cfg.gating.push, "Push to remote?"):
                    self._push()
        except ExecutionError as e:
            report_execution_error(e)
            exit_code = EXIT_EXECUTION_ERROR
        except KeyboardInterrupt:
            Logger.error("interrupted by user")
            exit_code = EXIT_INTERRUPTED
        else:
            exit_code = EXIT_SUCCESS
        finally:
            self._finalize()
            # partial results are reported on the error paths as well
            self.summary.report()

        if exit_code == EXIT_SUCCESS:
            Logger.info("mission accomplished")
        return exit_code

    def _log_settings(self) -> None:
        Logger.info(f"BASEDIR: {os.getcwd()}")
        Logger.info(f"SOURCE: {self.cfg.source}")
        Logger.info(f"TMP: {self.bridge.path}")
        if self.cfg.authors_file:
            Logger.info(f"AUTHORS-FILE: {self.cfg.authors_file}")
        if self.cfg.remote:
            Logger.info(f"REMOTE: {self.cfg.remote}")
        if self.cfg.empty_dirs.enabled:
            Logger.info(
                f"PRESERVE EMPTY DIRS WITH: {self.cfg.empty_dirs.placeholder_filename}"
            )
        Logger.info(SEPARATOR)

    def _transition(self, state: MigrationState) -> None:
        Logger.debug(f"state: {self.state.value} -> {state.value}")
        self.state = state

    def _should_run(self, configured: Optional[bool], question: str) -> bool:
        if configured is not None:
            return configured
        if self.cfg.gating.assume_yes:
            return True
        return self.confirm(question, True)

    def _clone_or_update(self) -> None:
        if not self.bridge.is_repository():
            self.bridge.clone(
                self.cfg.source,
                self.cfg.layout,
                authors_file=self.cfg.authors_file,
                preserve_empty_dirs=self.cfg.empty_dirs.enabled,
                placeholder_filename=self.cfg.empty_dirs.placeholder_filename,
            )
        else:
            Logger.info(f"existing git repository found: {self.bridge.path}")
            self.bridge.fetch()
            self.bridge.rebase()
        self._transition(MigrationState.CLONED)

    def _migrate_branches(self) -> None:
        try:
            branches = self.bridge.list_branches()
        except ExecutionError as e:
            self._warn(f"could not list branches: {e}")
            return
        self._transition(MigrationState.BRANCHES_LISTED)
        Logger.info(f"found {len(branches)} branches")

        for ref in branches:
            self.summary.branches.append(self.bridge.create_branch(ref))
        self._transition(MigrationState.BRANCHES_CREATED)

    def _migrate_tags(self) -> None:
        try:
            tags = self.bridge.list_tags()
        except ExecutionError as e:
            self._warn(f"could not list tags: {e}")
            return
        self._transition(MigrationState.TAGS_LISTED)
        Logger.info(f"found {len(tags)} tags")

        for ref in tags:
            self.summary.tags.append(self.bridge.create_tag(ref))
        self._transition(MigrationState.TAGS_CREATED)

    def _configure_remote(self) -> None:
        try:
            exists = self.bridge.has_remote(DEFAULT_REMOTE_NAME)
        except ExecutionError as e:
            self._warn(f"could not read configured remotes: {e}")
            exists = False

        if exists:
            Logger.warn(f"remote '{DEFAULT_REMOTE_NAME}' already configured")
            self.summary.remote = BatchItemResult(
                DEFAULT_REMOTE_NAME, True, "already configured"
            )
        else:
            self.summary.remote = self.bridge.add_remote(
                self.cfg.remote, DEFAULT_REMOTE_NAME
            )
        self._transition(MigrationState.REMOTE_CONFIGURED)

    def _push(self) -> None:
        self.bridge.push(DEFAULT_REMOTE_NAME)
        self.summary.pushed = True
        self._transition(MigrationState.PUSHED)

    def _finalize(self) -> None:
        if not self.bridge.is_repository():
            return
        try:
            self.bridge.switch_branch(self.cfg.main_branch)
        except ExecutionError as e:
            self._warn(f"could not check out {self.cfg.main_branch}: {e}")
        self._transition(MigrationState.FINALIZED)

    def _warn(self, message: str) -> None:
        Logger.warn(f"warning: {message}")
        self.summary.warnings.append(message)


class UpdateOrchestrator:
    """Brings an existing bridge and its branches up to date with Subversion."""

    def __init__(self, cfg: UpdateConfig, runner: Optional[ProcessRunner] = None) -> None:
        self.cfg = cfg
        self.runner = runner or ProcessRunner()
        self.bridge = GitSvnBridge(cfg.gitsvn_path, self.runner)
        self.results: List[BatchItemResult] = []

    def run(self) -> int:
        try:
            if not self.bridge.is_repository():
                raise InvalidArgumentError(
                    f"given gitsvn path is not a git repository ({self.cfg.gitsvn_path})"
                )
            Logger.info(f"GIT_SVN: {self.bridge.path}")

            self.bridge.fetch()

            names = self.cfg.branches or self._discover_branch_names()
            Logger.info(f"BRANCHES: {', '.join(names)}")
            Logger.info(SEPARATOR)

            for name in names:
                self.results.append(self.bridge.update_branch(name))

            if self.cfg.push and self.bridge.has_remote(DEFAULT_REMOTE_NAME):
                self.bridge.push(DEFAULT_REMOTE_NAME)
        except InvalidArgumentError as e:
            Logger.error(str(e))
            return EXIT_INVALID_ARGUMENT
        except ExecutionError as e:
            report_execution_error(e)
            return EXIT_EXECUTION_ERROR
        except KeyboardInterrupt:
            Logger.error("interrupted by user")
            return EXIT_INTERRUPTED
        finally:
            self._finalize()

        failed = [r.name for r in self.results if not r.ok]
        Logger.info(f"updated {len(self.results) - len(failed)}/{len(self.results)} branches")
        if failed:
            Logger.warn(f"failed: {', '.join(failed)}")
        return EXIT_SUCCESS

    def _discover_branch_names(self) -> List[str]:
        try:
            return [ref.name for ref in self.bridge.list_branches()]
        except ExecutionError as e:
            Logger.warn(f"warning: could not list branches: {e}")
            return []

    def _finalize(self) -> None:
        if not self.bridge.is_repository():
            return
        try:
            self.bridge.switch_branch(self.cfg.main_branch)
        except ExecutionError as e:
            Logger.warn(f"warning: could not check out {self.cfg.main_branch}: {e}")


class AuthorsFetcher:
    """Writes a git svn authors file from the authors of a Subversion log."""

    def __init__(self, cfg: AuthorsConfig, runner: Optional[ProcessRunner] = None) -> None:
        self.cfg = cfg
        self.runner = runner or ProcessRunner()
        self.source = SvnSource(self.runner)

    def run(self) -> int:
        try:
            authors = self.source.fetch_authors(self.cfg.source, quiet=self.cfg.quiet)
            self.write_authors_file(format_authors(authors))
        except ExecutionError as e:
            report_execution_error(e)
            return EXIT_EXECUTION_ERROR
        except OSError as e:
            Logger.error(f"failed to write authors file '{self.cfg.output}': {e}")
            return EXIT_EXECUTION_ERROR

        Logger.info(f"authors written to {self.cfg.output}")
        return EXIT_SUCCESS

    def write_authors_file(self, lines: List[str]) -> None:
        with open(self.cfg.output, "w", encoding="utf-8") as handle:
            for line in lines:
                handle.write(line + "\n")
