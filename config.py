#!/usr/bin/env python3
"""Configuration dataclasses for au-revoir-svn."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

DEFAULT_MAIN_BRANCH = "master"
DEFAULT_PLACEHOLDER_FILENAME = ".gitkeep"
DEFAULT_REMOTE_NAME = "origin"
DEFAULT_TIMEOUT_S = 3600.0
DEFAULT_AUTHORS_OUTPUT = "./authors.txt"


class Command(Enum):
    """Enumeration for the available sub-commands."""
    MIGRATE = "migrate"
    UPDATE = "update"
    FETCH_SVN_AUTHORS = "fetch-svn-authors"


@dataclass(frozen=True)
class RunnerConfig:
    """External process execution configuration."""
    trust_exit_codes: bool = True
    # captured commands (checkout, tag, branch listing, svn log)
    timeout_s: Optional[float] = DEFAULT_TIMEOUT_S
    # streamed commands (git svn clone/fetch/rebase, git push); None = no limit
    interactive_timeout_s: Optional[float] = None
    echo_commands: bool = True


@dataclass(frozen=True)
class LayoutConfig:
    """Subversion repository layout passed to git svn clone."""
    stdlayout: bool = False
    trunk: Optional[str] = None
    branches: Optional[str] = None
    tags: Optional[str] = None

    @property
    def has_explicit_paths(self) -> bool:
        return any((self.trunk, self.branches, self.tags))


@dataclass(frozen=True)
class EmptyDirsConfig:
    """Placeholder policy for empty Subversion directories."""
    enabled: bool = False
    placeholder_filename: str = DEFAULT_PLACEHOLDER_FILENAME


@dataclass(frozen=True)
class StepGating:
    """Which optional steps run; None means ask the user."""
    branches: Optional[bool] = None
    tags: Optional[bool] = None
    push: Optional[bool] = None
    assume_yes: bool = False


@dataclass(frozen=True)
class MigrateConfig:
    """Configuration for the migrate command."""
    source: str
    destination: str
    authors_file: Optional[str] = None
    remote: Optional[str] = None
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    empty_dirs: EmptyDirsConfig = field(default_factory=EmptyDirsConfig)
    gating: StepGating = field(default_factory=StepGating)
    main_branch: str = DEFAULT_MAIN_BRANCH


@dataclass(frozen=True)
class UpdateConfig:
    """Configuration for the update command."""
    gitsvn_path: str
    branches: List[str] = field(default_factory=list)
    push: bool = True
    main_branch: str = DEFAULT_MAIN_BRANCH


@dataclass(frozen=True)
class AuthorsConfig:
    """Configuration for the fetch-svn-authors command."""
    source: str
    output: str = DEFAULT_AUTHORS_OUTPUT
    quiet: bool = False


@dataclass(frozen=True)
class Config:
    """Main configuration: the chosen command and its settings."""
    command: Command
    settings: Union[MigrateConfig, UpdateConfig, AuthorsConfig]
    runner: RunnerConfig = field(default_factory=RunnerConfig)
