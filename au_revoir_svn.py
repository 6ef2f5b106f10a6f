#!/usr/bin/env python3
"""
Au Revoir SVN - Migrate a Subversion repository to Git.

This tool drives the standard git svn bridge workflow: it clones (or catches
up) a Subversion repository into a local bridge, turns the Subversion branches
and tags into Git branches and annotated tags, and optionally pushes the
result to a Git remote. It can also generate a git svn authors file from the
Subversion log.

Copyright (c) 2025 Michele Tavella <meeghele@proton.me>
Licensed under the MIT License. See LICENSE file for details.

Author: Michele Tavella <meeghele@proton.me>
License: MIT
"""

from __future__ import annotations

import sys
from typing import List, NoReturn, Optional

from argument_parser import parse_arguments
from config import Command, Config
from migration_orchestrator import (AuthorsFetcher, MigrationOrchestrator,
                                    UpdateOrchestrator)
from process_runner import ProcessRunner


def build_orchestrator(cfg: Config):
    """Return the orchestrator that executes the configured command."""
    runner = ProcessRunner(cfg.runner)
    if cfg.command == Command.MIGRATE:
        return MigrationOrchestrator(cfg.settings, runner)
    if cfg.command == Command.UPDATE:
        return UpdateOrchestrator(cfg.settings, runner)
    return AuthorsFetcher(cfg.settings, runner)


def main(argv: Optional[List[str]] = None) -> NoReturn:
    cfg = parse_arguments(argv)
    orchestrator = build_orchestrator(cfg)
    sys.exit(orchestrator.run())


if __name__ == "__main__":
    main()
