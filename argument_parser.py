#!/usr/bin/env python3
"""Command line argument parsing and configuration building."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from config import (DEFAULT_AUTHORS_OUTPUT, DEFAULT_MAIN_BRANCH,
                    DEFAULT_PLACEHOLDER_FILENAME, DEFAULT_TIMEOUT_S,
                    AuthorsConfig, Command, Config, EmptyDirsConfig,
                    LayoutConfig, MigrateConfig, RunnerConfig, StepGating,
                    UpdateConfig)
from logging_utils import Logger
from security import SecurityValidator
from utils import default_bridge_path

# Exit codes
EXIT_MISSING_ARGUMENTS = 2

MAX_TIMEOUT_S = 7 * 24 * 3600


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="au-revoir-svn",
        description="Migrate a Subversion repository to Git via git svn",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s fetch-svn-authors https://svn.example.org/repos/project --output authors.txt
  %(prog)s migrate https://svn.example.org/repos/project -A authors.txt
  %(prog)s migrate https://svn.example.org/repos/project --stdlayout \\
           --remote git@github.com:example/project.git --yes
  %(prog)s migrate svn://svn.example.org/project -T main -b feature -t release
  %(prog)s update tmp/project --branches trunk develop
        """,
    )
    parser.add_argument(
        "--timeout",
        dest="timeout_s",
        type=float,
        default=DEFAULT_TIMEOUT_S,
        help=f"Seconds before a captured command (checkout, tag, listing, svn log) "
             f"is aborted (default: {DEFAULT_TIMEOUT_S:.0f}, 0 disables)",
    )
    parser.add_argument(
        "--clone-timeout",
        dest="clone_timeout_s",
        type=float,
        default=0.0,
        help="Seconds before git svn clone/fetch/rebase or git push is aborted "
             "(default: 0, no limit)",
    )
    return parser


def _add_migrate_command(subparsers) -> None:
    """Add the migrate sub-command."""
    parser = subparsers.add_parser(
        Command.MIGRATE.value,
        help="Migrate a Subversion repository to Git",
    )
    parser.add_argument("source", help="Subversion repository to migrate")
    parser.add_argument(
        "-A",
        "--authors-file",
        dest="authors_file",
        help="Path to Subversion authors mapping",
    )
    parser.add_argument(
        "--remote",
        dest="remote",
        help="URL of Git remote repository to push to",
    )
    parser.add_argument(
        "--destination",
        dest="destination",
        help="Path of the git svn bridge (default: ./tmp/<repository name>)",
    )
    parser.add_argument(
        "-s",
        "--stdlayout",
        action="store_true",
        dest="stdlayout",
        help="Subversion repository uses the trunk/branches/tags layout",
    )
    parser.add_argument("-T", "--trunk", dest="trunk", help="Trunk sub-path")
    parser.add_argument("-b", "--branches", dest="branches", help="Branches sub-path")
    parser.add_argument("-t", "--tags", dest="tags", help="Tags sub-path")
    parser.add_argument(
        "--preserve-empty-dirs",
        action="store_true",
        dest="preserve_empty_dirs",
        help="Create a placeholder file for each empty directory fetched from Subversion",
    )
    parser.add_argument(
        "--placeholder-filename",
        dest="placeholder_filename",
        default=DEFAULT_PLACEHOLDER_FILENAME,
        help=f"Name of placeholder files created by --preserve-empty-dirs "
             f"(default: {DEFAULT_PLACEHOLDER_FILENAME})",
    )
    parser.add_argument(
        "--main-branch",
        dest="main_branch",
        default=DEFAULT_MAIN_BRANCH,
        help=f"Branch checked out when done (default: {DEFAULT_MAIN_BRANCH})",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        dest="assume_yes",
        help="Answer yes to every question",
    )
    parser.add_argument(
        "--no-branches",
        action="store_false",
        dest="migrate_branches",
        default=None,
        help="Do not create local branches",
    )
    parser.add_argument(
        "--no-tags",
        action="store_false",
        dest="migrate_tags",
        default=None,
        help="Do not create annotated tags",
    )
    parser.add_argument(
        "--no-push",
        action="store_false",
        dest="push",
        default=None,
        help="Configure the remote but do not push",
    )


def _add_update_command(subparsers) -> None:
    """Add the update sub-command."""
    parser = subparsers.add_parser(
        Command.UPDATE.value,
        help="Update a git svn bridge with all changes from Subversion",
    )
    parser.add_argument("gitsvn", help="Path to the git svn bridge repository")
    parser.add_argument(
        "--branch",
        dest="branches",
        action="append",
        metavar="NAME",
        help="Branch to update, repeatable (default: every Subversion branch)",
    )
    parser.add_argument(
        "--branches",
        dest="branches",
        action="extend",
        nargs="+",
        metavar="NAME",
        help="Branches to update; must come after the gitsvn path "
             "(e.g. update tmp/project --branches trunk develop)",
    )
    parser.add_argument(
        "--no-push",
        action="store_false",
        dest="push",
        help="Do not push to the origin remote",
    )
    parser.add_argument(
        "--main-branch",
        dest="main_branch",
        default=DEFAULT_MAIN_BRANCH,
        help=f"Branch checked out when done (default: {DEFAULT_MAIN_BRANCH})",
    )


def _add_authors_command(subparsers) -> None:
    """Add the fetch-svn-authors sub-command."""
    parser = subparsers.add_parser(
        Command.FETCH_SVN_AUTHORS.value,
        help="Fetch author names from a Subversion repository",
    )
    parser.add_argument("source", help="Subversion repository to fetch author names from")
    parser.add_argument(
        "--output",
        dest="output",
        default=DEFAULT_AUTHORS_OUTPUT,
        help=f"Output file (default: {DEFAULT_AUTHORS_OUTPUT})",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        dest="quiet",
        help="Pass --quiet to svn log (skips commit messages)",
    )


def _validate_runner_arguments(args) -> RunnerConfig:
    limits = (("timeout", args.timeout_s), ("clone timeout", args.clone_timeout_s))
    for option, value in limits:
        if value < 0 or value > MAX_TIMEOUT_S:
            raise ValueError(f"{option} must be between 0 and {MAX_TIMEOUT_S} seconds")
    return RunnerConfig(
        timeout_s=args.timeout_s or None,
        interactive_timeout_s=args.clone_timeout_s or None,
    )


def _build_migrate_config(args) -> MigrateConfig:
    source = SecurityValidator.validate_url(
        args.source, SecurityValidator.SVN_URL_SCHEMES
    )
    remote = None
    if args.remote:
        remote = SecurityValidator.validate_url(
            args.remote, SecurityValidator.GIT_URL_SCHEMES
        )
    authors_file = None
    if args.authors_file:
        authors_file = SecurityValidator.validate_file_path(args.authors_file)
    destination = SecurityValidator.validate_file_path(
        args.destination or default_bridge_path(source)
    )
    return MigrateConfig(
        source=source,
        destination=destination,
        authors_file=authors_file,
        remote=remote,
        layout=LayoutConfig(
            stdlayout=args.stdlayout,
            trunk=args.trunk,
            branches=args.branches,
            tags=args.tags,
        ),
        empty_dirs=EmptyDirsConfig(
            enabled=args.preserve_empty_dirs,
            placeholder_filename=SecurityValidator.validate_filename(
                args.placeholder_filename
            ),
        ),
        gating=StepGating(
            branches=args.migrate_branches,
            tags=args.migrate_tags,
            push=args.push,
            assume_yes=args.assume_yes,
        ),
        main_branch=SecurityValidator.validate_ref_name(args.main_branch),
    )


def _build_update_config(args) -> UpdateConfig:
    return UpdateConfig(
        gitsvn_path=SecurityValidator.validate_file_path(args.gitsvn),
        branches=[SecurityValidator.validate_ref_name(b) for b in args.branches or []],
        push=args.push,
        main_branch=SecurityValidator.validate_ref_name(args.main_branch),
    )


def _build_authors_config(args) -> AuthorsConfig:
    return AuthorsConfig(
        source=SecurityValidator.validate_url(
            args.source, SecurityValidator.SVN_URL_SCHEMES
        ),
        output=SecurityValidator.validate_file_path(args.output),
        quiet=args.quiet,
    )


_CONFIG_BUILDERS = {
    Command.MIGRATE: _build_migrate_config,
    Command.UPDATE: _build_update_config,
    Command.FETCH_SVN_AUTHORS: _build_authors_config,
}


def parse_arguments(argv: Optional[List[str]] = None) -> Config:
    """Parse command line arguments and return configuration object."""
    parser = _create_argument_parser()
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True
    _add_migrate_command(subparsers)
    _add_update_command(subparsers)
    _add_authors_command(subparsers)

    args = parser.parse_args(argv)
    command = Command(args.command)

    try:
        runner = _validate_runner_arguments(args)
        settings = _CONFIG_BUILDERS[command](args)
    except ValueError as e:
        Logger.security_event(
            "CONFIG_VALIDATION_FAILED", f"configuration validation failed: {e}"
        )
        Logger.error(f"configuration validation error: {e}")
        sys.exit(EXIT_MISSING_ARGUMENTS)

    return Config(command=command, settings=settings, runner=runner)
