#!/usr/bin/env python3
"""Exception classes for au-revoir-svn."""

from __future__ import annotations

from typing import List, Optional, Sequence


class MigrationError(Exception):
    """Base exception for all au-revoir-svn errors."""


class ExecutionError(MigrationError):
    """An external command failed while exit codes were trusted.

    Also raised when the command timed out or its executable was not found.
    """

    def __init__(
        self,
        command: str,
        exit_code: int,
        output: Optional[Sequence[str]] = None,
        *,
        timed_out: bool = False,
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        self.output: List[str] = list(output or [])
        self.timed_out = timed_out
        if timed_out:
            summary = f"command timed out: '{command}'"
        else:
            summary = f"error executing '{command}' ({exit_code})"
        if self.output:
            summary += ":\n" + "\n".join(self.output)
        super().__init__(summary)


class InvalidArgumentError(MigrationError):
    """A supplied path or value does not have the structure the command needs."""
