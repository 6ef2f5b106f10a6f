#!/usr/bin/env python3
"""Utility functions for au-revoir-svn."""

import os
import re
import sys
from typing import Callable, Optional, TextIO

YES_ANSWERS = ("y", "yes")
NO_ANSWERS = ("n", "no")


def sanitize_repo_name(name: str) -> str:
    """Sanitize a string to a safe directory name."""
    name = re.sub(r"[^A-Za-z0-9._-]+", "-", name)
    name = re.sub(r"-+", "-", name).strip("-.")
    return name or "repo"


def derive_repo_name(source: str) -> str:
    """Derive the bridge directory name from a Subversion URL.

    Example: 'https://svn.example.org/repos/project/' -> 'project'
    """
    return sanitize_repo_name(os.path.basename(source.rstrip("/")))


def default_bridge_path(source: str, base_dir: Optional[str] = None) -> str:
    """Default bridge location: <base_dir>/tmp/<repo-name>."""
    base = base_dir or os.getcwd()
    return os.path.join(base, "tmp", derive_repo_name(source))


def confirm(
    question: str,
    default: bool = True,
    *,
    input_func: Callable[[str], str] = input,
    stdin: Optional[TextIO] = None,
) -> bool:
    """Ask a yes/no question; an empty answer or a non-interactive stdin yields default."""
    stream = stdin if stdin is not None else sys.stdin
    if stream is None or not stream.isatty():
        return default

    suffix = " [Y/n] " if default else " [y/N] "
    while True:
        try:
            answer = input_func(question + suffix).strip().lower()
        except EOFError:
            return default
        if not answer:
            return default
        if answer in YES_ANSWERS:
            return True
        if answer in NO_ANSWERS:
            return False
