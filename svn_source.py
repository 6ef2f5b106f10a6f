#!/usr/bin/env python3
"""Subversion log reader for building git svn authors files."""

from __future__ import annotations

import re
from typing import Iterable, List

from logging_utils import Logger
from process_runner import ProcessRunner

# "r42 | alice | 2014-01-01 12:00:00 +0100 (Wed, 01 Jan 2014) | 1 line"
LOG_ENTRY_PATTERN = re.compile(r"^r\d+\s*\|([^|]*)\|")


def parse_log_authors(lines: Iterable[str]) -> List[str]:
    """Return the unique authors of `svn log` entry headers, sorted."""
    authors = set()
    for line in lines:
        match = LOG_ENTRY_PATTERN.match(line)
        if not match:
            continue
        author = match.group(1).strip()
        if author:
            authors.add(author)
    return sorted(authors)


def format_authors(authors: Iterable[str]) -> List[str]:
    """Render authors as git svn authors-file lines."""
    return [f"{author} = {author} <{author}>" for author in authors]


class SvnSource:
    """Wrapper around the svn command line client."""

    def __init__(self, runner: ProcessRunner) -> None:
        self.runner = runner

    def log(self, url: str, quiet: bool = False) -> List[str]:
        args = ["svn", "log"]
        if quiet:
            args.append("--quiet")
        args.append(url)
        return self.runner.run(args)

    def fetch_authors(self, url: str, quiet: bool = False) -> List[str]:
        Logger.info(f"reading subversion log: {url}")
        authors = parse_log_authors(self.log(url, quiet=quiet))
        Logger.info(f"found {len(authors)} authors")
        return authors
