#!/usr/bin/env python3
"""Discovery of Subversion branches and tags inside a git-svn bridge."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern

from process_runner import PathLike, ProcessRunner

# [1] => ref name, [2] => revision, [3] => commit message (if any)
BRANCH_LINE_PATTERN = re.compile(r"^\s*svn/(\S+)\s+([a-z0-9]+)(.*)$")
TAG_LINE_PATTERN = re.compile(r"^\s*svn/tags/(\S+)\s+([a-z0-9]+)(.*)$")

TAGS_MARKER = "tags"

LIST_REMOTE_REFS = ["git", "branch", "--no-color", "-rv"]


@dataclass(frozen=True)
class RefDescriptor:
    """A branch or tag found in the bridge's svn/ remote-tracking namespace."""
    name: str
    message: str = ""
    revision: Optional[str] = None


def _parse_lines(lines: Iterable[str], pattern: Pattern[str]) -> List[RefDescriptor]:
    refs: List[RefDescriptor] = []
    for line in lines:
        match = pattern.match(line)
        if not match:
            continue
        refs.append(
            RefDescriptor(
                name=match.group(1),
                message=(match.group(3) or "").strip(),
                revision=match.group(2),
            )
        )
    return refs


def parse_branch_listing(lines: Iterable[str]) -> List[RefDescriptor]:
    """Parse `git branch -rv` output into branches, skipping anything tag-related.

    Lines that do not look like an svn/ ref are ignored.
    """
    return _parse_lines(
        (line for line in lines if TAGS_MARKER not in line), BRANCH_LINE_PATTERN
    )


def parse_tag_listing(lines: Iterable[str]) -> List[RefDescriptor]:
    """Parse `git branch -rv` output into tags with the tags/ segment stripped."""
    return _parse_lines(
        (line for line in lines if TAGS_MARKER in line), TAG_LINE_PATTERN
    )


class RefLister:
    """Lists the branches and tags git svn has fetched into a bridge repository."""

    def __init__(self, runner: ProcessRunner) -> None:
        self.runner = runner

    def list_branches(self, path: PathLike) -> List[RefDescriptor]:
        return parse_branch_listing(self._list_remote_refs(path))

    def list_tags(self, path: PathLike) -> List[RefDescriptor]:
        return parse_tag_listing(self._list_remote_refs(path))

    def _list_remote_refs(self, path: PathLike) -> List[str]:
        return self.runner.run(LIST_REMOTE_REFS, cwd=path)
