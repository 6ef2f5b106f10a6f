"""Tests for Subversion author extraction."""

from __future__ import annotations

from unittest.mock import MagicMock

from svn_source import SvnSource, format_authors, parse_log_authors


def test_authors_extracted_sorted_and_formatted() -> None:
    """Two log entries give two sorted authors-file lines."""
    lines = [
        'r1 | alice | 2014-01-01 ...',
        'r2 | bob | 2014-01-02 ...',
    ]
    assert format_authors(parse_log_authors(lines)) == [
        'alice = alice <alice>',
        'bob = bob <bob>',
    ]


def test_message_lines_are_not_mistaken_for_entries() -> None:
    """Only revision headers contribute authors."""
    lines = [
        'r10 | carol | 2014-01-03 ... | 2 lines',
        '',
        'refactor parser | split module',
        'r9 | carol | 2014-01-02 ... | 1 line',
    ]
    assert parse_log_authors(lines) == ['carol']


def test_quiet_flag_is_passed_to_svn_log() -> None:
    """--quiet is forwarded to svn log."""
    runner = MagicMock()
    runner.run.return_value = ['r1 | dave | 2014-01-01']

    authors = SvnSource(runner).fetch_authors('svn://svn.example.org/repo', quiet=True)

    assert authors == ['dave']
    runner.run.assert_called_once_with(
        ['svn', 'log', '--quiet', 'svn://svn.example.org/repo']
    )
