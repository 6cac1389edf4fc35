# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

"""
Run-length encoding of per-line blame information.

svn blame attributes every line of a file to a revision. Consecutive lines
attributed to the same revision are collapsed into a BlameRange, which is
what the gutter shows and what selection highlighting works on.
"""

from __future__ import annotations

import bisect
import dataclasses
from datetime import datetime

from svnhistory.svndriver import BlameCommit, BlameLine


@dataclasses.dataclass(frozen=True)
class BlameRangeCommit:
    author: str
    date: datetime | None
    revision: int

    @staticmethod
    def fromBlameCommit(commit: BlameCommit) -> BlameRangeCommit:
        try:
            date = datetime.fromisoformat(commit.date)
        except ValueError:
            date = None
        return BlameRangeCommit(commit.author, date, commit.revisionNumber)


@dataclasses.dataclass(frozen=True)
class BlameRange:
    lineStart: int
    "Zero-based, inclusive."

    lineEnd: int
    "Zero-based, exclusive."

    commit: BlameRangeCommit | None = None
    "None for uncommitted local changes."

    def __len__(self):
        return self.lineEnd - self.lineStart

    def __contains__(self, line: int):
        return self.lineStart <= line < self.lineEnd

    @property
    def isCommitted(self) -> bool:
        return self.commit is not None

    @property
    def revision(self) -> int | None:
        return self.commit.revision if self.commit is not None else None

    def sameRun(self, other: BlameRange) -> bool:
        return self.revision == other.revision


def _sameCommit(a: BlameCommit | None, b: BlameCommit | None) -> bool:
    if a is None or b is None:
        return a is None and b is None
    return a.revision == b.revision


def transformBlames(lines: list[BlameLine]) -> list[BlameRange]:
    """
    Collapse consecutive lines that share a revision into BlameRanges.

    The ranges cover [0, len(lines)) without gaps. Uncommitted lines form
    their own runs; they're never merged with a committed neighbor.
    """

    if not lines:
        return []

    ranges = []
    runStart = 0
    runCommit = lines[0].commit

    def closeRun(end: int):
        commit = BlameRangeCommit.fromBlameCommit(runCommit) if runCommit is not None else None
        ranges.append(BlameRange(runStart, end, commit))

    for i, line in enumerate(lines):
        if not _sameCommit(runCommit, line.commit):
            closeRun(i)
            runStart = i
            runCommit = line.commit

    closeRun(len(lines))
    return ranges


def commitRange(ranges: list[BlameRange]) -> tuple[int, int]:
    """
    Lowest and highest revision among committed ranges,
    or (-1, -1) if no range is committed.
    """
    revisions = [r.revision for r in ranges if r.commit is not None]
    if not revisions:
        return -1, -1
    return min(revisions), max(revisions)


def rangeAt(ranges: list[BlameRange], line: int) -> BlameRange | None:
    i = bisect.bisect_right(ranges, line, key=lambda r: r.lineStart) - 1
    if i < 0 or line not in ranges[i]:
        return None
    return ranges[i]


def siblingRanges(ranges: list[BlameRange], line: int) -> list[BlameRange]:
    """ All other ranges attributed to the same revision as `line` (or all other uncommitted ranges). """
    current = rangeAt(ranges, line)
    if current is None:
        return []
    return [r for r in ranges if r is not current and r.sameRun(current)]


def selectionLines(ranges: list[BlameRange], line: int) -> list[int]:
    """ Lines to highlight when the cursor is on `line`. """
    current = rangeAt(ranges, line)
    if current is None:
        return []
    return [n for r in ranges if r.sameRun(current) for n in range(r.lineStart, r.lineEnd)]
