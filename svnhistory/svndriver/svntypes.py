# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import dataclasses
import posixpath
from enum import StrEnum


def normalizeRepoPath(path: str) -> str:
    """ "^/trunk/a.c", "trunk//a.c" and "/trunk/a.c" all become "/trunk/a.c". """
    return posixpath.normpath("/" + path.removeprefix("^").lstrip("/"))


class PathAction(StrEnum):
    Added = "A"
    Deleted = "D"
    Modified = "M"
    Replaced = "R"


class NodeKind(StrEnum):
    File = "file"
    Dir = "dir"
    Unknown = ""


@dataclasses.dataclass(frozen=True)
class PathChange:
    path: str
    "Repository-relative path, with a leading slash (e.g. /trunk/src/main.c)."

    action: PathAction
    kind: NodeKind = NodeKind.Unknown
    copyFromPath: str = ""
    copyFromRevision: str = ""

    @property
    def isCopy(self) -> bool:
        return bool(self.copyFromPath)

    @property
    def isNewNode(self) -> bool:
        """ True if this change brings a node into existence at this path. """
        return self.action in (PathAction.Added, PathAction.Replaced)


@dataclasses.dataclass(frozen=True)
class CommitRecord:
    revision: str
    author: str = ""
    date: str = ""
    message: str = ""
    paths: tuple[PathChange, ...] = ()

    fromMerge: bool = False
    """ Pulled in as a merge-source sub-entry rather than a direct ancestor
    of the target. Doesn't count towards pagination. """

    @property
    def revisionNumber(self) -> int:
        return int(self.revision, 10)

    @property
    def firstLine(self) -> str:
        return self.message.split("\n", 1)[0].rstrip("\r")

    def changeFor(self, path: str) -> PathChange | None:
        """ Find the change to `path` in this commit. Both sides are normalized with normalizeRepoPath. """
        path = normalizeRepoPath(path)
        for change in self.paths:
            if normalizeRepoPath(change.path) == path:
                return change
        return None


@dataclasses.dataclass(frozen=True)
class BlameCommit:
    revision: str
    author: str = ""
    date: str = ""

    @property
    def revisionNumber(self) -> int:
        return int(self.revision, 10)


@dataclasses.dataclass(frozen=True)
class BlameLine:
    lineNumber: int
    "1-based line number, as reported by svn."

    commit: BlameCommit | None = None
    "None for uncommitted local changes."


@dataclasses.dataclass(frozen=True)
class SvnInfo:
    url: str
    revision: str
    repositoryRoot: str = ""
    kind: NodeKind = NodeKind.Unknown
    workingCopyRoot: str = ""
