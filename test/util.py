# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import os
import shutil
import tempfile
from collections.abc import Callable

import pytest

from svnhistory.exceptions import BackendUnavailable
from svnhistory.model import Model
from svnhistory.svndriver import *
from svnhistory.svnri import PathNormalizer, isUrl
from . import *

REPO_ROOT = "svn://example.com/repo"

requiresSvn = pytest.mark.skipif(
    not shutil.which("svn") or not shutil.which("svnadmin"),
    reason="Requires svn and svnadmin")


def change(path: str, action: str = "M", kind: str = "file", copyFrom: str = "", copyRev: str = "") -> PathChange:
    return PathChange(path, PathAction(action), NodeKind(kind), copyFrom, copyRev)


def commit(rev: int | str, message: str = "", *paths: PathChange, author: str = "alice", fromMerge=False) -> CommitRecord:
    return CommitRecord(
        revision=str(rev),
        author=author,
        date="2025-01-02T03:04:05.000000Z",
        message=message or f"Commit {rev}",
        paths=tuple(paths),
        fromMerge=fromMerge)


def revs(commits: list[CommitRecord]) -> list[int]:
    return [c.revisionNumber for c in commits]


def blameLines(layout: str) -> list[BlameLine]:
    """
    Make blame lines from a space-separated layout, one token per line.
    A number is a revision; a dash is an uncommitted line.
    """
    lines = []
    for i, token in enumerate(layout.split()):
        lineCommit = None
        if token != "-":
            lineCommit = BlameCommit(token, f"author{token}", "2025-01-02T03:04:05.000000Z")
        lines.append(BlameLine(i + 1, lineCommit))
    return lines


class FakeSvnBackend:
    """
    Stands in for SvnDriver. Serves `svn log` out of a canned history (newest
    first) or out of scripted pages, and records every call it receives.
    """

    def __init__(
            self,
            history: list[CommitRecord] = (),
            pages: list[list[CommitRecord]] | None = None,
            directory: str = "",
            branchUrl: str = REPO_ROOT + "/trunk",
            baseRevision: int = 0,
    ):
        self.history = list(history)
        self.pages = None if pages is None else list(pages)
        self.directory = os.path.normpath(directory) if directory else ""
        self.branchUrl = branchUrl
        self.baseRevision = baseRevision
        self.infos: dict[str, SvnInfo | Exception] = {}
        self.blameResult: list[BlameLine] | Exception = []
        self.failure: Exception | None = None
        self.onLog: Callable[[], None] | None = None
        self.calls: list[tuple] = []
        self.mergeInfoRequests: list[bool] = []

    def __repr__(self):
        return f"FakeSvnBackend({self.directory or self.branchUrl!r})"

    @property
    def isRemote(self) -> bool:
        return not self.directory

    @property
    def logCalls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "log"]

    def log(self, rfrom: str, rto: str, limit: int | None = None, target: str = "", mergeInfo: bool = False):
        self.calls.append(("log", rfrom, rto, limit, target))
        self.mergeInfoRequests.append(mergeInfo)

        if self.onLog is not None:
            callback, self.onLog = self.onLog, None
            callback()

        if self.failure is not None:
            raise self.failure

        if self.pages is not None:
            return self.pages.pop(0) if self.pages else []

        head = max((c.revisionNumber for c in self.history), default=0)
        a = head if rfrom == "HEAD" else int(rfrom)
        b = head if rto == "HEAD" else int(rto)
        lo, hi = min(a, b), max(a, b)

        repoPath = self._repoPath(target)
        result = []
        count = 0
        for c in sorted(self.history, key=lambda c: c.revisionNumber, reverse=a >= b):
            if not lo <= c.revisionNumber <= hi or not self._touches(c, repoPath):
                continue
            if limit is not None and count >= limit:
                break
            result.append(c)
            count += 1
        return result

    def _repoPath(self, target: str) -> str:
        target = target.rsplit("@", 1)[0] if "@" in target.removeprefix("svn://") else target
        if isUrl(target) and target.startswith(REPO_ROOT):
            return target[len(REPO_ROOT):] or "/"
        return "/"

    @staticmethod
    def _touches(c: CommitRecord, repoPath: str) -> bool:
        if repoPath == "/" or not c.paths:
            return True
        return any(p.path == repoPath or p.path.startswith(repoPath + "/") for p in c.paths)

    def blame(self, target: str, mergeInfo: bool = False) -> list[BlameLine]:
        self.calls.append(("blame", target, mergeInfo))
        if isinstance(self.blameResult, Exception):
            raise self.blameResult
        return self.blameResult

    def info(self, target: str = "", revision: str = "") -> SvnInfo:
        self.calls.append(("info", target, revision))

        known = self.infos.get(target, None)
        if isinstance(known, Exception):
            raise known
        if known is not None:
            return known

        url = self.branchUrl
        if target and not isUrl(target) and self.directory:
            rel = os.path.relpath(os.path.normpath(target), self.directory)
            if rel.startswith(os.pardir):
                raise BackendUnavailable(f"'{target}' is not a working copy")
            if rel != os.curdir:
                url += "/" + rel.replace(os.sep, "/")
        elif isUrl(target):
            url = target

        return SvnInfo(
            url=url,
            revision=revision if revision.isdigit() else str(self.baseRevision),
            repositoryRoot=REPO_ROOT,
            kind=NodeKind.File if os.path.isfile(target) else NodeKind.Dir,
            workingCopyRoot=self.directory)

    def getPathNormalizer(self) -> PathNormalizer:
        return PathNormalizer(REPO_ROOT, self.branchUrl, self.directory or None)


def makeWorkingCopy(tempDir: tempfile.TemporaryDirectory | str, name: str, files: dict[str, str] | None = None) -> str:
    """ Lay out a directory that looks like an svn checkout. """
    tempDirPath = tempDir if isinstance(tempDir, str) else tempDir.name
    path = os.path.realpath(os.path.join(tempDirPath, name))
    os.makedirs(os.path.join(path, ".svn"))
    for relPath, contents in (files or {}).items():
        fullPath = os.path.join(path, relPath)
        os.makedirs(os.path.dirname(fullPath), exist_ok=True)
        with open(fullPath, "w", encoding="utf-8") as f:
            f.write(contents)
    return path


def makeModel(backends: dict[str, FakeSvnBackend], remote: FakeSvnBackend | None = None) -> Model:
    """ Model whose drivers are fakes, looked up by working copy root. Remote lookups get `remote`. """
    remotes = {}

    def factory(directory: str = "", remoteRoot: str = ""):
        if directory:
            return backends[os.path.normpath(directory)]
        if remote is not None:
            return remote
        return remotes.setdefault(remoteRoot, FakeSvnBackend(branchUrl=remoteRoot))

    return Model(driverFactory=factory)
