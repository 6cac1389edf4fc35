# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

"""
Resource identities within a Subversion repository.

Subversion lets users refer to the same node in many ways: a full URL
(svn://host/repo/trunk/a.c), a path relative to the repository root
(^/trunk/a.c, or /trunk/a.c as printed by svn log), or a path in a
working copy. PathNormalizer turns any of these into an SvnRI.
"""

from __future__ import annotations

import dataclasses
import enum
import os
import posixpath
import re

_URL_PATTERN = re.compile(r"^[a-z][a-z0-9+.\-]*://", re.I)


class ResourceKind(enum.IntEnum):
    Auto = 0
    LocalFull = 1
    RemoteFull = 2
    FromRepoRoot = 3


def isUrl(path: str) -> bool:
    return bool(_URL_PATTERN.match(path))


def _stripSlash(url: str) -> str:
    return url.rstrip("/") if url.rstrip("/") else url


def _joinRepoPath(base: str, rel: str) -> str:
    joined = posixpath.normpath(posixpath.join("/", base.strip("/"), rel))
    return joined if joined != "." else "/"


@dataclasses.dataclass(frozen=True)
class SvnRI:
    repoRoot: str
    "Repository root URL, without a trailing slash."

    branchPath: str
    "Repository-relative path of the branch root (e.g. /trunk)."

    fromRepoRoot: str
    "Repository-relative path of the resource, with a leading slash."

    checkoutDir: str | None = None
    "Local directory where the branch root is checked out (if any)."

    @property
    def remotePath(self) -> str:
        return self.fromRepoRoot

    @property
    def remoteFullPath(self) -> str:
        if self.fromRepoRoot == "/":
            return self.repoRoot
        return self.repoRoot + self.fromRepoRoot

    @property
    def isInBranch(self) -> bool:
        branch = self.branchPath.rstrip("/")
        return self.fromRepoRoot == (branch or "/") or self.fromRepoRoot.startswith(branch + "/")

    @property
    def relativeFromBranch(self) -> str:
        if not self.isInBranch:
            return self.fromRepoRoot
        rel = self.fromRepoRoot[len(self.branchPath.rstrip("/")):]
        return rel.lstrip("/")

    @property
    def localFullPath(self) -> str | None:
        """ Path in the working copy, or None if the resource isn't materialized locally. """
        if not self.checkoutDir or not self.isInBranch:
            return None
        rel = self.relativeFromBranch
        if not rel:
            return os.path.normpath(self.checkoutDir)
        return os.path.normpath(os.path.join(self.checkoutDir, *rel.split("/")))

    def __str__(self):
        return self.remoteFullPath


class PathNormalizer:
    def __init__(self, repoRoot: str, branchRoot: str = "", checkoutDir: str | None = None):
        self.repoRoot = _stripSlash(repoRoot)
        branchRoot = _stripSlash(branchRoot or repoRoot)

        if not branchRoot.startswith(self.repoRoot):
            raise ValueError(f"branch root {branchRoot} isn't in repository {self.repoRoot}")
        self.branchPath = branchRoot[len(self.repoRoot):] or "/"

        self.checkoutDir = os.path.normpath(checkoutDir) if checkoutDir else None

    def _make(self, fromRepoRoot: str) -> SvnRI:
        return SvnRI(self.repoRoot, self.branchPath, fromRepoRoot, self.checkoutDir)

    def parse(self, raw: str, kind: ResourceKind = ResourceKind.Auto) -> SvnRI:
        if kind == ResourceKind.Auto:
            kind = self._guessKind(raw)

        if kind == ResourceKind.RemoteFull:
            url = _stripSlash(raw)
            if url != self.repoRoot and not url.startswith(self.repoRoot + "/"):
                raise ValueError(f"{raw} isn't in repository {self.repoRoot}")
            return self._make(url[len(self.repoRoot):] or "/")

        if kind == ResourceKind.FromRepoRoot:
            path = raw.removeprefix("^")
            return self._make(_joinRepoPath("/", path))

        if kind == ResourceKind.LocalFull:
            if not self.checkoutDir:
                raise ValueError(f"no working copy to resolve {raw}")
            rel = os.path.relpath(os.path.normpath(raw), self.checkoutDir)
            if rel == os.pardir or rel.startswith(os.pardir + os.sep):
                raise ValueError(f"{raw} isn't in working copy {self.checkoutDir}")
            rel = "" if rel == os.curdir else rel.replace(os.sep, "/")
            return self._make(_joinRepoPath(self.branchPath, rel))

        raise NotImplementedError(f"unsupported resource kind {kind}")

    def _guessKind(self, raw: str) -> ResourceKind:
        if isUrl(raw):
            return ResourceKind.RemoteFull
        if raw.startswith("^/"):
            return ResourceKind.FromRepoRoot
        if self.checkoutDir and os.path.isabs(raw):
            rel = os.path.relpath(os.path.normpath(raw), self.checkoutDir)
            if not (rel == os.pardir or rel.startswith(os.pardir + os.sep)):
                return ResourceKind.LocalFull
        return ResourceKind.FromRepoRoot
