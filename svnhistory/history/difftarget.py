# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

"""
Figure out what to diff when the user clicks a changed path in a commit.
"""

from __future__ import annotations

import dataclasses
import logging
import os

from svnhistory.exceptions import AmbiguousDiffTarget, NotAFile
from svnhistory.history.logcache import GENESIS, CacheEntry
from svnhistory.localization import *
from svnhistory.svndriver import CommitRecord, NodeKind, PathAction, PathChange, normalizeRepoPath
from svnhistory.svnri import PathNormalizer, ResourceKind, SvnRI

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class DiffRequest:
    """ Ask the host editor to diff `fromPath@fromRevision` against `toPath@toRevision`. """
    fromPath: str
    fromRevision: str
    toPath: str
    toRevision: str


@dataclasses.dataclass(frozen=True)
class OpenRequest:
    """ Ask the host editor to open a file as it was in a given revision. """
    remotePath: str
    revision: str


def checkIfFile(ri: SvnRI, change: PathChange | None = None, local: bool = False) -> str:
    """
    Reject directories and, if `local` is set, paths that aren't
    materialized in the working copy. Return the local path if `local`.
    """
    if change is not None and change.kind == NodeKind.Dir:
        raise NotAFile(_("This target is not a file"))

    if not local:
        return ""

    localPath = ri.localFullPath
    if localPath is None:
        raise NotAFile(_("Specified path belongs to remote repository"))
    if not os.path.isfile(localPath):
        raise NotAFile(_("This target is not a file"))
    return localPath


def _positionOf(entry: CacheEntry, commit: CommitRecord) -> int:
    for i, c in enumerate(entry.entries):
        if c is commit:
            return i
    return entry.findRevision(commit.revision)


def findPreviousCommit(
        entry: CacheEntry,
        commit: CommitRecord,
        path: str,
        normalizer: PathNormalizer
) -> tuple[CommitRecord, str]:
    """
    Find the most recent commit older than `commit` that touched `path`.

    Return that commit and the repository path of the file as of that
    commit (which differs from `path` if the file was copied or renamed in
    `commit`).

    The cached log is searched first. If the cache doesn't go back far
    enough, ask the backend for the last two revisions of the path.

    Raises AmbiguousDiffTarget if there's no previous version of the file,
    or if the only candidate is an unrelated file that used to live at the
    same path.
    """

    path = normalizeRepoPath(path)
    change = commit.changeFor(path)

    # Lineage check: an added/replaced node has no history at this path.
    if change is not None and change.isNewNode:
        if not change.isCopy:
            raise AmbiguousDiffTarget(_("{0} was created in r{1}; there’s no previous version to compare it to.",
                                        path, commit.revision))
        return _followCopy(entry, change, normalizer)

    # Look in the cache
    pos = _positionOf(entry, commit)
    if pos >= 0:
        for older in entry.entries[pos + 1:]:
            olderChange = older.changeFor(path)
            if olderChange is None:
                continue
            if olderChange.action == PathAction.Deleted:
                raise AmbiguousDiffTarget(_("{0} was deleted in r{1}; the file in r{2} is unrelated.",
                                            path, older.revision, commit.revision))
            logger.debug(f"Previous commit for {path}@{commit.revision} found in cache: r{older.revision}")
            return older, path

    # Not in cache; the path's own history may be much sparser than the target's.
    url = normalizer.parse(path, ResourceKind.FromRepoRoot).remoteFullPath
    revs = entry.backend.log(commit.revision, GENESIS, 2, f"{url}@{commit.revision}")
    if len(revs) == 2:
        logger.debug(f"Previous commit for {path}@{commit.revision} found by backend: r{revs[1].revision}")
        return revs[1], path

    raise AmbiguousDiffTarget(_("Cannot find previous commit"))


def _followCopy(entry: CacheEntry, change: PathChange, normalizer: PathNormalizer) -> tuple[CommitRecord, str]:
    copyPath = normalizeRepoPath(change.copyFromPath)
    url = normalizer.parse(copyPath, ResourceKind.FromRepoRoot).remoteFullPath
    revs = entry.backend.log(change.copyFromRevision, GENESIS, 1, f"{url}@{change.copyFromRevision}")
    if not revs:
        raise AmbiguousDiffTarget(_("Cannot find previous commit"))
    return revs[0], copyPath


def resolveDiffTarget(
        entry: CacheEntry,
        commit: CommitRecord,
        change: PathChange,
        normalizer: PathNormalizer
) -> DiffRequest:
    ri = normalizer.parse(change.path, ResourceKind.FromRepoRoot)
    checkIfFile(ri, change)

    if change.action == PathAction.Deleted:
        raise AmbiguousDiffTarget(_("{0} was deleted in r{1}.", ri.remotePath, commit.revision))

    previous, previousPath = findPreviousCommit(entry, commit, ri.remotePath, normalizer)
    fromUrl = normalizer.parse(previousPath, ResourceKind.FromRepoRoot).remoteFullPath
    return DiffRequest(fromUrl, previous.revision, ri.remoteFullPath, commit.revision)


def similarityScore(pathA: str, pathB: str) -> int:
    """ Number of matching trailing path components (filename, parent dir...). """
    componentsA = pathA.rstrip("/").split("/")
    componentsB = pathB.rstrip("/").split("/")
    score = 0
    for a, b in zip(reversed(componentsA), reversed(componentsB)):
        if a != b:
            break
        score += 1
    return score


def findSimilarPath(wcRemotePath: str, commit: CommitRecord) -> str:
    """
    Pick the path in `commit` that most likely is the file we're tracking,
    even if the commit lists it under another branch or after a rename.
    Ties go to the first path.
    """
    if not commit.paths:
        raise ValueError(f"Commit {commit.revision} doesn't contain paths")

    bestPath = commit.paths[0].path
    bestScore = 0
    for change in commit.paths:
        score = similarityScore(change.path, wcRemotePath)
        if score > bestScore:
            bestScore = score
            bestPath = change.path
    return bestPath
