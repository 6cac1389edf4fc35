# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

"""
Lazily paginated revision logs, one per tracked target.

A CacheEntry accumulates commits newest-first, one page at a time. Each call
to fetchMore() continues strictly backward from the oldest commit seen so
far, so already-fetched revisions are never requested again.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from svnhistory import settings
from svnhistory.appconsts import *
from svnhistory.exceptions import BackendUnavailable
from svnhistory.qt import *
from svnhistory.svndriver import CommitRecord
from svnhistory.toolbox.benchmark import Benchmark

logger = logging.getLogger(__name__)

HEAD = "HEAD"
GENESIS = "1"


@dataclasses.dataclass
class Persisted:
    """ State that survives a refresh cycle. """

    commitFrom: str = HEAD
    "Symbolic 'HEAD' or an explicit revision to start the log from."

    baseRevision: int | None = None
    "Working copy's base revision at discovery time."

    userAdded: bool = False
    "Added by hand (as opposed to auto-discovered in the workspace)."


@dataclasses.dataclass(eq=False)
class CacheEntry:
    target: str
    "URL (or path) whose history is being paged in."

    backend: Any
    "Object with a `log(rfrom, rto, limit, target, mergeInfo)` method, typically an SvnDriver."

    persisted: Persisted = dataclasses.field(default_factory=Persisted)

    order: int = 0
    "Stable display order tie-break."

    entries: list[CommitRecord] = dataclasses.field(default_factory=list)
    "Fetched commits, newest first, no duplicate revisions."

    isComplete: bool = False
    "True once the backend has signaled that there are no older commits."

    busy: bool = False
    "A fetch is in flight for this entry."

    discarded: bool = False
    "The entry was dropped from its cache; late pages must not be applied."

    def __repr__(self):
        return (f"CacheEntry({self.target!r}, {len(self.entries)} entries, "
                f"{'complete' if self.isComplete else 'incomplete'})")

    def directEntries(self) -> list[CommitRecord]:
        return [c for c in self.entries if not c.fromMerge]

    def oldestDirect(self) -> CommitRecord | None:
        for commit in reversed(self.entries):
            if not commit.fromMerge:
                return commit
        return None

    def findRevision(self, revision: str) -> int:
        """ Position of a direct commit in `entries`, or -1. """
        for i, commit in enumerate(self.entries):
            if commit.revision == revision and not commit.fromMerge:
                return i
        return -1

    def findCommit(self, revision: str) -> CommitRecord | None:
        """ Any cached commit with this revision, including merged ones. """
        for commit in self.entries:
            if commit.revision == revision:
                return commit
        return None

    def freshCopy(self) -> CacheEntry:
        """ Blank entry for the same target, keeping the persisted state. """
        return CacheEntry(target=self.target, backend=self.backend, persisted=self.persisted, order=self.order)


def needFetch(cached: list[CommitRecord], fetched: list[CommitRecord], limit: int) -> bool:
    """
    Return False if the log is now complete, i.e. there's no point in
    fetching another page after appending `fetched` to `cached`.

    Both lists must only contain direct (non-merge) commits.
    """
    if cached and cached[-1].revision == GENESIS:
        return False
    if not fetched or fetched[-1].revision == GENESIS:
        return False
    if len(fetched) < limit:
        return False
    return True


def nextRevisionFrom(entry: CacheEntry) -> str:
    oldest = entry.oldestDirect()
    if oldest is None:
        return entry.persisted.commitFrom or HEAD
    return str(oldest.revisionNumber - 1)


def _appendPage(entry: CacheEntry, page: list[CommitRecord]):
    seen = {c.revision: c for c in entry.entries}
    oldest = entry.oldestDirect()
    floor = oldest.revisionNumber if oldest is not None else None

    for commit in page:
        previous = seen.get(commit.revision)

        if commit.fromMerge:
            if previous is None:
                entry.entries.append(commit)
                seen[commit.revision] = commit
            continue

        if floor is not None and commit.revisionNumber >= floor:
            logger.warning(f"{entry.target}: r{commit.revision} out of order (expected below r{floor}), skipping")
            continue

        if previous is not None:
            # A merge sub-entry got here first; the direct commit takes precedence.
            assert previous.fromMerge
            entry.entries.remove(previous)

        entry.entries.append(commit)
        seen[commit.revision] = commit
        floor = commit.revisionNumber


def fetchMore(entry: CacheEntry, limit: int = 0) -> bool:
    """
    Fetch the next page of history for `entry` and append it.

    Return True if the entry was modified. The call is a no-op (returning
    False) if the entry is already complete, or if another fetch is already
    in flight for the same entry. If the entry gets discarded while the
    backend call is in progress, the page is dropped.

    Merged revisions (`svn log -g`) are requested when the logMergeInfo
    preference is on. They are shown but don't count towards the page size.

    Raises ConfigurationInvalid if the page size preference is bogus.
    Backend failures are not propagated: the target probably didn't exist
    at that point in history, so the log is considered complete.
    """

    if entry.isComplete:
        return False

    if entry.busy:
        logger.debug(f"{entry.target}: fetch already in flight, ignoring")
        return False

    if limit <= 0:
        limit = settings.prefs.pageSize()

    rfrom = nextRevisionFrom(entry)

    entry.busy = True
    try:
        with Benchmark("fetchMore"):
            page = entry.backend.log(rfrom, GENESIS, limit, entry.target, mergeInfo=settings.prefs.logMergeInfo)
    except BackendUnavailable as exc:
        logger.info(f"{entry.target}: no history from r{rfrom} ({exc})")
        page = []
    finally:
        entry.busy = False

    if entry.discarded:
        logger.debug(f"{entry.target}: entry discarded during fetch, dropping {len(page)} commits")
        return False

    directPage = [c for c in page if not c.fromMerge]
    more = needFetch(entry.directEntries(), directPage, limit)

    _appendPage(entry, page)
    entry.isComplete = not more

    if APP_DEBUG:
        revs = [c.revisionNumber for c in entry.directEntries()]
        assert all(a > b for a, b in zip(revs, revs[1:])), f"{entry.target}: direct revisions not strictly decreasing"
        assert len({c.revision for c in entry.entries}) == len(entry.entries), "duplicate revisions"

    return True


class LogCache(QObject):
    """
    Owns one CacheEntry per tracked target.

    Consumers get entries by target and call the mutation entry points
    below; `changed` is emitted with the affected entry (or None when the
    set of targets itself has changed).
    """

    changed = Signal(object)

    _entries: dict[str, CacheEntry]

    def __init__(self, parent=None):
        super().__init__(parent)
        self._entries = {}

    def __len__(self):
        return len(self._entries)

    def __contains__(self, target: str):
        return target in self._entries

    def __getitem__(self, target: str) -> CacheEntry:
        return self._entries[target]

    def get(self, target: str) -> CacheEntry | None:
        return self._entries.get(target, None)

    def targets(self) -> list[str]:
        return [entry.target for entry in self.sortedEntries()]

    def sortedEntries(self) -> list[CacheEntry]:
        """ Auto-discovered entries first, then user-added ones; each group by order. """
        return sorted(self._entries.values(), key=lambda e: (e.persisted.userAdded, e.order))

    def put(self, entry: CacheEntry, notify=True):
        previous = self._entries.get(entry.target, None)
        if previous is not None and previous is not entry:
            previous.discarded = True
        self._entries[entry.target] = entry
        if notify:
            self.changed.emit(None)

    def remove(self, target: str, notify=True):
        entry = self._entries.pop(target)
        entry.discarded = True
        if notify:
            self.changed.emit(None)

    def removeAutoDiscovered(self):
        for target in [t for t, e in self._entries.items() if not e.persisted.userAdded]:
            self.remove(target, notify=False)

    def reset(self, target: str) -> CacheEntry:
        """ Explicit refresh: forget fetched commits, keep persisted state. """
        fresh = self._entries[target].freshCopy()
        self.put(fresh, notify=False)
        self.changed.emit(fresh)
        return fresh

    def fetchMore(self, target: str) -> bool:
        entry = self._entries[target]
        modified = fetchMore(entry)
        if modified and self._entries.get(target) is entry:
            self.changed.emit(entry)
        return modified
