# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import os
import posixpath
import urllib.parse

from svnhistory import settings
from svnhistory.exceptions import AmbiguousDiffTarget, BackendUnavailable
from svnhistory.history.common import *
from svnhistory.history.difftarget import DiffRequest, OpenRequest, findSimilarPath
from svnhistory.history.logcache import HEAD, CacheEntry, Persisted, fetchMore
from svnhistory.history.logitem import ActionData, ItemPresentation, LogItem, LogItemKind
from svnhistory.localization import *
from svnhistory.model import Model
from svnhistory.qt import *
from svnhistory.svndriver import CommitRecord

logger = logging.getLogger(__name__)


class ItemLog(QObject):
    """
    History of the file in the active editor.

    Unlike RepoLog, there's only ever one target here; it's replaced
    whenever the user switches to another versioned file.
    """

    changed = Signal(object)

    model: Model
    currentItem: CacheEntry | None
    currentPath: str
    tempDir: str
    gravatars: GravatarCache

    def __init__(self, model: Model, tempDir: str = "", parent=None):
        super().__init__(parent)
        self.model = model
        self.currentItem = None
        self.currentPath = ""
        self.tempDir = os.path.normpath(tempDir) if tempDir else ""
        self.gravatars = GravatarCache()

    def editorChanged(self, localPath: str | None) -> bool:
        """
        Track the history of the file shown in the active editor.
        Return True if the tracked file has changed.
        """
        if not localPath:
            return False

        localPath = os.path.normpath(localPath)
        if self.tempDir and (localPath + os.sep).startswith(self.tempDir + os.sep):
            # Don't lose track of the file when a diff opens a temporary copy
            return False

        wc = self.model.getRepository(localPath)
        if wc is None:
            return False

        try:
            info = wc.driver.info(localPath)
        except BackendUnavailable as exc:
            logger.debug(f"{localPath} isn't versioned in {wc}: {exc}")
            return False

        if self.currentItem is not None:
            self.currentItem.discarded = True

        self.currentPath = localPath
        self.currentItem = CacheEntry(
            target=info.url,
            backend=wc.driver,
            persisted=Persisted(commitFrom=HEAD, baseRevision=int(info.revision) if info.revision.isdigit() else None))
        self.changed.emit(None)
        return True

    def refresh(self) -> bool:
        return self.editorChanged(self.currentPath)

    def loadMore(self) -> bool:
        entry = self.currentItem
        if entry is None:
            return False
        modified = fetchMore(entry)
        if modified and entry is self.currentItem:
            self.changed.emit(entry)
        return modified

    def _entry(self) -> CacheEntry:
        if self.currentItem is None:
            raise LookupError("no file is being tracked")
        return self.currentItem

    # -------------------------------------------------------------------------
    # Tree

    def children(self, item: LogItem | None = None) -> list[LogItem]:
        entry = self.currentItem
        if entry is None:
            return []

        if item is None:
            return [LogItem.repo(entry.target)]

        if item.kind == LogItemKind.Repo:
            limit = settings.prefs.pageSize()
            if not entry.entries:
                fetchMore(entry)
            return commitItems(entry, limit)

        return []

    def describe(self, item: LogItem) -> ItemPresentation:
        entry = self._entry()

        if item.kind == LogItemKind.Repo:
            urlPath = urllib.parse.unquote(urllib.parse.urlsplit(entry.target).path)
            base = entry.persisted.baseRevision
            return ItemPresentation(
                label=posixpath.basename(urlPath),
                tooltip=posixpath.dirname(urlPath),
                description=f"r{base}" if base is not None else "",
                iconName="icon-history",
                collapsible=True,
                expanded=True)

        if item.kind == LogItemKind.Commit:
            commit = item.commit
            tooltip = commitToolTip(commit)
            if commit.paths:
                tooltip += "\n" + _("Path: ^{0}", self.similarPath(commit))
            return ItemPresentation(
                label=commitLabel(commit),
                tooltip=tooltip,
                description=commitDescription(commit),
                iconName=self.gravatars.iconFor(commit.author),
                contextValue="diffable",
                command="openDiff")

        action: ActionData = item.action
        return ItemPresentation(
            label=action.label,
            tooltip=action.tooltip,
            iconName=action.iconName,
            command=action.command)

    def similarPath(self, commit: CommitRecord) -> str:
        entry = self._entry()
        wcRemotePath = urllib.parse.unquote(urllib.parse.urlsplit(entry.target).path)
        return findSimilarPath(wcRemotePath, commit)

    # -------------------------------------------------------------------------
    # Commands on commits

    def openDiff(self, item: LogItem) -> DiffRequest:
        entry = self._entry()
        commit = item.commit

        direct = entry.directEntries()
        try:
            pos = direct.index(commit)
        except ValueError as exc:
            raise AmbiguousDiffTarget(_("Cannot find previous commit")) from exc

        if pos == len(direct) - 1:
            raise AmbiguousDiffTarget(_("Cannot diff last commit"))

        previous = direct[pos + 1]
        return DiffRequest(entry.target, previous.revision, entry.target, commit.revision)

    def openDiffBase(self, item: LogItem) -> DiffRequest:
        entry = self._entry()
        return DiffRequest(entry.target, item.commit.revision, entry.target, "BASE")

    def openFileRemote(self, item: LogItem) -> OpenRequest:
        entry = self._entry()
        return OpenRequest(entry.target, item.commit.revision)
