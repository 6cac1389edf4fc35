# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import os
import posixpath

from svnhistory import settings
from svnhistory.exceptions import BackendUnavailable, InvalidTarget
from svnhistory.history.common import *
from svnhistory.history.difftarget import DiffRequest, OpenRequest, checkIfFile, resolveDiffTarget
from svnhistory.history.logcache import HEAD, CacheEntry, LogCache, Persisted
from svnhistory.history.logitem import ItemPresentation, LogItem, LogItemKind
from svnhistory.localization import *
from svnhistory.model import Model
from svnhistory.qt import *
from svnhistory.svndriver import CommitRecord
from svnhistory.svnri import ResourceKind, isUrl

logger = logging.getLogger(__name__)


def resolveRepoLike(repoLike: str, workspaceFolders: list[str]) -> str:
    """
    Turn a relative path typed in by the user into an absolute path, by
    looking for it in the workspace folders. URLs, ^/ paths and absolute
    paths are returned as is.
    """
    if os.path.isabs(repoLike) or repoLike.startswith("^") or isUrl(repoLike):
        return repoLike

    for folder in workspaceFolders:
        joined = os.path.join(folder, repoLike)
        if os.path.exists(joined):
            return joined

    return repoLike


class RepoLog(QObject):
    """
    Repository log: one root per working copy found in the workspace, plus
    any repositories or paths that the user adds by hand.
    """

    changed = Signal(object)

    model: Model
    cache: LogCache
    gravatars: GravatarCache

    def __init__(self, model: Model, parent=None):
        super().__init__(parent)
        self.model = model
        self.cache = LogCache(self)
        self.gravatars = GravatarCache()
        self.cache.changed.connect(self.changed)
        self.model.repositoriesChanged.connect(self.refresh)
        self.refresh()

    # -------------------------------------------------------------------------
    # Lookups

    def entryFor(self, item: LogItem) -> CacheEntry:
        entry = self.cache.get(item.target)
        if entry is None:
            raise InvalidTarget(_("{0} is no longer in the repository log", item.target))
        return entry

    def commitFor(self, item: LogItem) -> CommitRecord:
        if item.kind == LogItemKind.Commit:
            return item.commit
        assert item.kind == LogItemKind.CommitDetail
        entry = self.entryFor(item)
        commit = entry.findCommit(item.revision)
        if commit is None:
            raise InvalidTarget(_("r{0} is no longer in the log of {1}; refresh the view.", item.revision, item.target))
        return commit

    # -------------------------------------------------------------------------
    # Refresh

    def refresh(self):
        """ Forget all auto-discovered targets and rediscover them from the model. """
        previousState = {e.target: e.persisted for e in self.cache.sortedEntries() if not e.persisted.userAdded}
        self.cache.removeAutoDiscovered()

        for wc in self.model.repositories:
            target = wc.branchRoot
            existing = self.cache.get(target)
            if existing is not None:
                logger.debug(f"{target} is already tracked by hand")
                continue

            persisted = previousState.get(target, None)
            if persisted is None:
                persisted = Persisted(commitFrom=HEAD, baseRevision=wc.baseRevision)

            entry = CacheEntry(target, wc.driver, persisted, order=len(self.cache))
            self.cache.put(entry, notify=False)

        self.cache.changed.emit(None)

    def refreshEntry(self, target: str):
        self.cache.reset(target)

    def loadMore(self, target: str) -> bool:
        return self.cache.fetchMore(target)

    # -------------------------------------------------------------------------
    # User-added targets

    def addRepolike(self, repoLike: str, rev: str = HEAD) -> CacheEntry:
        rev = rev or HEAD
        repoLike = resolveRepoLike(repoLike, self.model.workspaceFolders)

        if repoLike in self.cache:
            raise InvalidTarget(_("This path is already added"))

        wc = self.model.getRepository(repoLike) if not repoLike.startswith("^") else None
        baseRevision = None

        if wc is None:
            if repoLike.startswith("^"):
                wsRepo = None
                if self.model.workspaceFolders:
                    wsRepo = self.model.getRepository(self.model.workspaceFolders[0])
                if wsRepo is None:
                    raise InvalidTarget(_("No repository in workspace root"))
                try:
                    url = wsRepo.driver.info(repoLike).url
                except BackendUnavailable as exc:
                    raise InvalidTarget(_("Failed to add repo: {0}", exc)) from exc
            elif isUrl(repoLike):
                url = repoLike
            else:
                raise InvalidTarget(_("Failed to add repo: {0} is neither a URL nor a working copy", repoLike))

            if rev != HEAD and not rev.isdigit():
                raise InvalidTarget(_("Failed to add repo: erroneous revision"))

            backend = self.model.getRemoteRepository(url)
            target = url
        else:
            try:
                info = wc.driver.info(repoLike, rev)
            except BackendUnavailable as exc:
                raise InvalidTarget(_("Failed to resolve svn path")) from exc
            backend = wc.driver
            target = info.url
            baseRevision = int(info.revision, 10) if info.revision.isdigit() else None

        if target in self.cache:
            raise InvalidTarget(_("Repository with this name already exists"))

        persisted = Persisted(commitFrom=rev, baseRevision=baseRevision, userAdded=True)
        entry = CacheEntry(target, backend, persisted, order=len(self.cache))
        self.cache.put(entry)
        logger.info(f"Added {target} since {rev}")
        return entry

    def removeRepo(self, target: str):
        self.cache.remove(target)

    # -------------------------------------------------------------------------
    # Tree

    def children(self, item: LogItem | None = None) -> list[LogItem]:
        if item is None:
            return [LogItem.repo(target) for target in self.cache.targets()]

        if item.kind == LogItemKind.Repo:
            limit = settings.prefs.pageSize()
            entry = self.entryFor(item)
            if not entry.entries:
                self.cache.fetchMore(entry.target)
                entry = self.entryFor(item)
            return commitItems(entry, limit)

        if item.kind == LogItemKind.Commit:
            return LogItem.forPaths(item.commit, item.target)

        return []

    def describe(self, item: LogItem) -> ItemPresentation:
        if item.kind == LogItemKind.Repo:
            entry = self.entryFor(item)
            label = item.target
            if entry.persisted.userAdded:
                label = "∘ " + label
            return ItemPresentation(
                label=label,
                tooltip=_("{0} since {1}", item.target, entry.persisted.commitFrom or HEAD),
                iconName="icon-repo" if entry.backend.isRemote else "folder",
                contextValue="userrepo" if entry.persisted.userAdded else "repo",
                collapsible=True)

        if item.kind == LogItemKind.Commit:
            commit = item.commit
            return ItemPresentation(
                label=commitLabel(commit),
                tooltip=commitToolTip(commit),
                iconName=self.gravatars.iconFor(commit.author),
                contextValue="commit",
                collapsible=True)

        if item.kind == LogItemKind.CommitDetail:
            change = item.pathChange
            entry = self.entryFor(item)
            ri = entry.backend.getPathNormalizer().parse(change.path, ResourceKind.FromRepoRoot)
            return ItemPresentation(
                label=posixpath.basename(change.path),
                tooltip=ri.relativeFromBranch,
                iconName=actionIconName(change.action),
                contextValue="diffable",
                command="openDiff")

        action = item.action
        return ItemPresentation(
            label=action.label,
            tooltip=action.tooltip,
            iconName=action.iconName,
            command=action.command)

    # -------------------------------------------------------------------------
    # Commands on commit details

    def openDiff(self, item: LogItem) -> DiffRequest:
        entry = self.entryFor(item)
        commit = self.commitFor(item)
        normalizer = entry.backend.getPathNormalizer()
        return resolveDiffTarget(entry, commit, item.pathChange, normalizer)

    def openFileRemote(self, item: LogItem) -> OpenRequest:
        entry = self.entryFor(item)
        commit = self.commitFor(item)
        change = item.pathChange
        ri = entry.backend.getPathNormalizer().parse(change.path, ResourceKind.FromRepoRoot)
        checkIfFile(ri, change)
        return OpenRequest(ri.remoteFullPath, commit.revision)

    def openFileLocal(self, item: LogItem) -> str:
        entry = self.entryFor(item)
        change = item.pathChange
        ri = entry.backend.getPathNormalizer().parse(change.path, ResourceKind.FromRepoRoot)
        return checkIfFile(ri, change, local=True)
