# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import hashlib
from datetime import datetime

from svnhistory import settings
from svnhistory.history.logcache import CacheEntry
from svnhistory.history.logitem import ActionData, LogItem, LogItemKind
from svnhistory.localization import *
from svnhistory.svndriver import CommitRecord, PathAction

_ActionIconTable = {
    PathAction.Added: "status-added",
    PathAction.Deleted: "status-deleted",
    PathAction.Modified: "status-modified",
    PathAction.Replaced: "status-renamed",
}


def actionIconName(action: PathAction) -> str:
    return _ActionIconTable.get(action, "")


def formatDate(isoDate: str) -> str:
    """ Human-readable date, or the raw string if svn gave us something odd. """
    try:
        date = datetime.fromisoformat(isoDate)
    except ValueError:
        return isoDate
    return date.astimezone().strftime("%a %d %b %Y %H:%M:%S %Z").strip()


def commitLabel(commit: CommitRecord) -> str:
    return f"{commit.firstLine} • r{commit.revision}"


def commitDescription(commit: CommitRecord) -> str:
    return f"{commit.author}, {formatDate(commit.date)}"


def commitToolTip(commit: CommitRecord) -> str:
    lines = [
        _("Author: {0}", commit.author),
        formatDate(commit.date),
        _("Revision: {0}", commit.revision),
        _("Message: {0}", commit.message),
    ]
    if commit.fromMerge:
        lines.append(_("(merged revision)"))
    return "\n".join(lines)


def copyCommitField(item: LogItem, what: str) -> str:
    """ Text to put on the clipboard for a commit item ("msg" or "revision"). """
    if item.kind != LogItemKind.Commit:
        return ""
    commit = item.commit
    if what == "msg":
        return commit.message
    elif what == "revision":
        return commit.revision
    raise ValueError(f"unsupported commit field: {what}")


class GravatarCache:
    """
    Author icon lookup. Owned by whichever view shows author icons, so that
    the cache lives and dies with that view.
    """

    DefaultIcon = "icon-commit"

    def __init__(self, size: int = 16):
        self.size = size
        self._urls: dict[str, str] = {}

    def __len__(self):
        return len(self._urls)

    def clear(self):
        self._urls.clear()

    def iconFor(self, author: str) -> str:
        """ Gravatar URL for the author, or a stock icon name if gravatars are off. """
        if not settings.prefs.gravatarsEnabled:
            return GravatarCache.DefaultIcon

        try:
            return self._urls[author]
        except KeyError:
            pass

        digest = hashlib.md5(author.encode("utf-8")).hexdigest()
        url = f"https://www.gravatar.com/avatar/{digest}.jpg?s={self.size}&d=robohash"
        self._urls[author] = url
        return url


def loadMoreItem(target: str, limit: int) -> LogItem:
    data = ActionData(
        label=_n("Load another {n} revision", "Load another {n} revisions", limit),
        tooltip=_("Paging size may be adjusted using log.length setting"),
        iconName="icon-unfold",
        command="loadMore")
    return LogItem(LogItemKind.Action, data, target=target)


def baseMarkerItem(target: str, baseRevision: int) -> LogItem:
    data = ActionData(
        label="BASE",
        tooltip=_("Log entries above do not exist in working copy (base: r{0})", baseRevision))
    return LogItem(LogItemKind.Action, data, target=target)


def insertBaseMarker(entry: CacheEntry, items: list[LogItem]) -> int:
    """
    Splice a BASE marker into a list of commit items, above the newest
    commit that the working copy already has.

    Nothing is inserted unless the newest commit is more recent than the
    working copy's base revision. Return the position of the marker, or -1.
    """
    base = entry.persisted.baseRevision
    if base is None:
        return -1

    commitPositions = [i for i, item in enumerate(items)
                       if item.kind == LogItemKind.Commit and not item.commit.fromMerge]
    if not commitPositions or items[commitPositions[0]].commit.revisionNumber <= base:
        return -1

    position = len(items)
    for i in commitPositions:
        if items[i].commit.revisionNumber <= base:
            position = i
            break

    items.insert(position, baseMarkerItem(entry.target, base))
    return position


def commitItems(entry: CacheEntry, limit: int) -> list[LogItem]:
    """ Commit rows for an entry, with the BASE marker and trailing "load more" action. """
    items = LogItem.forCommits(entry.entries, entry.target)
    insertBaseMarker(entry, items)
    if not entry.isComplete:
        items.append(loadMoreItem(entry.target, limit))
    return items
