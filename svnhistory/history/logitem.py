# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import dataclasses
import enum

from svnhistory.svndriver import CommitRecord, PathChange


class LogItemKind(enum.IntEnum):
    Repo = 1
    Commit = 2
    CommitDetail = 3
    Action = 4


@dataclasses.dataclass(frozen=True)
class ActionData:
    label: str
    tooltip: str = ""
    iconName: str = ""
    command: str = ""
    "Name of the provider method to call when the item is activated (blank: inert)."


@dataclasses.dataclass(frozen=True)
class LogItem:
    """
    Node in a history tree, as plain data.

    `kind` tells what `data` holds:
    - Repo: the target string (key in the LogCache)
    - Commit: a CommitRecord
    - CommitDetail: a PathChange
    - Action: an ActionData ("load more" button, BASE marker...)

    Items don't own their parents. `target` is the key of the cache entry the
    item belongs to, and `revision` is the revision of the enclosing commit
    (CommitDetail items only); look them up in the cache when needed.
    """

    kind: LogItemKind
    data: str | CommitRecord | PathChange | ActionData
    target: str = ""
    revision: str = ""

    @property
    def commit(self) -> CommitRecord:
        assert self.kind == LogItemKind.Commit
        assert isinstance(self.data, CommitRecord)
        return self.data

    @property
    def pathChange(self) -> PathChange:
        assert self.kind == LogItemKind.CommitDetail
        assert isinstance(self.data, PathChange)
        return self.data

    @property
    def action(self) -> ActionData:
        assert self.kind == LogItemKind.Action
        assert isinstance(self.data, ActionData)
        return self.data

    @staticmethod
    def repo(target: str) -> LogItem:
        return LogItem(LogItemKind.Repo, target, target=target)

    @staticmethod
    def forCommits(commits: list[CommitRecord], target: str) -> list[LogItem]:
        return [LogItem(LogItemKind.Commit, c, target=target) for c in commits]

    @staticmethod
    def forPaths(commit: CommitRecord, target: str) -> list[LogItem]:
        return [LogItem(LogItemKind.CommitDetail, p, target=target, revision=commit.revision) for p in commit.paths]


@dataclasses.dataclass(frozen=True)
class ItemPresentation:
    """ What the host tree view needs to render a LogItem. """
    label: str
    tooltip: str = ""
    description: str = ""
    iconName: str = ""
    contextValue: str = ""
    collapsible: bool = False
    expanded: bool = False
    command: str = ""
