# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Any

from svnhistory import settings
from svnhistory.blame.blameranges import BlameRange, commitRange, selectionLines, transformBlames
from svnhistory.exceptions import BackendUnavailable, NotAFile
from svnhistory.history.common import GravatarCache
from svnhistory.localization import *
from svnhistory.model import Model
from svnhistory.qt import *
from svnhistory.toolbox.benchmark import Benchmark

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class GutterAnnotation:
    line: int
    "Zero-based line number."

    text: str
    "Commit message on the first line of a range, blank elsewhere."

    iconName: str = ""
    isFirstLine: bool = False


def getRevisionMessages(backend: Any, rmin: int, rmax: int, target: str) -> dict[int, str]:
    """ Commit messages for all revisions in [rmin, rmax] that touched `target`, in a single log call. """
    if rmin == -1 and rmax == -1:
        return {}

    messages = {}
    for commit in backend.log(str(rmin), str(rmax), None, target):
        messages[commit.revisionNumber] = commit.message
    return messages


class GutterBlame(QObject):
    """
    Blame annotations for one file.

    The host editor calls decorate() once, paints the returned annotations
    in its gutter, then forwards cursor moves to onSelectionChanged().
    """

    selectionHighlightChanged = Signal(list)

    localPath: str
    backend: Any
    blames: list[BlameRange]
    messages: dict[int, str]

    def __init__(self, localPath: str, backend: Any, parent=None):
        super().__init__(parent)
        self.localPath = localPath
        self.backend = backend
        self.blames = []
        self.messages = {}
        self.gravatars = GravatarCache()

    def decorate(self) -> list[GutterAnnotation]:
        if not self.blames:
            mergeInfo = settings.prefs.blameMergeInfo
            try:
                with Benchmark("Blame"):
                    svnBlames = self.backend.blame(self.localPath, mergeInfo)
            except BackendUnavailable as exc:
                logger.warning(f"blame: {exc}")
                raise BackendUnavailable(_("Failed to get blame for this file"), exc.command, exc.stderr) from exc

            if not svnBlames:
                return []

            blames = transformBlames(svnBlames)
            rmin, rmax = commitRange(blames)

            try:
                messages = getRevisionMessages(self.backend, rmin, rmax, self.localPath)
            except BackendUnavailable as exc:
                logger.warning(f"Couldn’t get revision messages r{rmin}:r{rmax}: {exc}")
                messages = {}

            self.blames = blames
            self.messages = messages

        return self.annotations()

    def annotations(self) -> list[GutterAnnotation]:
        annotations = []
        for blame in self.blames:
            text, icon = self._firstLineLabel(blame)
            annotations.append(GutterAnnotation(blame.lineStart, text, icon, True))
            annotations.extend(GutterAnnotation(line, "") for line in range(blame.lineStart + 1, blame.lineEnd))
        return annotations

    def _firstLineLabel(self, blame: BlameRange) -> tuple[str, str]:
        if blame.commit is None:
            return _("Uncommitted changes"), ""
        revision = blame.commit.revision
        message = self.messages.get(revision, "") or _("Revision {0}", revision)
        return message, self.gravatars.iconFor(blame.commit.author)

    def onSelectionChanged(self, line: int) -> list[int]:
        lines = selectionLines(self.blames, line)
        self.selectionHighlightChanged.emit(lines)
        return lines


def blameCurrentFile(model: Model, localPath: str) -> GutterBlame:
    localPath = os.path.normpath(os.path.abspath(localPath))
    wc = model.getRepository(localPath)
    if wc is None:
        raise NotAFile(_("This file doesn’t belong to any svn repository"))

    gutter = GutterBlame(localPath, wc.driver)
    gutter.decorate()
    return gutter
