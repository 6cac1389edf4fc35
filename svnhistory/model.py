# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

"""
Working copies known to the editor session.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable

from svnhistory.exceptions import BackendUnavailable
from svnhistory.qt import *
from svnhistory.svndriver import SvnDriver, SvnInfo
from svnhistory.svnri import isUrl
from svnhistory.toolbox.benchmark import benchmark

logger = logging.getLogger(__name__)


class WorkingCopy:
    root: str
    driver: SvnDriver
    info: SvnInfo

    def __init__(self, root: str, driver: SvnDriver, info: SvnInfo):
        self.root = os.path.normpath(root)
        self.driver = driver
        self.info = info

    def __repr__(self):
        return f"WorkingCopy({self.root!r}, {self.branchRoot!r}@{self.info.revision})"

    @property
    def branchRoot(self) -> str:
        "URL of the directory checked out at the root of this working copy."
        return self.info.url

    @property
    def baseRevision(self) -> int | None:
        try:
            return int(self.info.revision, 10)
        except ValueError:
            return None

    def contains(self, path: str) -> bool:
        if isUrl(path):
            return path == self.branchRoot or path.startswith(self.branchRoot.rstrip("/") + "/")
        path = os.path.normpath(os.path.abspath(path))
        return path == self.root or path.startswith(self.root + os.sep)


class Model(QObject):
    repositoriesChanged = Signal()

    driverFactory: Callable[..., SvnDriver]
    _workingCopies: list[WorkingCopy]

    def __init__(self, driverFactory: Callable[..., SvnDriver] = SvnDriver, parent=None):
        super().__init__(parent)
        self.driverFactory = driverFactory
        self._workingCopies = []
        self.workspaceFolders: list[str] = []

    @property
    def repositories(self) -> list[WorkingCopy]:
        return list(self._workingCopies)

    def openWorkingCopy(self, root: str) -> WorkingCopy:
        existing = self.getRepository(root)
        if existing is not None and existing.root == os.path.normpath(root):
            return existing

        driver = self.driverFactory(root)
        info = driver.info(root)
        wc = WorkingCopy(root, driver, info)
        self._workingCopies.append(wc)
        logger.info(f"Opened {wc}")
        self.repositoriesChanged.emit()
        return wc

    def closeWorkingCopy(self, root: str):
        root = os.path.normpath(root)
        self._workingCopies = [wc for wc in self._workingCopies if wc.root != root]
        self.repositoriesChanged.emit()

    @benchmark
    def scanWorkspace(self, folders: Iterable[str]):
        """
        Look for working copies in the given workspace folders
        and in their immediate subdirectories.
        """
        self.workspaceFolders = [os.path.normpath(f) for f in folders]

        for folder in self.workspaceFolders:
            candidates = [folder]
            try:
                candidates += [e.path for e in os.scandir(folder) if e.is_dir() and not e.name.startswith(".")]
            except OSError as exc:
                logger.warning(f"Cannot scan workspace folder {folder}: {exc}")
                continue

            for candidate in candidates:
                if not os.path.isdir(os.path.join(candidate, ".svn")):
                    continue
                try:
                    self.openWorkingCopy(candidate)
                except BackendUnavailable as exc:
                    logger.warning(f"Skipping {candidate}: {exc}")

    def getRepository(self, path: str) -> WorkingCopy | None:
        """ Find the innermost working copy that contains the given path or URL. """
        best = None
        for wc in self._workingCopies:
            if wc.contains(path) and (best is None or len(wc.root) > len(best.root)):
                best = wc
        return best

    def getRemoteRepository(self, url: str) -> SvnDriver:
        return self.driverFactory("", url)
